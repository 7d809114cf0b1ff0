from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, constr

from models import BookingStatus
from schemas.common import CamelModel


class BookingCreate(CamelModel):
    room_id: int = Field(..., gt=0)
    guest_id: int = Field(..., gt=0)
    # El orden check_in < check_out lo valida el servicio (INVALID_DATES)
    check_in: date
    check_out: date
    notes: Optional[constr(strip_whitespace=True, max_length=500)] = None


class BookingUpdate(BookingCreate):
    pass


class BookingStatusUpdate(CamelModel):
    status: BookingStatus


class BookingMoveRoom(CamelModel):
    room_id: int = Field(..., gt=0)


class BookingRead(CamelModel):
    id: int
    hotel_id: int
    room_id: int
    guest_id: int
    check_in: date
    check_out: date
    total_price: Decimal
    status: BookingStatus
    notes: Optional[str] = None
    checked_in_at: Optional[datetime] = None
    checked_out_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BookingWithLedger(BookingRead):
    """Reserva con el saldo calculado por el ledger"""
    charges_total: Decimal
    paid_completed: Decimal
    due_amount: Decimal


class LedgerRead(CamelModel):
    booking_id: int
    total_price: Decimal
    charges_total: Decimal
    paid_completed: Decimal
    due: Decimal


class AvailabilityRead(CamelModel):
    room_id: int
    check_in: date
    check_out: date
    available: bool
