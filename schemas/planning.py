from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from models import BookingStatus, RoomStatus
from schemas.common import CamelModel


class PlanningRoom(CamelModel):
    id: int
    number: str
    floor: Optional[int] = None
    status: RoomStatus
    room_type_id: Optional[int] = None


class PlanningBooking(CamelModel):
    id: int
    room_id: int
    guest_id: int
    check_in: date
    check_out: date
    status: BookingStatus
    total_price: Decimal


class PlanningRead(CamelModel):
    from_date: date = Field(..., alias="from")
    to_date: date = Field(..., alias="to")
    rooms: List[PlanningRoom]
    bookings: List[PlanningBooking]
