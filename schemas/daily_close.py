from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import constr

from models import PaymentMethod
from schemas.common import CamelModel


class DailyCloseCreate(CamelModel):
    date_key: Optional[date] = None  # Default: día operativo actual del hotel
    notes: Optional[constr(strip_whitespace=True, max_length=500)] = None


class DailyClosePayment(CamelModel):
    id: int
    booking_id: int
    amount: Decimal
    method: PaymentMethod
    paid_at: datetime


class DailyClosePreview(CamelModel):
    date_key: date
    timezone: Optional[str] = None
    range_start: datetime  # UTC
    range_end: datetime  # UTC, exclusivo
    total_completed: Decimal
    count_completed: int
    by_method: Dict[str, Decimal]
    payments: List[DailyClosePayment]


class DailyCloseRead(CamelModel):
    id: int
    hotel_id: int
    date_key: date
    total_completed: Decimal
    count_completed: int
    by_method: Dict[str, Decimal]
    notes: Optional[str] = None
    created_by_id: Optional[int] = None
    created_by: Optional[str] = None
    created_at: datetime
