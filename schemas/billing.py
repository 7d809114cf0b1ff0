"""
Schemas de cargos y pagos de reservas
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, PositiveInt, condecimal, constr

from models import ChargeCategory, PaymentMethod, PaymentStatus
from schemas.common import CamelModel


class ChargeCreate(CamelModel):
    booking_id: int = Field(..., gt=0)
    category: ChargeCategory = ChargeCategory.OTHER
    description: constr(strip_whitespace=True, min_length=1, max_length=200)
    quantity: PositiveInt = 1
    unit_price: condecimal(gt=0, max_digits=12, decimal_places=2)


class ChargeUpdate(CamelModel):
    category: Optional[ChargeCategory] = None
    description: Optional[constr(strip_whitespace=True, min_length=1, max_length=200)] = None
    quantity: Optional[PositiveInt] = None
    unit_price: Optional[condecimal(gt=0, max_digits=12, decimal_places=2)] = None


class ChargeRead(CamelModel):
    id: int
    booking_id: int
    room_id: Optional[int] = None
    category: ChargeCategory
    description: str
    quantity: int
    unit_price: Decimal
    total: Decimal
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PaymentCreate(CamelModel):
    booking_id: int = Field(..., gt=0)
    amount: condecimal(gt=0, max_digits=12, decimal_places=2)
    method: PaymentMethod
    status: PaymentStatus = PaymentStatus.COMPLETED
    paid_at: Optional[datetime] = None  # Sin zona horaria = hora local del hotel
    reference: Optional[constr(strip_whitespace=True, max_length=100)] = None
    notes: Optional[str] = None


class PaymentUpdate(CamelModel):
    amount: Optional[condecimal(gt=0, max_digits=12, decimal_places=2)] = None
    method: Optional[PaymentMethod] = None
    status: Optional[PaymentStatus] = None
    paid_at: Optional[datetime] = None
    reference: Optional[constr(strip_whitespace=True, max_length=100)] = None
    notes: Optional[str] = None


class PaymentRead(CamelModel):
    id: int
    booking_id: int
    amount: Decimal
    method: PaymentMethod
    status: PaymentStatus
    paid_at: datetime
    reference: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
