"""
Servicios de negocio: reservas, disponibilidad, ledger y caja
"""

from .availability import AvailabilityService
from .booking_service import BookingService
from .billing import ChargeService, PaymentService
from .daily_close import DailyCloseService
from .ledger import LedgerService, LedgerSummary
from .planning import PlanningService

__all__ = [
    "AvailabilityService",
    "BookingService",
    "ChargeService",
    "PaymentService",
    "DailyCloseService",
    "LedgerService",
    "LedgerSummary",
    "PlanningService",
]
