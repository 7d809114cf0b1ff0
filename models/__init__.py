"""
Archivo de inicialización del paquete models.
Expone todas las clases para que SQLAlchemy (Base.metadata) las detecte
al importar 'models'.
"""

from .core import (
    RoomStatus,
    BookingStatus,
    ChargeCategory,
    PaymentMethod,
    PaymentStatus,
    OCCUPYING_STATUSES,
    EDITABLE_STATUSES,
    DELETABLE_STATUSES,
    Hotel,
    RoomType,
    Room,
    Guest,
    Booking,
    Charge,
    Payment,
    DailyClose,
    AuditEvent,
)

__all__ = [
    "RoomStatus", "BookingStatus", "ChargeCategory", "PaymentMethod", "PaymentStatus",
    "OCCUPYING_STATUSES", "EDITABLE_STATUSES", "DELETABLE_STATUSES",
    "Hotel", "RoomType", "Room", "Guest",
    "Booking", "Charge", "Payment",
    "DailyClose", "AuditEvent",
]
