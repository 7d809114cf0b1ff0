from datetime import datetime
from decimal import Decimal
import enum

from sqlalchemy import (
    Column,
    Integer,
    String,
    Date,
    DateTime,
    ForeignKey,
    Text,
    UniqueConstraint,
    Index,
    Numeric,
    JSON,
    CheckConstraint,
    Enum,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from config import DEFAULT_HOTEL_TIMEZONE
from database.conexion import Base

# JSONB en PostgreSQL, JSON genérico en SQLite (tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")

# Todos los timestamps se guardan en UTC (naive), igual que datetime.utcnow


def _enum_column(enum_cls, name, **kwargs):
    return Column(
        Enum(enum_cls, name=name, values_callable=lambda obj: [e.value for e in obj]),
        **kwargs,
    )


# ============================================================================
# ENUMS
# ============================================================================

class RoomStatus(str, enum.Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"


class ChargeCategory(str, enum.Enum):
    MINIBAR = "minibar"
    SERVICE = "service"
    LAUNDRY = "laundry"
    OTHER = "other"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


# Reservas que ocupan la habitación (todas menos canceladas)
OCCUPYING_STATUSES = (
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
    BookingStatus.CHECKED_IN,
    BookingStatus.CHECKED_OUT,
)

# Estados en los que fechas y habitación todavía se pueden modificar
EDITABLE_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)

DELETABLE_STATUSES = (BookingStatus.PENDING, BookingStatus.CANCELLED)


# ============================================================================
# TENANT
# ============================================================================

class Hotel(Base):
    """Tenant: un hotel con sus habitaciones, reservas y caja"""
    __tablename__ = "hotels"
    __table_args__ = (
        UniqueConstraint("code", name="uq_hotel_code"),
    )

    id = Column(Integer, primary_key=True)
    code = Column(String(30), nullable=False)
    name = Column(String(150), nullable=False)
    timezone = Column(String(50), nullable=False, default=DEFAULT_HOTEL_TIMEZONE)
    created_at = Column(DateTime, default=datetime.utcnow)

    rooms = relationship("Room", back_populates="hotel")
    room_types = relationship("RoomType", back_populates="hotel")


# ============================================================================
# INVENTARIO (consumido por el core, CRUD externo)
# ============================================================================

class RoomType(Base):
    __tablename__ = "room_types"
    __table_args__ = (
        UniqueConstraint("hotel_id", "name", name="uq_room_type_hotel_name"),
    )

    id = Column(Integer, primary_key=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(50), nullable=False)
    base_price = Column(Numeric(12, 2), nullable=True)  # Tarifa por noche

    hotel = relationship("Hotel", back_populates="room_types")
    rooms = relationship("Room", back_populates="room_type")


class Room(Base):
    __tablename__ = "rooms"
    __table_args__ = (
        UniqueConstraint("hotel_id", "number", name="uq_room_hotel_number"),
        Index("idx_room_hotel", "hotel_id"),
    )

    id = Column(Integer, primary_key=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id", ondelete="CASCADE"), nullable=False)
    room_type_id = Column(Integer, ForeignKey("room_types.id", ondelete="SET NULL"), nullable=True)
    number = Column(String(10), nullable=False)
    floor = Column(Integer, nullable=True)
    status = _enum_column(RoomStatus, "room_status", nullable=False, default=RoomStatus.AVAILABLE)

    hotel = relationship("Hotel", back_populates="rooms")
    room_type = relationship("RoomType", back_populates="rooms")

    def nightly_price(self):
        """Tarifa base del tipo de habitación, None si no está configurada"""
        if self.room_type is None or self.room_type.base_price is None:
            return None
        return Decimal(self.room_type.base_price)


class Guest(Base):
    __tablename__ = "guests"
    __table_args__ = (
        Index("idx_guest_hotel", "hotel_id"),
    )

    id = Column(Integer, primary_key=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id", ondelete="CASCADE"), nullable=False)
    first_name = Column(String(60), nullable=False)
    last_name = Column(String(60), nullable=False)
    email = Column(String(100), nullable=True)
    document = Column(String(30), nullable=True)


# ============================================================================
# RESERVAS
# ============================================================================

class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("check_out > check_in", name="ck_booking_dates"),
        Index("idx_booking_hotel_room", "hotel_id", "room_id"),
        Index("idx_booking_dates", "check_in", "check_out"),
        Index("idx_booking_status", "status"),
    )

    id = Column(Integer, primary_key=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id", ondelete="CASCADE"), nullable=False)
    room_id = Column(Integer, ForeignKey("rooms.id", ondelete="RESTRICT"), nullable=False)
    guest_id = Column(Integer, ForeignKey("guests.id", ondelete="RESTRICT"), nullable=False)

    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)  # Exclusivo: noche del check_out no se cobra
    total_price = Column(Numeric(12, 2), nullable=False, default=0)
    status = _enum_column(BookingStatus, "booking_status", nullable=False, default=BookingStatus.PENDING)
    notes = Column(Text, nullable=True)

    checked_in_at = Column(DateTime, nullable=True)
    checked_out_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    room = relationship("Room")
    guest = relationship("Guest")
    charges = relationship("Charge", back_populates="booking", cascade="all, delete-orphan")
    payments = relationship("Payment", back_populates="booking", cascade="all, delete-orphan")

    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    def is_editable(self) -> bool:
        """Fechas y habitación sólo se tocan antes del check-in"""
        return self.status in EDITABLE_STATUSES

    def is_deletable(self) -> bool:
        return self.status in DELETABLE_STATUSES


# ============================================================================
# LEDGER: CARGOS Y PAGOS
# ============================================================================

class Charge(Base):
    """Consumo o servicio cargado a la cuenta de una reserva"""
    __tablename__ = "charges"
    __table_args__ = (
        Index("idx_charge_hotel_booking", "hotel_id", "booking_id"),
        Index("idx_charge_created", "created_at"),
    )

    id = Column(Integer, primary_key=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id", ondelete="CASCADE"), nullable=False)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False)
    room_id = Column(Integer, ForeignKey("rooms.id", ondelete="SET NULL"), nullable=True)

    category = _enum_column(ChargeCategory, "charge_category", nullable=False, default=ChargeCategory.OTHER)
    description = Column(String(200), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)

    created_by = Column(String(50), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    booking = relationship("Booking", back_populates="charges")


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payment_amount_positive"),
        Index("idx_payment_hotel_booking", "hotel_id", "booking_id"),
        Index("idx_payment_paid_at", "paid_at"),
    )

    id = Column(Integer, primary_key=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id", ondelete="CASCADE"), nullable=False)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False)

    amount = Column(Numeric(12, 2), nullable=False)
    method = _enum_column(PaymentMethod, "payment_method", nullable=False)
    status = _enum_column(PaymentStatus, "payment_status", nullable=False, default=PaymentStatus.COMPLETED)
    reference = Column(String(100), nullable=True)  # Nro de comprobante / transferencia
    notes = Column(Text, nullable=True)

    # Fecha efectiva del pago (agrupa el cierre diario)
    paid_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    created_by = Column(String(50), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    booking = relationship("Booking", back_populates="payments")


# ============================================================================
# CIERRE DIARIO
# ============================================================================

class DailyClose(Base):
    """Snapshot inmutable de los pagos completados de un día operativo"""
    __tablename__ = "daily_closes"
    __table_args__ = (
        UniqueConstraint("hotel_id", "date_key", name="uq_daily_close_hotel_date"),
        Index("idx_daily_close_date", "date_key"),
    )

    id = Column(Integer, primary_key=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id", ondelete="CASCADE"), nullable=False)
    date_key = Column(Date, nullable=False)

    total_completed = Column(Numeric(12, 2), nullable=False, default=0)
    count_completed = Column(Integer, nullable=False, default=0)
    by_method = Column(JSONType, nullable=False)  # {"cash": "500.00", "card": "1500.00", ...}
    notes = Column(Text, nullable=True)

    created_by_id = Column(Integer, nullable=True)
    created_by = Column(String(50), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


# ============================================================================
# AUDITORÍA
# ============================================================================

class AuditEvent(Base):
    __tablename__ = "audit_events"
    __table_args__ = (
        Index("idx_audit_hotel_entity", "hotel_id", "entity_type", "entity_id"),
        Index("idx_audit_action", "action"),
    )

    id = Column(Integer, primary_key=True)
    hotel_id = Column(Integer, ForeignKey("hotels.id", ondelete="CASCADE"), nullable=False)

    # "booking" | "charge" | "payment" | "daily_close"
    entity_type = Column(String(30), nullable=False)
    entity_id = Column(Integer, nullable=False)

    action = Column(String(50), nullable=False)  # BOOKING_CREATED, PAYMENT_UPDATED, ...
    usuario = Column(String(50), nullable=True)

    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)
    descripcion = Column(Text, nullable=True)
    payload = Column(JSONType, nullable=True)
