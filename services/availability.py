"""
Disponibilidad de habitaciones.

Dos rangos [a, b) y [c, d) se pisan si a < d y c < b: un check-out y un
check-in el mismo día no chocan. Las reservas checked_out siguen contando
como ocupación histórica; sólo las canceladas se ignoran.
"""
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from models import Booking, Room, RoomStatus, OCCUPYING_STATUSES
from services.errors import InvalidDateRange, RoomInMaintenance, RoomNotAvailable, RoomNotFound
from utils.logging_utils import log_event
from utils.tenant import TenantContext, scoped


class AvailabilityService:
    """Chequeo de solapamiento y estado operativo de una habitación"""

    @staticmethod
    def validate_range(check_in: date, check_out: date) -> None:
        if check_in is None or check_out is None or check_out <= check_in:
            raise InvalidDateRange(details={"checkIn": str(check_in), "checkOut": str(check_out)})

    @staticmethod
    def get_room(db: Session, ctx: TenantContext, room_id: int, lock: bool = False) -> Room:
        query = scoped(db, Room, ctx).filter(Room.id == room_id)
        if lock:
            # Serializa a todos los que escriben reservas sobre esta habitación
            query = query.with_for_update()
        room = query.first()
        if not room:
            raise RoomNotFound()
        return room

    @staticmethod
    def find_conflicts(
        db: Session,
        ctx: TenantContext,
        room_id: int,
        check_in: date,
        check_out: date,
        exclude_booking_id: Optional[int] = None,
    ) -> List[Booking]:
        query = scoped(db, Booking, ctx).filter(
            Booking.room_id == room_id,
            Booking.status.in_(OCCUPYING_STATUSES),
            Booking.check_in < check_out,
            Booking.check_out > check_in,
        )
        if exclude_booking_id is not None:
            query = query.filter(Booking.id != exclude_booking_id)
        return query.order_by(Booking.check_in).all()

    @staticmethod
    def is_available(
        db: Session,
        ctx: TenantContext,
        room_id: int,
        check_in: date,
        check_out: date,
        exclude_booking_id: Optional[int] = None,
    ) -> bool:
        """
        True si la habitación puede tomar el rango.

        Raises:
            InvalidDateRange, RoomNotFound, RoomInMaintenance
        """
        AvailabilityService.validate_range(check_in, check_out)
        room = AvailabilityService.get_room(db, ctx, room_id)
        if room.status == RoomStatus.MAINTENANCE:
            raise RoomInMaintenance(details={"roomId": room.id})
        conflicts = AvailabilityService.find_conflicts(
            db, ctx, room_id, check_in, check_out, exclude_booking_id
        )
        return not conflicts

    @staticmethod
    def ensure_available(
        db: Session,
        ctx: TenantContext,
        room_id: int,
        check_in: date,
        check_out: date,
        exclude_booking_id: Optional[int] = None,
    ) -> Room:
        """
        Bloquea la habitación y valida el rango dentro de la transacción
        que va a escribir la reserva. Devuelve la habitación bloqueada.
        """
        AvailabilityService.validate_range(check_in, check_out)
        room = AvailabilityService.get_room(db, ctx, room_id, lock=True)
        if room.status == RoomStatus.MAINTENANCE:
            raise RoomInMaintenance(details={"roomId": room.id})

        conflicts = AvailabilityService.find_conflicts(
            db, ctx, room_id, check_in, check_out, exclude_booking_id
        )
        if conflicts:
            log_event(
                "disponibilidad",
                ctx.username,
                "Habitacion ocupada",
                f"room_id={room_id}, rango={check_in}..{check_out}, conflictos={[b.id for b in conflicts]}",
            )
            raise RoomNotAvailable(details={"conflictingBookingIds": [b.id for b in conflicts]})
        return room
