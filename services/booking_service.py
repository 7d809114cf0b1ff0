"""
Servicios de reservas: alta, edición, cambios de estado, movimiento de
habitación y baja.

Cada operación corre en una única transacción: se bloquea la fila de la
habitación (o de la reserva) antes de validar y se hace commit al final.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from models import Booking, BookingStatus, Guest, Room, RoomStatus
from services.audit import record_event
from services.availability import AvailabilityService
from services.booking_state import assert_booking_transition
from services.errors import (
    BookingHasDue,
    BookingLocked,
    BookingNotFound,
    GuestNotFound,
    RoomTypeMissingPrice,
    SameRoom,
)
from services.ledger import LedgerService, LedgerSummary, ZERO, to_money
from utils.logging_utils import log_event
from utils.tenant import TenantContext, scoped


def _price_for(room: Room, nights: int) -> Decimal:
    price = room.nightly_price()
    if price is None:
        raise RoomTypeMissingPrice(details={"roomId": room.id})
    return to_money(price * nights)


def _snapshot(booking: Booking) -> dict:
    return {
        "roomId": booking.room_id,
        "guestId": booking.guest_id,
        "checkIn": booking.check_in,
        "checkOut": booking.check_out,
        "totalPrice": booking.total_price,
        "status": booking.status,
    }


class BookingService:

    # ---------- lecturas ----------

    @staticmethod
    def get_booking(db: Session, ctx: TenantContext, booking_id: int, lock: bool = False) -> Booking:
        query = scoped(db, Booking, ctx).filter(Booking.id == booking_id)
        if lock:
            query = query.with_for_update()
        booking = query.first()
        if not booking:
            raise BookingNotFound()
        return booking

    @staticmethod
    def get_with_ledger(db: Session, ctx: TenantContext, booking_id: int) -> Tuple[Booking, LedgerSummary]:
        booking = BookingService.get_booking(db, ctx, booking_id)
        return booking, LedgerService.compute_due(db, ctx, booking)

    @staticmethod
    def list_with_ledger(
        db: Session,
        ctx: TenantContext,
        status: Optional[BookingStatus] = None,
        room_id: Optional[int] = None,
        guest_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[Tuple[Booking, LedgerSummary]]:
        query = scoped(db, Booking, ctx)
        if status is not None:
            query = query.filter(Booking.status == status)
        if room_id is not None:
            query = query.filter(Booking.room_id == room_id)
        if guest_id is not None:
            query = query.filter(Booking.guest_id == guest_id)
        if date_from is not None:
            query = query.filter(Booking.check_in >= date_from)
        if date_to is not None:
            query = query.filter(Booking.check_out <= date_to)

        bookings = query.order_by(Booking.check_in, Booking.id).all()
        summaries = LedgerService.summarize(db, ctx, bookings)
        return [(booking, summaries[booking.id]) for booking in bookings]

    # ---------- escrituras ----------

    @staticmethod
    def _ensure_guest(db: Session, ctx: TenantContext, guest_id: int) -> Guest:
        guest = scoped(db, Guest, ctx).filter(Guest.id == guest_id).first()
        if not guest:
            raise GuestNotFound()
        return guest

    @staticmethod
    def create_booking(
        db: Session,
        ctx: TenantContext,
        room_id: int,
        guest_id: int,
        check_in: date,
        check_out: date,
        notes: Optional[str] = None,
    ) -> Booking:
        AvailabilityService.validate_range(check_in, check_out)
        BookingService._ensure_guest(db, ctx, guest_id)
        room = AvailabilityService.ensure_available(db, ctx, room_id, check_in, check_out)

        booking = Booking(
            hotel_id=ctx.hotel_id,
            room_id=room.id,
            guest_id=guest_id,
            check_in=check_in,
            check_out=check_out,
            status=BookingStatus.PENDING,
            notes=notes,
        )
        booking.total_price = _price_for(room, booking.nights())
        db.add(booking)
        db.flush()

        record_event(db, ctx, "booking", booking.id, "BOOKING_CREATED", _snapshot(booking))
        db.commit()
        db.refresh(booking)
        log_event("reservas", ctx.username, "Crear reserva", f"id={booking.id}, room_id={room.id}")
        return booking

    @staticmethod
    def update_booking(
        db: Session,
        ctx: TenantContext,
        booking_id: int,
        room_id: int,
        guest_id: int,
        check_in: date,
        check_out: date,
        notes: Optional[str] = None,
    ) -> Booking:
        booking = BookingService.get_booking(db, ctx, booking_id, lock=True)
        if not booking.is_editable():
            raise BookingLocked(details={"status": booking.status.value})

        AvailabilityService.validate_range(check_in, check_out)
        BookingService._ensure_guest(db, ctx, guest_id)
        room = AvailabilityService.ensure_available(
            db, ctx, room_id, check_in, check_out, exclude_booking_id=booking.id
        )

        before = _snapshot(booking)
        booking.room_id = room.id
        booking.guest_id = guest_id
        booking.check_in = check_in
        booking.check_out = check_out
        booking.notes = notes
        booking.total_price = _price_for(room, booking.nights())
        db.flush()

        LedgerService.ensure_not_overpaid(db, ctx, booking)
        record_event(
            db, ctx, "booking", booking.id, "BOOKING_UPDATED",
            {"before": before, "after": _snapshot(booking)},
        )
        db.commit()
        db.refresh(booking)
        log_event("reservas", ctx.username, "Editar reserva", f"id={booking.id}")
        return booking

    @staticmethod
    def change_status(db: Session, ctx: TenantContext, booking_id: int, target: BookingStatus) -> Booking:
        booking = BookingService.get_booking(db, ctx, booking_id, lock=True)
        current = booking.status
        assert_booking_transition(current, target)

        if target == BookingStatus.CHECKED_OUT:
            summary = LedgerService.compute_due(db, ctx, booking)
            if summary.due > ZERO:
                log_event(
                    "reservas", ctx.username, "Checkout bloqueado por saldo",
                    f"id={booking.id}, due={summary.due}",
                )
                raise BookingHasDue(
                    f"La reserva tiene un saldo pendiente de {summary.due}",
                    details={"due": str(summary.due)},
                )

        room = scoped(db, Room, ctx).filter(Room.id == booking.room_id).first()
        now = datetime.utcnow()
        if target == BookingStatus.CHECKED_IN:
            booking.checked_in_at = now
            if room and room.status != RoomStatus.MAINTENANCE:
                room.status = RoomStatus.OCCUPIED
        elif target == BookingStatus.CHECKED_OUT:
            booking.checked_out_at = now
            if room and room.status != RoomStatus.MAINTENANCE:
                room.status = RoomStatus.AVAILABLE

        booking.status = target
        db.flush()

        record_event(
            db, ctx, "booking", booking.id, "BOOKING_STATUS_CHANGED",
            {"from": current, "to": target},
        )
        db.commit()
        db.refresh(booking)
        log_event("reservas", ctx.username, "Cambiar estado", f"id={booking.id}, {current.value}->{target.value}")
        return booking

    @staticmethod
    def move_booking(db: Session, ctx: TenantContext, booking_id: int, new_room_id: int) -> Booking:
        """
        Cambia la habitación manteniendo fechas y huésped; recalcula el
        total con la tarifa del nuevo tipo de habitación.
        """
        booking = BookingService.get_booking(db, ctx, booking_id, lock=True)
        if not booking.is_editable():
            raise BookingLocked(details={"status": booking.status.value})
        if new_room_id == booking.room_id:
            raise SameRoom(details={"roomId": new_room_id})

        room = AvailabilityService.ensure_available(
            db, ctx, new_room_id, booking.check_in, booking.check_out, exclude_booking_id=booking.id
        )
        previous_room_id = booking.room_id
        previous_total = booking.total_price

        booking.room_id = room.id
        booking.total_price = _price_for(room, booking.nights())
        db.flush()

        LedgerService.ensure_not_overpaid(db, ctx, booking)
        record_event(
            db, ctx, "booking", booking.id, "BOOKING_ROOM_MOVED",
            {
                "fromRoomId": previous_room_id,
                "toRoomId": room.id,
                "previousTotal": previous_total,
                "newTotal": booking.total_price,
            },
            descripcion=f"Reserva {booking.id} movida de hab {previous_room_id} a {room.id}",
        )
        db.commit()
        db.refresh(booking)
        log_event(
            "room_move", ctx.username, "Mover reserva",
            f"id={booking.id}, {previous_room_id}->{room.id}, total={booking.total_price}",
        )
        return booking

    @staticmethod
    def delete_booking(db: Session, ctx: TenantContext, booking_id: int) -> None:
        """Baja física; sólo pending o cancelled. Arrastra cargos y pagos."""
        booking = BookingService.get_booking(db, ctx, booking_id, lock=True)
        if not booking.is_deletable():
            raise BookingLocked(
                "Sólo se pueden eliminar reservas pendientes o canceladas",
                details={"status": booking.status.value},
            )

        record_event(db, ctx, "booking", booking.id, "BOOKING_DELETED", _snapshot(booking))
        db.delete(booking)
        db.commit()
        log_event("reservas", ctx.username, "Eliminar reserva", f"id={booking_id}")
