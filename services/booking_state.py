"""
Máquina de estados de la reserva.

pending -> confirmed -> checked_in -> checked_out, con cancelled como
salida desde pending/confirmed. checked_out y cancelled son terminales.
"""
from models import BookingStatus
from services.errors import InvalidTransition


BOOKING_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.CHECKED_IN, BookingStatus.CANCELLED},
    BookingStatus.CHECKED_IN: {BookingStatus.CHECKED_OUT},
    BookingStatus.CHECKED_OUT: set(),
    BookingStatus.CANCELLED: set(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in BOOKING_TRANSITIONS.items() if not targets
)


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return BookingStatus(target) in BOOKING_TRANSITIONS.get(BookingStatus(current), set())


def assert_booking_transition(current: BookingStatus, target: BookingStatus) -> None:
    current = BookingStatus(current)
    target = BookingStatus(target)
    if not can_transition(current, target):
        raise InvalidTransition(
            f"No se puede pasar de '{current.value}' a '{target.value}'",
            details={"current": current.value, "next": target.value},
        )
