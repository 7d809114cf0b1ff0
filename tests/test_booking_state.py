"""
Máquina de estados de reservas
"""
import pytest

from models import BookingStatus
from services.booking_state import (
    BOOKING_TRANSITIONS,
    TERMINAL_STATUSES,
    assert_booking_transition,
    can_transition,
)
from services.errors import InvalidTransition

ALLOWED = {
    (BookingStatus.PENDING, BookingStatus.CONFIRMED),
    (BookingStatus.PENDING, BookingStatus.CANCELLED),
    (BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN),
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED),
    (BookingStatus.CHECKED_IN, BookingStatus.CHECKED_OUT),
}


class TestTransitionTable:

    def test_terminales(self):
        assert TERMINAL_STATUSES == {BookingStatus.CHECKED_OUT, BookingStatus.CANCELLED}

    def test_todos_los_estados_definidos(self):
        assert set(BOOKING_TRANSITIONS) == set(BookingStatus)

    @pytest.mark.parametrize("current", list(BookingStatus))
    @pytest.mark.parametrize("target", list(BookingStatus))
    def test_clausura(self, current, target):
        """Sólo las transiciones de la tabla pasan; el resto es INVALID_TRANSITION"""
        if (current, target) in ALLOWED:
            assert can_transition(current, target)
            assert_booking_transition(current, target)
        else:
            assert not can_transition(current, target)
            with pytest.raises(InvalidTransition) as exc:
                assert_booking_transition(current, target)
            assert exc.value.details == {"current": current.value, "next": target.value}

    def test_acepta_strings(self):
        assert can_transition("pending", "confirmed")


class TestStatusEndpoint:
    """PATCH /bookings/{id}/status"""

    def test_flujo_completo(self, client, headers, seed, api):
        booking = api.create_booking(seed.room101, seed.guest_a, "2024-01-10", "2024-01-12").json()
        assert booking["status"] == "pending"

        confirmed = api.set_status(booking["id"], "confirmed")
        assert confirmed.status_code == 200
        assert confirmed.json()["status"] == "confirmed"

        checked_in = api.set_status(booking["id"], "checked_in")
        assert checked_in.status_code == 200
        assert checked_in.json()["checkedInAt"] is not None

        api.add_payment(booking["id"], "2000")
        checked_out = api.set_status(booking["id"], "checked_out")
        assert checked_out.status_code == 200
        assert checked_out.json()["status"] == "checked_out"
        assert checked_out.json()["checkedOutAt"] is not None

    def test_salto_invalido(self, client, headers, seed, api):
        booking = api.create_booking(seed.room101, seed.guest_a, "2024-01-10", "2024-01-12").json()
        response = api.set_status(booking["id"], "checked_in")
        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "INVALID_TRANSITION"
        assert body["details"] == {"current": "pending", "next": "checked_in"}

    def test_cancelada_es_terminal(self, client, headers, seed, api):
        booking = api.create_booking(seed.room101, seed.guest_a, "2024-01-10", "2024-01-12").json()
        assert api.set_status(booking["id"], "cancelled").status_code == 200
        response = api.set_status(booking["id"], "confirmed")
        assert response.status_code == 409
        assert response.json()["code"] == "INVALID_TRANSITION"

    def test_estado_desconocido(self, client, headers, seed, api):
        booking = api.create_booking(seed.room101, seed.guest_a, "2024-01-10", "2024-01-12").json()
        response = api.set_status(booking["id"], "no_show")
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_checkin_ocupa_y_checkout_libera_habitacion(self, client, headers, seed, api):
        booking = api.create_booking(seed.room101, seed.guest_a, "2024-01-10", "2024-01-12").json()
        api.set_status(booking["id"], "confirmed")
        api.set_status(booking["id"], "checked_in")

        planning = client.get("/planning", params={"from": "2024-01-01", "to": "2024-02-01"}, headers=headers).json()
        room = next(r for r in planning["rooms"] if r["id"] == seed.room101)
        assert room["status"] == "occupied"

        api.add_payment(booking["id"], "2000")
        api.set_status(booking["id"], "checked_out")
        planning = client.get("/planning", params={"from": "2024-01-01", "to": "2024-02-01"}, headers=headers).json()
        room = next(r for r in planning["rooms"] if r["id"] == seed.room101)
        assert room["status"] == "available"
