"""
Tests de PATCH /bookings/{id}/move-room
"""
from decimal import Decimal

from models import AuditEvent


def _move(client, headers, booking_id, room_id):
    return client.patch(f"/bookings/{booking_id}/move-room", json={"roomId": room_id}, headers=headers)


class TestMoverReserva:

    def test_mover_recalcula_total(self, client, headers, seed, api, db):
        booking = api.create_booking(seed.room101, seed.guest_a, "2024-01-10", "2024-01-12").json()
        response = _move(client, headers, booking["id"], seed.room102)
        assert response.status_code == 200
        data = response.json()
        assert data["roomId"] == seed.room102
        assert Decimal(data["totalPrice"]) == Decimal("2400")
        assert data["checkIn"] == "2024-01-10"
        assert data["checkOut"] == "2024-01-12"
        assert data["guestId"] == seed.guest_a

        evento = db.query(AuditEvent).filter(AuditEvent.action == "BOOKING_ROOM_MOVED").one()
        assert evento.payload["fromRoomId"] == seed.room101
        assert evento.payload["toRoomId"] == seed.room102

    def test_mover_despues_del_checkin(self, client, headers, seed, api):
        booking = api.create_booking(seed.room101, seed.guest_a, "2024-01-10", "2024-01-12").json()
        assert _move(client, headers, booking["id"], seed.room102).status_code == 200
        api.set_status(booking["id"], "confirmed")
        api.set_status(booking["id"], "checked_in")

        response = _move(client, headers, booking["id"], seed.room102)
        assert response.status_code == 409
        assert response.json()["code"] == "BOOKING_LOCKED"

    def test_misma_habitacion(self, client, headers, seed, api):
        booking = api.create_booking(seed.room101, seed.guest_a, "2024-01-10", "2024-01-12").json()
        response = _move(client, headers, booking["id"], seed.room101)
        assert response.status_code == 400
        assert response.json()["code"] == "SAME_ROOM"

    def test_destino_ocupado(self, client, headers, seed, api):
        api.create_booking(seed.room102, seed.guest_b, "2024-01-11", "2024-01-14")
        booking = api.create_booking(seed.room101, seed.guest_a, "2024-01-10", "2024-01-12").json()
        response = _move(client, headers, booking["id"], seed.room102)
        assert response.status_code == 409
        assert response.json()["code"] == "ROOM_NOT_AVAILABLE"

        # la reserva queda intacta
        data = client.get(f"/bookings/{booking['id']}", headers=headers).json()
        assert data["roomId"] == seed.room101
        assert Decimal(data["totalPrice"]) == Decimal("2000")

    def test_destino_en_mantenimiento(self, client, headers, seed, api):
        booking = api.create_booking(seed.room101, seed.guest_a, "2024-01-10", "2024-01-12").json()
        response = _move(client, headers, booking["id"], seed.room103)
        assert response.status_code == 409
        assert response.json()["code"] == "ROOM_IN_MAINTENANCE"

    def test_destino_sin_tarifa(self, client, headers, seed, api):
        booking = api.create_booking(seed.room101, seed.guest_a, "2024-01-10", "2024-01-12").json()
        response = _move(client, headers, booking["id"], seed.room104)
        assert response.status_code == 409
        assert response.json()["code"] == "ROOM_TYPE_MISSING_PRICE"

    def test_cancelada_bloqueada(self, client, headers, seed, api):
        booking = api.create_booking(seed.room101, seed.guest_a, "2024-01-10", "2024-01-12").json()
        api.set_status(booking["id"], "cancelled")
        response = _move(client, headers, booking["id"], seed.room102)
        assert response.status_code == 409
        assert response.json()["code"] == "BOOKING_LOCKED"

    def test_mover_a_mas_barata_con_sobrepago(self, client, headers, seed, api):
        booking = api.create_booking(seed.room102, seed.guest_a, "2024-01-10", "2024-01-12").json()
        assert api.add_payment(booking["id"], "2400").status_code == 201
        response = _move(client, headers, booking["id"], seed.room101)
        assert response.status_code == 409
        assert response.json()["code"] == "AMOUNT_EXCEEDS_BALANCE"

    def test_libera_habitacion_original(self, client, headers, seed, api):
        booking = api.create_booking(seed.room101, seed.guest_a, "2024-01-10", "2024-01-12").json()
        _move(client, headers, booking["id"], seed.room102)
        otra = api.create_booking(seed.room101, seed.guest_b, "2024-01-10", "2024-01-12")
        assert otra.status_code == 201
