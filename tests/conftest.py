"""
Fixtures comunes: base SQLite en memoria, dos hoteles sembrados y tokens.
"""
import os

# Antes de importar la app: la conexión se arma al importar database.conexion
os.environ["DATABASE_URL"] = "sqlite://"

from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from database.conexion import Base, SessionLocal, engine
from main import app
from models import Guest, Hotel, Room, RoomStatus, RoomType
from utils.auth import create_access_token
from utils.tenant import TenantContext

HOTEL_TZ = "America/Argentina/Buenos_Aires"


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def seed():
    """
    Hotel principal con:
      101 Standard 1000/noche, 102 Superior 1200/noche,
      103 en mantenimiento, 104 sin tarifa base, 201 Standard (piso 2).
    Hotel secundario con su propia 101.
    """
    session = SessionLocal()
    try:
        hotel = Hotel(code="CENTRO", name="Hotel Centro", timezone=HOTEL_TZ)
        other = Hotel(code="NORTE", name="Hotel Norte", timezone=HOTEL_TZ)
        session.add_all([hotel, other])
        session.flush()

        standard = RoomType(hotel_id=hotel.id, name="Standard", base_price=Decimal("1000.00"))
        superior = RoomType(hotel_id=hotel.id, name="Superior", base_price=Decimal("1200.00"))
        sin_tarifa = RoomType(hotel_id=hotel.id, name="Sin tarifa", base_price=None)
        other_type = RoomType(hotel_id=other.id, name="Standard", base_price=Decimal("800.00"))
        session.add_all([standard, superior, sin_tarifa, other_type])
        session.flush()

        room101 = Room(hotel_id=hotel.id, room_type_id=standard.id, number="101", floor=1)
        room102 = Room(hotel_id=hotel.id, room_type_id=superior.id, number="102", floor=1)
        room103 = Room(
            hotel_id=hotel.id, room_type_id=standard.id, number="103", floor=1,
            status=RoomStatus.MAINTENANCE,
        )
        room104 = Room(hotel_id=hotel.id, room_type_id=sin_tarifa.id, number="104", floor=1)
        room201 = Room(hotel_id=hotel.id, room_type_id=standard.id, number="201", floor=2)
        other_room = Room(hotel_id=other.id, room_type_id=other_type.id, number="101", floor=1)
        session.add_all([room101, room102, room103, room104, room201, other_room])

        guest_a = Guest(hotel_id=hotel.id, first_name="Ana", last_name="García")
        guest_b = Guest(hotel_id=hotel.id, first_name="Bruno", last_name="Pérez")
        other_guest = Guest(hotel_id=other.id, first_name="Carla", last_name="Díaz")
        session.add_all([guest_a, guest_b, other_guest])
        session.commit()

        return SimpleNamespace(
            hotel_id=hotel.id,
            other_hotel_id=other.id,
            room101=room101.id,
            room102=room102.id,
            room103=room103.id,
            room104=room104.id,
            room201=room201.id,
            other_room=other_room.id,
            guest_a=guest_a.id,
            guest_b=guest_b.id,
            other_guest=other_guest.id,
        )
    finally:
        session.close()


def make_headers(hotel_id: int, username: str = "recepcion", user_id: int = 1) -> dict:
    token = create_access_token({"sub": username, "user_id": user_id, "hotel_id": hotel_id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers(seed):
    return make_headers(seed.hotel_id)


@pytest.fixture
def other_headers(seed):
    return make_headers(seed.other_hotel_id, username="norte", user_id=2)


@pytest.fixture
def ctx(seed):
    return TenantContext(hotel_id=seed.hotel_id, user_id=1, username="tester", timezone=HOTEL_TZ)


@pytest.fixture
def other_ctx(seed):
    return TenantContext(hotel_id=seed.other_hotel_id, user_id=2, username="norte", timezone=HOTEL_TZ)


@pytest.fixture
def api(client, headers):
    """Atajos para el hotel principal"""

    def create_booking(room_id, guest_id, check_in, check_out):
        return client.post(
            "/bookings",
            json={"roomId": room_id, "guestId": guest_id, "checkIn": check_in, "checkOut": check_out},
            headers=headers,
        )

    def set_status(booking_id, status):
        return client.patch(f"/bookings/{booking_id}/status", json={"status": status}, headers=headers)

    def add_payment(booking_id, amount, method="cash", status="completed", paid_at=None):
        body = {"bookingId": booking_id, "amount": str(amount), "method": method, "status": status}
        if paid_at:
            body["paidAt"] = paid_at
        return client.post("/payments", json=body, headers=headers)

    def add_charge(booking_id, unit_price, quantity=1, category="minibar", description="Consumo"):
        return client.post(
            "/charges",
            json={
                "bookingId": booking_id,
                "category": category,
                "description": description,
                "quantity": quantity,
                "unitPrice": str(unit_price),
            },
            headers=headers,
        )

    return SimpleNamespace(
        create_booking=create_booking,
        set_status=set_status,
        add_payment=add_payment,
        add_charge=add_charge,
    )


@pytest.fixture
def token_headers():
    return make_headers
