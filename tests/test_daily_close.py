"""
Cierre diario: preview, creación única e historial
"""
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from models import AuditEvent, DailyClose


@pytest.fixture
def pagos_del_15(client, headers, seed, api):
    """cash 500 + card 1500 + transfer 300 el 15/01 (hora del hotel)"""
    a = api.create_booking(seed.room101, seed.guest_a, "2024-01-14", "2024-01-16").json()
    b = api.create_booking(seed.room102, seed.guest_b, "2024-01-14", "2024-01-16").json()
    assert api.add_payment(a["id"], "500", method="cash", paid_at="2024-01-15T09:00:00").status_code == 201
    assert api.add_payment(a["id"], "1500", method="card", paid_at="2024-01-15T18:30:00").status_code == 201
    assert api.add_payment(b["id"], "300", method="transfer", paid_at="2024-01-15T12:00:00").status_code == 201
    # no entran: pendiente, fallido y otro día
    api.add_payment(b["id"], "100", method="cash", status="pending", paid_at="2024-01-15T13:00:00")
    api.add_payment(b["id"], "100", method="cash", status="failed", paid_at="2024-01-15T13:00:00")
    api.add_payment(b["id"], "200", method="cash", paid_at="2024-01-16T09:00:00")
    return a, b


class TestPreview:
    """GET /daily-close/preview"""

    def test_agrega_por_metodo(self, client, headers, pagos_del_15):
        response = client.get("/daily-close/preview", params={"date": "2024-01-15"}, headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["dateKey"] == "2024-01-15"
        assert Decimal(data["totalCompleted"]) == Decimal("2300")
        assert data["countCompleted"] == 3
        assert {k: Decimal(v) for k, v in data["byMethod"].items()} == {
            "cash": Decimal("500"),
            "card": Decimal("1500"),
            "transfer": Decimal("300"),
        }
        assert len(data["payments"]) == 3

    def test_es_idempotente(self, client, headers, pagos_del_15):
        primera = client.get("/daily-close/preview", params={"date": "2024-01-15"}, headers=headers).json()
        segunda = client.get("/daily-close/preview", params={"date": "2024-01-15"}, headers=headers).json()
        assert primera == segunda

    def test_no_persiste(self, client, headers, pagos_del_15):
        client.get("/daily-close/preview", params={"date": "2024-01-15"}, headers=headers)
        assert client.get("/daily-close", headers=headers).json() == []

    def test_dia_vacio_lista_todos_los_metodos(self, client, headers, seed):
        data = client.get("/daily-close/preview", params={"date": "2024-03-01"}, headers=headers).json()
        assert Decimal(data["totalCompleted"]) == Decimal("0")
        assert set(data["byMethod"]) == {"cash", "card", "transfer"}

    def test_usa_dia_local_del_hotel(self, client, headers, seed, api):
        """22:30 en Buenos Aires del 15 es 01:30 UTC del 16: cuenta para el 15"""
        booking = api.create_booking(seed.room101, seed.guest_a, "2024-01-14", "2024-01-16").json()
        api.add_payment(booking["id"], "700", method="card", paid_at="2024-01-16T01:30:00Z")

        dia_15 = client.get("/daily-close/preview", params={"date": "2024-01-15"}, headers=headers).json()
        dia_16 = client.get("/daily-close/preview", params={"date": "2024-01-16"}, headers=headers).json()
        assert Decimal(dia_15["totalCompleted"]) == Decimal("700")
        assert Decimal(dia_16["totalCompleted"]) == Decimal("0")
        assert dia_15["rangeStart"].startswith("2024-01-15T03:00:00")

    def test_fecha_invalida(self, client, headers, seed):
        response = client.get("/daily-close/preview", params={"date": "2024-02-30"}, headers=headers)
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_DATES"


class TestCrearCierre:
    """POST /daily-close"""

    def test_crear_y_duplicado(self, client, headers, pagos_del_15, db):
        response = client.post("/daily-close", json={"dateKey": "2024-01-15", "notes": "Turno noche"}, headers=headers)
        assert response.status_code == 201
        data = response.json()
        assert data["dateKey"] == "2024-01-15"
        assert Decimal(data["totalCompleted"]) == Decimal("2300")
        assert data["countCompleted"] == 3
        assert Decimal(data["byMethod"]["cash"]) == Decimal("500")
        assert Decimal(data["byMethod"]["card"]) == Decimal("1500")
        assert Decimal(data["byMethod"]["transfer"]) == Decimal("300")
        assert data["createdBy"] == "recepcion"
        assert data["notes"] == "Turno noche"

        duplicado = client.post("/daily-close", json={"dateKey": "2024-01-15"}, headers=headers)
        assert duplicado.status_code == 409
        assert duplicado.json()["code"] == "DAILY_CLOSE_EXISTS"

        assert db.query(AuditEvent).filter(AuditEvent.action == "DAILY_CLOSE_CREATED").count() == 1

    def test_snapshot_no_cambia_con_pagos_posteriores(self, client, headers, pagos_del_15):
        a, _ = pagos_del_15
        cierre = client.post("/daily-close", json={"dateKey": "2024-01-15"}, headers=headers).json()

        pagos = client.get("/payments", params={"bookingId": a["id"]}, headers=headers).json()
        for pago in pagos:
            client.delete(f"/payments/{pago['id']}", headers=headers)

        guardado = client.get(f"/daily-close/{cierre['id']}", headers=headers).json()
        assert Decimal(guardado["totalCompleted"]) == Decimal("2300")

    def test_sin_fecha_usa_hoy(self, client, headers, seed):
        response = client.post("/daily-close", json={}, headers=headers)
        assert response.status_code == 201
        assert response.json()["dateKey"]

    def test_unicidad_en_la_base(self, db, seed):
        db.add(DailyClose(hotel_id=seed.hotel_id, date_key=date(2024, 1, 15), by_method={}))
        db.commit()
        db.add(DailyClose(hotel_id=seed.hotel_id, date_key=date(2024, 1, 15), by_method={}))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_otro_hotel_puede_cerrar_el_mismo_dia(self, client, headers, other_headers, seed):
        assert client.post("/daily-close", json={"dateKey": "2024-01-15"}, headers=headers).status_code == 201
        assert client.post("/daily-close", json={"dateKey": "2024-01-15"}, headers=other_headers).status_code == 201


class TestHistorial:
    """GET /daily-close y GET /daily-close/{id}"""

    def test_listado_por_rango(self, client, headers, seed):
        for dia in ("2024-01-10", "2024-01-11", "2024-01-12"):
            client.post("/daily-close", json={"dateKey": dia}, headers=headers)

        todos = client.get("/daily-close", headers=headers).json()
        assert [c["dateKey"] for c in todos] == ["2024-01-12", "2024-01-11", "2024-01-10"]

        rango = client.get("/daily-close", params={"from": "2024-01-11", "to": "2024-01-12"}, headers=headers).json()
        assert [c["dateKey"] for c in rango] == ["2024-01-12", "2024-01-11"]

    def test_detalle_inexistente(self, client, headers, seed):
        response = client.get("/daily-close/999", headers=headers)
        assert response.status_code == 404
        assert response.json()["code"] == "DAILY_CLOSE_NOT_FOUND"

    def test_no_hay_edicion_ni_baja(self, client, headers, seed):
        cierre = client.post("/daily-close", json={"dateKey": "2024-01-10"}, headers=headers).json()
        assert client.put(f"/daily-close/{cierre['id']}", json={"notes": "x"}, headers=headers).status_code == 405
        assert client.delete(f"/daily-close/{cierre['id']}", headers=headers).status_code == 405
