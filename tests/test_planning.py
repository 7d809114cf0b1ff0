"""
GET /planning
"""


class TestPlanning:

    def test_requiere_rango(self, client, headers, seed):
        response = client.get("/planning", headers=headers)
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_DATES"

    def test_rango_invertido(self, client, headers, seed):
        response = client.get("/planning", params={"from": "2024-02-01", "to": "2024-01-01"}, headers=headers)
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_DATES"

    def test_ventana(self, client, headers, seed, api):
        dentro = api.create_booking(seed.room101, seed.guest_a, "2024-01-30", "2024-02-02").json()
        api.create_booking(seed.room102, seed.guest_b, "2024-01-05", "2024-01-07")
        cancelada = api.create_booking(seed.room201, seed.guest_b, "2024-02-01", "2024-02-03").json()
        api.set_status(cancelada["id"], "cancelled")
        posterior = api.create_booking(seed.room102, seed.guest_a, "2024-02-01", "2024-02-04").json()

        response = client.get("/planning", params={"from": "2024-02-01", "to": "2024-02-08"}, headers=headers)
        assert response.status_code == 200
        data = response.json()
        assert data["from"] == "2024-02-01"
        assert data["to"] == "2024-02-08"
        assert [b["id"] for b in data["bookings"]] == [dentro["id"], posterior["id"]]

        numeros = [room["number"] for room in data["rooms"]]
        assert numeros == ["101", "102", "103", "104", "201"]
