"""
tests/integration/test_medicine_api.py — Medicine inventory and availability.
"""
from __future__ import annotations

import pytest


@pytest.fixture
async def stocked(client, users):
    headers = users["staff"].headers
    created = {}
    for name, stock in (("Paracetamol", 100), ("Ibuprofen", 5), ("Amoxicillin", 0)):
        resp = await client.post(
            "/api/medicine",
            json={
                "name": name,
                "description": f"{name} tablets",
                "stockLevel": stock,
                "unit": "tablets",
                "expiryDate": "2027-12-31",
            },
            headers=headers,
        )
        assert resp.status_code == 201, resp.text
        created[name] = resp.json()
    return created


def _names(resp) -> list[str]:
    assert resp.status_code == 200, resp.text
    return [m["name"] for m in resp.json()]


class TestMedicine:
    async def test_created_fields(self, stocked):
        para = stocked["Paracetamol"]
        assert para["stockLevel"] == 100
        assert para["unit"] == "tablets"
        assert para["expiryDate"] == "2027-12-31"

    async def test_resident_can_check_availability(self, client, users, stocked):
        resp = await client.get("/api/medicine", headers=users["resident"].headers)
        assert _names(resp) == ["Amoxicillin", "Ibuprofen", "Paracetamol"]

    async def test_availability_filters(self, client, users, stocked):
        headers = users["resident"].headers
        assert _names(await client.get("/api/medicine?availability=in_stock", headers=headers)) == [
            "Ibuprofen",
            "Paracetamol",
        ]
        assert _names(await client.get("/api/medicine?availability=low_stock", headers=headers)) == ["Ibuprofen"]
        assert _names(await client.get("/api/medicine?availability=out_of_stock", headers=headers)) == [
            "Amoxicillin"
        ]

    async def test_search_is_case_insensitive(self, client, users, stocked):
        resp = await client.get("/api/medicine?search=PARA", headers=users["resident"].headers)
        assert _names(resp) == ["Paracetamol"]

    async def test_negative_stock_is_rejected(self, client, users):
        resp = await client.post(
            "/api/medicine",
            json={"name": "Aspirin", "stockLevel": -1, "unit": "tablets"},
            headers=users["staff"].headers,
        )
        assert resp.status_code == 400
        assert resp.json()["details"][0]["field"] == "stockLevel"

    async def test_unit_is_required(self, client, users):
        resp = await client.post(
            "/api/medicine", json={"name": "Aspirin", "stockLevel": 3}, headers=users["staff"].headers
        )
        assert resp.status_code == 400

    async def test_duplicate_name(self, client, users, stocked):
        resp = await client.post(
            "/api/medicine",
            json={"name": "Paracetamol", "stockLevel": 1, "unit": "tablets"},
            headers=users["admin"].headers,
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Medicine name already exists."}

    async def test_residents_and_managers_cannot_write(self, client, users):
        for who in ("resident", "manager"):
            resp = await client.post(
                "/api/medicine",
                json={"name": "Aspirin", "stockLevel": 1, "unit": "tablets"},
                headers=users[who].headers,
            )
            assert resp.status_code == 403

    async def test_partial_update(self, client, users, stocked):
        ibu = stocked["Ibuprofen"]
        resp = await client.put(
            f"/api/medicine/{ibu['id']}", json={"stockLevel": 50}, headers=users["staff"].headers
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["stockLevel"] == 50
        assert body["description"] == "Ibuprofen tablets"
        assert body["unit"] == "tablets"

    async def test_null_clears_optional_fields(self, client, users, stocked):
        para = stocked["Paracetamol"]
        resp = await client.put(
            f"/api/medicine/{para['id']}",
            json={"expiryDate": None, "description": None, "unit": None},
            headers=users["staff"].headers,
        )
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["expiryDate"] is None
        assert body["description"] is None
        assert body["unit"] == "tablets"
        assert body["stockLevel"] == 100

    async def test_update_missing(self, client, users):
        resp = await client.put("/api/medicine/nope", json={"stockLevel": 1}, headers=users["staff"].headers)
        assert resp.status_code == 404

    async def test_delete_is_admin_only(self, client, users, stocked):
        amox = stocked["Amoxicillin"]
        resp = await client.delete(f"/api/medicine/{amox['id']}", headers=users["staff"].headers)
        assert resp.status_code == 403

        resp = await client.delete(f"/api/medicine/{amox['id']}", headers=users["admin"].headers)
        assert resp.status_code == 200
        remaining = _names(await client.get("/api/medicine", headers=users["admin"].headers))
        assert "Amoxicillin" not in remaining
