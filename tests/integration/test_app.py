"""
tests/integration/test_app.py — Health check, scheduling placeholder and error envelope.
"""
from __future__ import annotations


class TestHealth:
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"
        assert resp.json()["environment"] == "test"


class TestScheduling:
    async def test_list_is_empty(self, client, users):
        resp = await client.get("/api/scheduling", headers=users["resident"].headers)
        assert resp.status_code == 200
        assert resp.json() == []

    async def test_create_not_implemented(self, client, users):
        resp = await client.post("/api/scheduling", json={}, headers=users["resident"].headers)
        assert resp.status_code == 501
        assert resp.json() == {"error": "Scheduling is not implemented yet."}

    async def test_update_roles(self, client, users):
        resp = await client.put("/api/scheduling/abc", json={}, headers=users["resident"].headers)
        assert resp.status_code == 403

        resp = await client.put("/api/scheduling/abc", json={}, headers=users["staff"].headers)
        assert resp.status_code == 501


class TestErrorEnvelope:
    async def test_unknown_route(self, client):
        resp = await client.get("/api/does-not-exist")
        assert resp.status_code == 404
        assert "error" in resp.json()
