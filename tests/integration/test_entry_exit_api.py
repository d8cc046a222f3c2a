"""
tests/integration/test_entry_exit_api.py — Entry/exit logging.
"""
from __future__ import annotations


class TestEntryExit:
    async def test_record_own_entry(self, client, users):
        resp = await client.post(
            "/api/entry-exit",
            json={"type": "Entry", "location": "Main gate"},
            headers=users["resident"].headers,
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["userId"] == users["resident"].id
        assert body["user"]["name"] == "John Resident"
        assert body["type"] == "Entry"
        assert body["location"] == "Main gate"
        assert body["timestamp"]

    async def test_invalid_type(self, client, users):
        resp = await client.post(
            "/api/entry-exit", json={"type": "In"}, headers=users["resident"].headers
        )
        assert resp.status_code == 400

    async def test_history_filters(self, client, users):
        await client.post("/api/entry-exit", json={"type": "Entry"}, headers=users["resident"].headers)
        await client.post("/api/entry-exit", json={"type": "Exit"}, headers=users["resident"].headers)
        await client.post("/api/entry-exit", json={"type": "Entry"}, headers=users["neighbour"].headers)
        headers = users["manager"].headers

        everything = (await client.get("/api/entry-exit", headers=headers)).json()
        assert len(everything) == 3
        # Newest first.
        assert everything[0]["userId"] == users["neighbour"].id

        mine = (
            await client.get(f"/api/entry-exit?userId={users['resident'].id}", headers=headers)
        ).json()
        assert [log["type"] for log in mine] == ["Exit", "Entry"]

        exits = (await client.get("/api/entry-exit?type=Exit", headers=headers)).json()
        assert len(exits) == 1

    async def test_date_range(self, client, users):
        await client.post("/api/entry-exit", json={"type": "Entry"}, headers=users["resident"].headers)
        headers = users["admin"].headers

        future = (await client.get("/api/entry-exit?startDate=2100-01-01T00:00:00", headers=headers)).json()
        assert future == []

        past = (await client.get("/api/entry-exit?endDate=2000-01-01T00:00:00", headers=headers)).json()
        assert past == []

        window = (
            await client.get(
                "/api/entry-exit?startDate=2000-01-01T00:00:00&endDate=2100-01-01T00:00:00",
                headers=headers,
            )
        ).json()
        assert len(window) == 1

    async def test_history_is_restricted(self, client, users):
        for who in ("resident", "staff"):
            resp = await client.get("/api/entry-exit", headers=users[who].headers)
            assert resp.status_code == 403
