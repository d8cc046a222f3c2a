"""
tests/integration/test_medical_api.py — Medical records and logs.
"""
from __future__ import annotations


class TestMedicalRecord:
    async def test_record_is_created_on_first_read(self, client, users):
        resident = users["resident"]
        resp = await client.get(f"/api/medical/{resident.id}/record", headers=users["staff"].headers)
        assert resp.status_code == 200
        record = resp.json()
        assert record["userId"] == resident.id
        assert record["bloodType"] is None

        again = await client.get(f"/api/medical/{resident.id}/record", headers=users["staff"].headers)
        assert again.json()["id"] == record["id"]

    async def test_update_record(self, client, users):
        resident = users["resident"]
        resp = await client.put(
            f"/api/medical/{resident.id}/record",
            json={"bloodType": "O+", "allergies": "Penicillin"},
            headers=users["staff"].headers,
        )
        assert resp.status_code == 200
        assert resp.json()["bloodType"] == "O+"

        resp = await client.put(
            f"/api/medical/{resident.id}/record",
            json={"emergencyContact": "Mary, +1 555 0100"},
            headers=users["admin"].headers,
        )
        body = resp.json()
        assert body["allergies"] == "Penicillin"
        assert body["emergencyContact"] == "Mary, +1 555 0100"

    async def test_unknown_user(self, client, users):
        resp = await client.get("/api/medical/ghost/record", headers=users["staff"].headers)
        assert resp.status_code == 404
        assert resp.json() == {"error": "User not found"}

    async def test_non_medical_roles_are_forbidden(self, client, users):
        for who in ("resident", "manager"):
            resp = await client.get(
                f"/api/medical/{users['resident'].id}/record", headers=users[who].headers
            )
            assert resp.status_code == 403


class TestMedicalLogs:
    async def test_logs_need_a_record(self, client, users):
        url = f"/api/medical/{users['neighbour'].id}/logs"
        resp = await client.get(url, headers=users["staff"].headers)
        assert resp.status_code == 404
        assert resp.json() == {"error": "Medical record not found for this user."}

        resp = await client.post(url, json={"diagnosis": "Flu"}, headers=users["staff"].headers)
        assert resp.status_code == 404

    async def test_add_and_list_logs(self, client, users):
        resident = users["resident"]
        staff = users["staff"]
        await client.get(f"/api/medical/{resident.id}/record", headers=staff.headers)

        resp = await client.post(
            f"/api/medical/{resident.id}/logs",
            json={"diagnosis": "Seasonal flu", "treatment": "Rest", "medication": "Paracetamol"},
            headers=staff.headers,
        )
        assert resp.status_code == 201
        log = resp.json()
        assert log["staffId"] == staff.id
        assert log["staff"] == {"name": "Nurse Joy", "role": "medical_staff"}

        await client.post(
            f"/api/medical/{resident.id}/logs", json={"diagnosis": "Follow-up"}, headers=staff.headers
        )
        logs = (await client.get(f"/api/medical/{resident.id}/logs", headers=staff.headers)).json()
        assert [entry["diagnosis"] for entry in logs] == ["Follow-up", "Seasonal flu"]
