"""
tests/integration/test_notifications_api.py — Notifications produced by the complaint lifecycle.
"""
from __future__ import annotations


async def _notifications(client, user, query: str = ""):
    resp = await client.get(f"/api/notifications{query}", headers=user.headers)
    assert resp.status_code == 200
    return resp.json()


async def _unread(client, user) -> int:
    resp = await client.get("/api/notifications/count", headers=user.headers)
    assert resp.status_code == 200
    return resp.json()["unreadCount"]


class TestLifecycleNotifications:
    async def test_new_complaint_notifies_facility_managers(
        self, client, users, facility_id, file_complaint
    ):
        await file_complaint(users["resident"], facility_id)

        inbox = await _notifications(client, users["manager"])
        assert len(inbox) == 1
        assert inbox[0]["title"] == "New Complaint"
        assert inbox[0]["message"] == "New complaint: Leaky faucet at Building A Plumbing"
        assert inbox[0]["isRead"] is False

        # Admins and the filer are not on the new-complaint fan-out.
        assert await _unread(client, users["admin"]) == 0
        assert await _unread(client, users["resident"]) == 0

    async def test_assignment_notifies_assignee(self, client, users, facility_id, file_complaint):
        complaint = await file_complaint(users["resident"], facility_id)
        await client.post(
            f"/api/complaints/{complaint['id']}/assign",
            json={"assignedToId": users["staff"].id},
            headers=users["manager"].headers,
        )

        inbox = await _notifications(client, users["staff"])
        assert [(n["title"], n["message"]) for n in inbox] == [
            ("Complaint Assigned", "You have been assigned to: Leaky faucet"),
        ]

    async def test_status_change_notifies_creator(
        self, client, users, facility_id, file_complaint, advance
    ):
        complaint = await file_complaint(users["resident"], facility_id)
        await advance(complaint["id"], "assigned", "in_progress")

        inbox = await _notifications(client, users["resident"])
        assert len(inbox) == 2
        assert {n["title"] for n in inbox} == {"Complaint Status Updated"}
        assert 'Your complaint "Leaky faucet" status changed to in_progress' in {
            n["message"] for n in inbox
        }

    async def test_rejected_transition_sends_nothing(self, client, users, facility_id, file_complaint):
        complaint = await file_complaint(users["resident"], facility_id)
        await client.patch(
            f"/api/complaints/{complaint['id']}/status",
            json={"status": "closed"},
            headers=users["admin"].headers,
        )
        assert await _unread(client, users["resident"]) == 0


class TestInbox:
    async def test_mark_read_and_count(self, client, users, facility_id, file_complaint):
        await file_complaint(users["resident"], facility_id, title="One")
        await file_complaint(users["resident"], facility_id, title="Two")
        manager = users["manager"]
        assert await _unread(client, manager) == 2

        inbox = await _notifications(client, manager)
        resp = await client.patch(f"/api/notifications/{inbox[0]['id']}/read", headers=manager.headers)
        assert resp.status_code == 200
        assert resp.json() == {"message": "Notification marked as read."}

        assert await _unread(client, manager) == 1
        assert len(await _notifications(client, manager, "?isRead=false")) == 1
        assert [n["id"] for n in await _notifications(client, manager, "?isRead=true")] == [inbox[0]["id"]]

    async def test_cannot_mark_someone_elses_notification(
        self, client, users, facility_id, file_complaint
    ):
        await file_complaint(users["resident"], facility_id)
        note = (await _notifications(client, users["manager"]))[0]

        resp = await client.patch(
            f"/api/notifications/{note['id']}/read", headers=users["resident"].headers
        )
        assert resp.status_code == 200
        assert await _unread(client, users["manager"]) == 1

    async def test_inbox_is_per_user(self, client, users, facility_id, file_complaint):
        await file_complaint(users["resident"], facility_id)
        assert await _notifications(client, users["neighbour"]) == []

    async def test_requires_authentication(self, client):
        resp = await client.get("/api/notifications")
        assert resp.status_code == 401
