"""
tests/integration/test_auth_api.py — Registration, login, refresh and logout.
"""
from __future__ import annotations

from carehub.auth.security import decode_token, revocation_key

PASSWORD = "password123"


async def _login(client, email: str, password: str = PASSWORD):
    return await client.post("/api/auth/login", json={"email": email, "password": password})


class TestRegister:
    async def test_register_resident(self, client):
        resp = await client.post(
            "/api/auth/register",
            json={"email": "new@example.com", "password": "secret1", "name": "  New Resident "},
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["user"]["role"] == "resident"
        assert body["user"]["name"] == "New Resident"
        assert body["tokenType"] == "bearer"
        assert body["expiresIn"] > 0
        assert decode_token(body["accessToken"]).sub == body["user"]["id"]
        assert "hashedPassword" not in body["user"]

    async def test_register_medical_staff(self, client):
        resp = await client.post(
            "/api/auth/register",
            json={"email": "doc@example.com", "password": "secret1", "name": "Dr Who", "role": "medical_staff"},
        )
        assert resp.status_code == 201
        assert resp.json()["user"]["role"] == "medical_staff"

    async def test_cannot_self_register_as_manager(self, client):
        resp = await client.post(
            "/api/auth/register",
            json={"email": "boss@example.com", "password": "secret1", "name": "Boss", "role": "facility_manager"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "Validation failed"

    async def test_duplicate_email(self, client, users):
        resp = await client.post(
            "/api/auth/register",
            json={"email": users["resident"].email, "password": "secret1", "name": "Again"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "Email already registered"

    async def test_short_password_and_bad_email(self, client):
        resp = await client.post(
            "/api/auth/register",
            json={"email": "not-an-email", "password": "123", "name": "X"},
        )
        assert resp.status_code == 400
        fields = {d["field"] for d in resp.json()["details"]}
        assert {"email", "password"} <= fields

    async def test_blank_name_is_rejected(self, client):
        resp = await client.post(
            "/api/auth/register",
            json={"email": "blank@example.com", "password": "secret1", "name": "   "},
        )
        assert resp.status_code == 400


class TestAdminRegister:
    async def test_admin_creates_facility_manager(self, client, users):
        resp = await client.post(
            "/api/auth/admin/register",
            json={"email": "fm2@example.com", "password": "secret1", "name": "FM Two", "role": "facility_manager"},
            headers=users["admin"].headers,
        )
        assert resp.status_code == 201
        assert resp.json()["user"]["role"] == "facility_manager"

    async def test_non_admin_is_forbidden(self, client, users):
        resp = await client.post(
            "/api/auth/admin/register",
            json={"email": "fm3@example.com", "password": "secret1", "name": "FM", "role": "facility_manager"},
            headers=users["manager"].headers,
        )
        assert resp.status_code == 403


class TestLogin:
    async def test_login_returns_token_pair(self, client, users):
        resp = await _login(client, users["manager"].email)
        assert resp.status_code == 200
        body = resp.json()
        assert body["user"]["id"] == users["manager"].id
        assert decode_token(body["accessToken"]).role == "facility_manager"
        assert decode_token(body["refreshToken"]).type == "refresh"

    async def test_wrong_password(self, client, users):
        resp = await _login(client, users["manager"].email, "nope")
        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid credentials"}

    async def test_unknown_email(self, client, users):
        resp = await _login(client, "nobody@example.com")
        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid credentials"}


class TestTokens:
    async def test_refresh_issues_new_pair(self, client, users):
        refresh_token = (await _login(client, users["resident"].email)).json()["refreshToken"]

        resp = await client.post("/api/auth/refresh", json={"refreshToken": refresh_token})
        assert resp.status_code == 200
        body = resp.json()
        assert body["refreshToken"] != refresh_token
        assert decode_token(body["accessToken"]).sub == users["resident"].id

    async def test_access_token_cannot_refresh(self, client, users):
        resp = await client.post("/api/auth/refresh", json={"refreshToken": users["resident"].token})
        assert resp.status_code == 401

    async def test_garbage_refresh_token(self, client):
        resp = await client.post("/api/auth/refresh", json={"refreshToken": "garbage"})
        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid refresh token"}

    async def test_logout_revokes_refresh_token(self, client, users, fake_redis):
        refresh_token = (await _login(client, users["resident"].email)).json()["refreshToken"]

        resp = await client.post("/api/auth/logout", json={"refreshToken": refresh_token})
        assert resp.status_code == 200
        assert resp.json() == {"message": "Logged out successfully"}
        key = revocation_key(decode_token(refresh_token).jti)
        assert fake_redis.store[key] == "1"
        assert fake_redis.ttls[key] > 0

        resp = await client.post("/api/auth/refresh", json={"refreshToken": refresh_token})
        assert resp.status_code == 401
        assert resp.json() == {"error": "Refresh token has been revoked"}

    async def test_refresh_token_is_not_a_bearer_token(self, client, users):
        refresh_token = (await _login(client, users["resident"].email)).json()["refreshToken"]
        resp = await client.get(
            "/api/notifications", headers={"Authorization": f"Bearer {refresh_token}"}
        )
        assert resp.status_code == 403

    async def test_invalid_bearer_token(self, client):
        resp = await client.get("/api/notifications", headers={"Authorization": "Bearer nonsense"})
        assert resp.status_code == 401
        assert resp.json()["error"].startswith("Invalid token")
