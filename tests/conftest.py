"""
tests/conftest.py — Shared pytest fixtures for unit and integration tests.

The application is wired to an in-memory SQLite database (aiosqlite) and a
dict-backed Redis double. Environment overrides must be in place before
anything under ``carehub`` is imported, since settings are cached.
"""
from __future__ import annotations

import os
import tempfile

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="carehub-uploads-")

from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from carehub.api.deps import get_redis
from carehub.api.main import app
from carehub.auth.security import create_token_pair, hash_password
from carehub.db.models import Base, Facility, FacilityType, Role, User
from carehub.db.session import get_db

PASSWORD = "password123"


class FakeRedis:
    """Just enough of redis.asyncio.Redis for the refresh-token revocation list."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key: str) -> str | None:
        return self.store.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> None:
        self.store[key] = value
        self.ttls[key] = ttl


@dataclass(frozen=True)
class SeededUser:
    id: str
    email: str
    name: str
    role: str
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    eng = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # SAVEPOINT support on SQLite: let SQLAlchemy own BEGIN instead of the driver.
    @event.listens_for(eng.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, _record):
        dbapi_connection.isolation_level = None

    @event.listens_for(eng.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
async def client(session_factory, fake_redis) -> AsyncIterator[AsyncClient]:
    async def _get_db() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def _get_redis() -> FakeRedis:
        return fake_redis

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_redis] = _get_redis
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def users(session_factory) -> dict[str, SeededUser]:
    """One account per role, plus a second resident to check per-user scoping."""
    people = {
        "admin":     ("admin@example.com", "System Administrator", Role.ADMIN),
        "manager":   ("manager@example.com", "Facility Manager", Role.FACILITY_MANAGER),
        "staff":     ("nurse@example.com", "Nurse Joy", Role.MEDICAL_STAFF),
        "resident":  ("resident@example.com", "John Resident", Role.RESIDENT),
        "neighbour": ("neighbour@example.com", "Jane Neighbour", Role.RESIDENT),
    }
    hashed = hash_password(PASSWORD)
    seeded: dict[str, SeededUser] = {}
    async with session_factory() as session:
        for key, (email, name, role) in people.items():
            user = User(email=email, name=name, role=role.value, hashed_password=hashed)
            session.add(user)
            await session.flush()
            token = create_token_pair(user.id, user.role, user.email).access_token
            seeded[key] = SeededUser(user.id, email, name, role.value, token)
        await session.commit()
    return seeded


@pytest.fixture
async def facility_id(session_factory) -> str:
    async with session_factory() as session:
        facility = Facility(
            name="Building A Plumbing",
            type=FacilityType.GENERAL.value,
            description="Water supply and drainage",
            location="Building A",
            is_active=True,
        )
        session.add(facility)
        await session.commit()
        return facility.id


@pytest.fixture
def file_complaint(client: AsyncClient) -> Callable[..., Awaitable[dict[str, Any]]]:
    """POST a complaint as ``user`` and return the decoded body."""

    async def _file(
        user: SeededUser,
        facility: str,
        title: str = "Leaky faucet",
        priority: str = "high",
        description: str = "Kitchen tap drips constantly",
    ) -> dict[str, Any]:
        resp = await client.post(
            "/api/complaints",
            data={
                "title": title,
                "description": description,
                "facilityId": facility,
                "priority": priority,
            },
            headers=user.headers,
        )
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _file


@pytest.fixture
def advance(client: AsyncClient, users) -> Callable[..., Awaitable[dict[str, Any]]]:
    """Drive a complaint through status changes as the admin."""

    async def _advance(complaint_id: str, *statuses: str) -> dict[str, Any]:
        body: dict[str, Any] = {}
        for target in statuses:
            resp = await client.patch(
                f"/api/complaints/{complaint_id}/status",
                json={"status": target},
                headers=users["admin"].headers,
            )
            assert resp.status_code == 200, resp.text
            body = resp.json()
        return body

    return _advance
