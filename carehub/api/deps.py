"""
carehub/api/deps.py — FastAPI shared dependencies.

- Bearer-token identity and the capability check every route declares
- Redis handle for the refresh-token revocation list
- Auth rate limiter
- Service objects bound to the per-request database session
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Annotated, Any

import redis.asyncio as aioredis
from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from redis.exceptions import RedisError
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from carehub.auth.security import decode_token, has_permission
from carehub.config import get_settings
from carehub.db.session import get_db
from carehub.services.complaints import ComplaintService
from carehub.services.dashboard import DashboardService
from carehub.services.entry_exit import EntryExitService
from carehub.services.facilities import FacilityService
from carehub.services.medical import MedicalService
from carehub.services.medicine import MedicineService
from carehub.services.notifications import NotificationSink
from carehub.services.users import UserService

logger = logging.getLogger(__name__)

settings = get_settings()
bearer_scheme = HTTPBearer(auto_error=False)

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

DbSession = Annotated[AsyncSession, Depends(get_db)]


# ── Redis ────────────────────────────────────────────────────────────────────

class _NoOpRedis:
    """Stands in for Redis when it is unreachable: nothing is ever revoked."""

    async def get(self, _key: str) -> None:
        return None

    async def setex(self, _key: str, _ttl: int, _val: str) -> None:
        return None


_redis: Any = None


async def _connect_redis() -> Any:
    client = aioredis.from_url(
        str(settings.redis_url),
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=1,
    )
    try:
        await client.ping()
    except (RedisError, OSError) as exc:
        logger.warning("Redis unreachable at startup (%s); logout will not revoke tokens", exc)
        return _NoOpRedis()
    return client


async def get_redis() -> Any:
    """Process-wide Redis client, connected on first use."""
    global _redis
    if _redis is None:
        _redis = await _connect_redis()
    return _redis


# ── Identity & RBAC ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class CurrentUser:
    id: str
    role: str
    email: str


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
) -> CurrentUser:
    """
    Resolve the caller from the Bearer token.

    401 for a missing, bad or expired token; 403 when a refresh token is
    presented in place of an access token.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        claims = decode_token(credentials.credentials)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc

    if claims.type != "access":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Refresh tokens cannot be used for API access.",
        )
    return CurrentUser(id=claims.sub, role=claims.role, email=claims.email)


def require_permission(operation: str):
    """
    Build a dependency that admits the caller only if their role may perform
    ``operation`` according to the capability table.

        @router.delete("/{facility_id}")
        async def delete_facility(
            _: Annotated[CurrentUser, Depends(require_permission("facilities:delete"))],
        ): ...
    """

    async def _authorize(
        user: Annotated[CurrentUser, Depends(get_current_user)],
    ) -> CurrentUser:
        if has_permission(user.role, operation):
            return user
        logger.info("Denied %s to user %s (role %s)", operation, user.id, user.role)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Role '{user.role}' is not allowed to perform '{operation}'.",
        )

    return _authorize


# ── Services ─────────────────────────────────────────────────────────────────

def get_notification_sink(db: DbSession) -> NotificationSink:
    return NotificationSink(db)


def get_complaint_service(
    db: DbSession,
    sink: Annotated[NotificationSink, Depends(get_notification_sink)],
) -> ComplaintService:
    return ComplaintService(db, sink)


def get_dashboard_service(db: DbSession) -> DashboardService:
    return DashboardService(db)


def get_facility_service(db: DbSession) -> FacilityService:
    return FacilityService(db)


def get_medicine_service(db: DbSession) -> MedicineService:
    return MedicineService(db, low_stock_threshold=settings.low_stock_threshold)


def get_entry_exit_service(db: DbSession) -> EntryExitService:
    return EntryExitService(db)


def get_medical_service(db: DbSession) -> MedicalService:
    return MedicalService(db)


def get_user_service(db: DbSession) -> UserService:
    return UserService(db)
