"""
carehub/auth/security.py — JWT authentication, password hashing and RBAC.

Tokens come in pairs: a short-lived access token for API calls and a
longer-lived refresh token. Every token carries a unique ``jti`` so a
refresh token can be revoked (Redis blacklist) on logout.

Note: Uses bcrypt directly (passlib 1.7 is incompatible with bcrypt 5.x).
"""
from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Literal

import bcrypt
from jose import JWTError, jwt
from pydantic import BaseModel

from carehub.config import get_settings
from carehub.db.models import Role

settings = get_settings()

TokenType = Literal["access", "refresh"]


class TokenPayload(BaseModel):
    sub: str        # user id
    role: str
    email: str
    type: TokenType
    jti: str
    iat: datetime
    exp: datetime


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds, access token only


# ─── Passwords ────────────────────────────────────────────────────────────────

def hash_password(plain: str) -> str:
    hashed = bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=settings.bcrypt_rounds))
    return hashed.decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """False for a wrong password and for a stored value that is not a bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


# ─── Tokens ───────────────────────────────────────────────────────────────────

def create_token(
    user_id: str,
    role: str,
    email: str,
    token_type: TokenType,
    expires_delta: timedelta,
) -> str:
    issued_at = datetime.now(tz=timezone.utc)
    claims = TokenPayload(
        sub=user_id,
        role=role,
        email=email,
        type=token_type,
        jti=secrets.token_hex(16),
        iat=issued_at,
        exp=issued_at + expires_delta,
    )
    return jwt.encode(claims.model_dump(), settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_token_pair(user_id: str, role: str, email: str) -> TokenPair:
    lifetimes: dict[TokenType, timedelta] = {
        "access": timedelta(minutes=settings.access_token_expire_minutes),
        "refresh": timedelta(days=settings.refresh_token_expire_days),
    }
    tokens = {kind: create_token(user_id, role, email, kind, ttl) for kind, ttl in lifetimes.items()}
    return TokenPair(
        access_token=tokens["access"],
        refresh_token=tokens["refresh"],
        expires_in=int(lifetimes["access"].total_seconds()),
    )


def decode_token(token: str, expected_type: TokenType | None = None) -> TokenPayload:
    """
    Verify signature and expiry and return the claims.

    Raises:
        ValueError: If the token is invalid, expired, malformed, or not of
            ``expected_type`` when one is given.
    """
    try:
        raw = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise ValueError(f"Invalid token: {exc}") from exc
    payload = TokenPayload.model_validate(raw)
    if expected_type is not None and payload.type != expected_type:
        raise ValueError(f"Invalid token: expected {expected_type} token, got {payload.type}")
    return payload


def revocation_key(jti: str) -> str:
    return f"revoked:{jti}"


def seconds_until_expiry(payload: TokenPayload) -> int:
    """Remaining lifetime, never below one second (Redis rejects a zero TTL)."""
    remaining = (payload.exp - datetime.now(tz=timezone.utc)).total_seconds()
    return max(int(remaining), 1)


# ─── RBAC ─────────────────────────────────────────────────────────────────────
#   One row per guarded operation. Handlers never branch on role for access
#   control; they declare the operation and the dependency checks this table.

def _roles(*roles: Role) -> frozenset[str]:
    return frozenset(r.value for r in roles)


ALL_ROLES = _roles(*Role)
STAFF_ROLES = _roles(Role.ADMIN, Role.FACILITY_MANAGER, Role.MEDICAL_STAFF)
MANAGERS = _roles(Role.ADMIN, Role.FACILITY_MANAGER)
CLINICIANS = _roles(Role.ADMIN, Role.MEDICAL_STAFF)
ADMIN_ONLY = _roles(Role.ADMIN)

CAPABILITIES: dict[str, frozenset[str]] = {
    "complaints:create":        ALL_ROLES,
    "complaints:read":          ALL_ROLES,
    "complaints:assign":        MANAGERS,
    "complaints:update_status": STAFF_ROLES,
    "facilities:read":          ALL_ROLES,
    "facilities:write":         MANAGERS,
    "facilities:delete":        ADMIN_ONLY,
    "medicine:read":            ALL_ROLES,
    "medicine:write":           CLINICIANS,
    "medicine:delete":          ADMIN_ONLY,
    "entry_exit:create":        ALL_ROLES,
    "entry_exit:read":          MANAGERS,
    "medical:read":             CLINICIANS,
    "medical:write":            CLINICIANS,
    "notifications:read":       ALL_ROLES,
    "dashboard:read":           ALL_ROLES,
    "users:read":               STAFF_ROLES,
    "users:create":             ADMIN_ONLY,
    "users:update":             ADMIN_ONLY,
    "scheduling:read":          ALL_ROLES,
    "scheduling:create":        ALL_ROLES,
    "scheduling:update":        CLINICIANS,
}


def has_permission(role: str, operation: str) -> bool:
    return role in CAPABILITIES.get(operation, frozenset())
