"""carehub/api/routers/auth.py — Registration, login, token refresh and logout."""
import logging
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import EmailStr, Field, field_validator

from carehub.api.deps import (
    CurrentUser,
    get_redis,
    get_user_service,
    limiter,
    require_permission,
)
from carehub.api.schemas import CamelModel, MessageOut, UserOut
from carehub.auth.security import (
    TokenPayload,
    create_token_pair,
    decode_token,
    revocation_key,
    seconds_until_expiry,
)
from carehub.config import get_settings
from carehub.db.models import Role, User
from carehub.services.users import UserService

logger = logging.getLogger(__name__)
settings = get_settings()
router = APIRouter()


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1)
    # Self-registration cannot grant management roles.
    role: Literal["medical_staff", "resident"] = "resident"

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value


class AdminRegisterRequest(RegisterRequest):
    role: Literal["medical_staff", "facility_manager", "resident"]  # type: ignore[assignment]


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class AuthResponse(CamelModel):
    user: UserOut
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


def _auth_response(user: User) -> AuthResponse:
    pair = create_token_pair(user.id, user.role, user.email)
    return AuthResponse(
        user=UserOut.model_validate(user),
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        expires_in=pair.expires_in,
    )


def _refresh_claims(token: str) -> TokenPayload:
    try:
        return decode_token(token, expected_type="refresh")
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token") from exc


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.rate_limit_auth)
async def register(
    request: Request,
    payload: RegisterRequest,
    users: Annotated[UserService, Depends(get_user_service)],
) -> AuthResponse:
    """Public self-registration for residents and medical staff."""
    user = await users.register(payload.email, payload.password, payload.name, Role(payload.role))
    return _auth_response(user)


@router.post("/admin/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def admin_register(
    payload: AdminRegisterRequest,
    _: Annotated[CurrentUser, Depends(require_permission("users:create"))],
    users: Annotated[UserService, Depends(get_user_service)],
) -> AuthResponse:
    """Admin-created accounts, including facility managers."""
    user = await users.register(payload.email, payload.password, payload.name, Role(payload.role))
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.rate_limit_auth)
async def login(
    request: Request,
    payload: LoginRequest,
    users: Annotated[UserService, Depends(get_user_service)],
) -> AuthResponse:
    """Authenticate user and return access + refresh token pair."""
    user = await users.authenticate(payload.email, payload.password)
    return _auth_response(user)


@router.post("/refresh", response_model=AuthResponse)
async def refresh(
    payload: RefreshRequest,
    users: Annotated[UserService, Depends(get_user_service)],
    redis=Depends(get_redis),
) -> AuthResponse:
    """Exchange a valid, non-revoked refresh token for a new token pair."""
    claims = _refresh_claims(payload.refresh_token)
    if await redis.get(revocation_key(claims.jti)):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Refresh token has been revoked")
    user = await users.get(claims.sub)
    return _auth_response(user)


@router.post("/logout", response_model=MessageOut)
async def logout(payload: RefreshRequest, redis=Depends(get_redis)) -> MessageOut:
    """Invalidate refresh token (add JTI to Redis blacklist until it expires)."""
    claims = _refresh_claims(payload.refresh_token)
    await redis.setex(revocation_key(claims.jti), seconds_until_expiry(claims), "1")
    logger.info("Revoked refresh token %s for user %s", claims.jti, claims.sub)
    return MessageOut(message="Logged out successfully")
