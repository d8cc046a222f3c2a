"""carehub/api/routers/users.py — User directory and admin role management."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from carehub.api.deps import CurrentUser, get_user_service, require_permission
from carehub.api.schemas import CamelModel, UserOut
from carehub.db.models import Role
from carehub.errors import ValidationError
from carehub.services.users import UserService

router = APIRouter()


class UserUpdate(CamelModel):
    name: str | None = None
    role: Role | None = None


def _parse_roles(raw: str | None) -> list[Role] | None:
    if not raw:
        return None
    try:
        return [Role(part.strip()) for part in raw.split(",") if part.strip()]
    except ValueError as exc:
        valid = ", ".join(r.value for r in Role)
        raise ValidationError(f"Invalid role specified. Must be one of: {valid}") from exc


@router.get("", response_model=list[UserOut])
async def list_users(
    current_user: Annotated[CurrentUser, Depends(require_permission("users:read"))],
    users: Annotated[UserService, Depends(get_user_service)],
    role: str | None = Query(None, description="Comma-separated roles to include"),
    all_users: bool = Query(False, alias="all", description="Admins only: list every user"),
) -> list[UserOut]:
    """List users; defaults to staff a complaint can be assigned to."""
    include_all = all_users and current_user.role == Role.ADMIN.value
    rows = await users.list(roles=None if include_all else _parse_roles(role), include_all=include_all)
    return [UserOut.model_validate(u) for u in rows]


@router.put("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: str,
    payload: UserUpdate,
    _: Annotated[CurrentUser, Depends(require_permission("users:update"))],
    users: Annotated[UserService, Depends(get_user_service)],
) -> UserOut:
    """Admin-only: change a user's display name and/or role."""
    user = await users.update(user_id, name=payload.name, role=payload.role)
    return UserOut.model_validate(user)
