"""carehub/services/users.py — Identity store: registration, credential checks, admin updates."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from carehub.auth.security import hash_password, verify_password
from carehub.db.models import Role, User
from carehub.errors import ConflictError, NotFoundError, UnauthorizedError

logger = logging.getLogger(__name__)

ASSIGNABLE_ROLES = (Role.ADMIN.value, Role.FACILITY_MANAGER.value, Role.MEDICAL_STAFF.value)


class UserService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def register(
        self,
        email: str,
        password: str,
        name: str,
        role: Role = Role.RESIDENT,
    ) -> User:
        existing = await self._session.scalar(select(User.id).where(User.email == email))
        if existing is not None:
            raise ConflictError("Email already registered")

        user = User(
            email=email,
            hashed_password=hash_password(password),
            name=name,
            role=Role(role).value,
        )
        self._session.add(user)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            # A concurrent registration took the email after the pre-check.
            raise ConflictError("Email already registered") from exc
        logger.info("Registered user %s with role %s", user.id, user.role)
        return user

    async def authenticate(self, email: str, password: str) -> User:
        user = await self._session.scalar(select(User).where(User.email == email))
        if user is None or not verify_password(password, user.hashed_password):
            raise UnauthorizedError("Invalid credentials")
        return user

    async def get(self, user_id: str) -> User:
        user = await self._session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def list(
        self,
        roles: list[Role] | None = None,
        include_all: bool = False,
    ) -> list[User]:
        """
        List users ordered by name.

        ``include_all`` drops role filtering entirely; otherwise ``roles`` is
        applied, defaulting to the roles a complaint can be assigned to.
        """
        stmt = select(User).order_by(User.name)
        if not include_all:
            wanted = [Role(r).value for r in roles] if roles else list(ASSIGNABLE_ROLES)
            stmt = stmt.where(User.role.in_(wanted))
        return list(await self._session.scalars(stmt))

    async def update(
        self,
        user_id: str,
        name: str | None = None,
        role: Role | None = None,
    ) -> User:
        user = await self.get(user_id)
        if name is not None:
            user.name = name
        if role is not None:
            user.role = Role(role).value
        await self._session.flush()
        logger.info("Updated user %s (role=%s)", user.id, user.role)
        return user
