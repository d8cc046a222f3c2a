"""carehub/services/entry_exit.py — Append-only entry/exit log."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from carehub.db.models import EntryExitLog, EntryExitType, User
from carehub.errors import NotFoundError


class EntryExitService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def record(
        self,
        user_id: str,
        type: EntryExitType,
        location: str | None = None,
        notes: str | None = None,
    ) -> EntryExitLog:
        user = await self._session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        log = EntryExitLog(
            user=user,
            type=EntryExitType(type).value,
            location=location,
            notes=notes,
        )
        self._session.add(log)
        await self._session.flush()
        return log

    async def history(
        self,
        user_id: str | None = None,
        type: EntryExitType | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[EntryExitLog]:
        stmt = (
            select(EntryExitLog)
            .options(selectinload(EntryExitLog.user))
            .order_by(EntryExitLog.timestamp.desc())
        )
        if user_id is not None:
            stmt = stmt.where(EntryExitLog.user_id == user_id)
        if type is not None:
            stmt = stmt.where(EntryExitLog.type == EntryExitType(type).value)
        if start is not None:
            stmt = stmt.where(EntryExitLog.timestamp >= start)
        if end is not None:
            stmt = stmt.where(EntryExitLog.timestamp <= end)
        return list(await self._session.scalars(stmt))
