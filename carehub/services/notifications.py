"""
carehub/services/notifications.py — Append-only per-user notification sink.

Writes happen inside a SAVEPOINT so a failed insert never rolls back the
lifecycle action that triggered it.
"""
from __future__ import annotations

import logging

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from carehub.db.models import Notification

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


class NotificationSink:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def notify(self, user_id: str, title: str, message: str) -> Notification | None:
        """Append a notification; storage failures are logged and swallowed."""
        try:
            async with self._session.begin_nested():
                notification = Notification(user_id=user_id, title=title, message=message)
                self._session.add(notification)
            return notification
        except SQLAlchemyError as exc:
            logger.warning("Failed to create notification for user %s: %s", user_id, exc)
            return None

    async def notify_many(self, user_ids: list[str], title: str, message: str) -> int:
        """Notify several recipients; returns how many writes succeeded."""
        delivered = 0
        for user_id in user_ids:
            if await self.notify(user_id, title, message) is not None:
                delivered += 1
        return delivered

    async def recent(
        self,
        user_id: str,
        is_read: bool | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> list[Notification]:
        stmt = select(Notification).where(Notification.user_id == user_id)
        if is_read is not None:
            stmt = stmt.where(Notification.is_read.is_(is_read))
        stmt = stmt.order_by(Notification.created_at.desc()).limit(limit)
        result = await self._session.scalars(stmt)
        return list(result)

    async def unread_count(self, user_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        )
        return (await self._session.scalar(stmt)) or 0

    async def mark_read(self, user_id: str, notification_id: str) -> bool:
        """
        Flip is_read on a notification owned by ``user_id``.

        A notification belonging to someone else matches no row, so the call
        is a silent no-op. Returns whether a row was updated.
        """
        stmt = (
            update(Notification)
            .where(Notification.id == notification_id, Notification.user_id == user_id)
            .values(is_read=True)
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0
