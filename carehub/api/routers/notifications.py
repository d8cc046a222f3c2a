"""carehub/api/routers/notifications.py — The caller's own notifications."""
from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from carehub.api.deps import CurrentUser, get_notification_sink, require_permission
from carehub.api.schemas import CamelModel, MessageOut
from carehub.config import get_settings
from carehub.services.notifications import NotificationSink

settings = get_settings()
router = APIRouter()


class NotificationOut(CamelModel):
    id: str
    title: str
    message: str
    is_read: bool
    created_at: datetime


class UnreadCountOut(CamelModel):
    unread_count: int


@router.get("", response_model=list[NotificationOut])
async def list_notifications(
    current_user: Annotated[CurrentUser, Depends(require_permission("notifications:read"))],
    sink: Annotated[NotificationSink, Depends(get_notification_sink)],
    is_read: Annotated[bool | None, Query(alias="isRead")] = None,
) -> list[NotificationOut]:
    """Most recent notifications first, capped at the configured page size."""
    rows = await sink.recent(current_user.id, is_read=is_read, limit=settings.notification_page_size)
    return [NotificationOut.model_validate(n) for n in rows]


@router.get("/count", response_model=UnreadCountOut)
async def unread_count(
    current_user: Annotated[CurrentUser, Depends(require_permission("notifications:read"))],
    sink: Annotated[NotificationSink, Depends(get_notification_sink)],
) -> UnreadCountOut:
    return UnreadCountOut(unread_count=await sink.unread_count(current_user.id))


@router.patch("/{notification_id}/read", response_model=MessageOut)
async def mark_as_read(
    notification_id: str,
    current_user: Annotated[CurrentUser, Depends(require_permission("notifications:read"))],
    sink: Annotated[NotificationSink, Depends(get_notification_sink)],
) -> MessageOut:
    # Someone else's id matches nothing; the response is the same either way.
    await sink.mark_read(current_user.id, notification_id)
    return MessageOut(message="Notification marked as read.")
