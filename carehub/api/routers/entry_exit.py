"""carehub/api/routers/entry_exit.py — Entry/exit logging."""
from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from carehub.api.deps import CurrentUser, get_entry_exit_service, require_permission
from carehub.api.schemas import CamelModel, UserBrief
from carehub.db.models import EntryExitType
from carehub.services.entry_exit import EntryExitService

router = APIRouter()


class EntryExitCreate(CamelModel):
    type: EntryExitType
    location: str | None = None
    notes: str | None = None


class EntryExitOut(CamelModel):
    id: str
    user_id: str
    type: str
    location: str | None = None
    notes: str | None = None
    timestamp: datetime
    user: UserBrief


@router.post("", response_model=EntryExitOut, status_code=status.HTTP_201_CREATED)
async def create_log(
    payload: EntryExitCreate,
    current_user: Annotated[CurrentUser, Depends(require_permission("entry_exit:create"))],
    logs: Annotated[EntryExitService, Depends(get_entry_exit_service)],
) -> EntryExitOut:
    """Record the caller's own entry or exit."""
    log = await logs.record(current_user.id, payload.type, payload.location, payload.notes)
    return EntryExitOut.model_validate(log)


@router.get("", response_model=list[EntryExitOut])
async def list_logs(
    _: Annotated[CurrentUser, Depends(require_permission("entry_exit:read"))],
    logs: Annotated[EntryExitService, Depends(get_entry_exit_service)],
    user_id: Annotated[str | None, Query(alias="userId")] = None,
    type: Annotated[EntryExitType | None, Query()] = None,
    start_date: Annotated[datetime | None, Query(alias="startDate")] = None,
    end_date: Annotated[datetime | None, Query(alias="endDate")] = None,
) -> list[EntryExitOut]:
    rows = await logs.history(user_id=user_id, type=type, start=start_date, end=end_date)
    return [EntryExitOut.model_validate(r) for r in rows]
