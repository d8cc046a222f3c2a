"""carehub/api/routers/scheduling.py — Appointment scheduling (stub)."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from carehub.api.deps import CurrentUser, require_permission

router = APIRouter()

_NOT_IMPLEMENTED = "Scheduling is not implemented yet."


@router.get("")
async def list_appointments(
    _: Annotated[CurrentUser, Depends(require_permission("scheduling:read"))],
) -> list[dict]:
    """Appointments visible to the caller. Always empty until scheduling ships."""
    return []


@router.post("", status_code=status.HTTP_501_NOT_IMPLEMENTED)
async def create_appointment(
    _: Annotated[CurrentUser, Depends(require_permission("scheduling:create"))],
) -> dict:
    raise HTTPException(status_code=status.HTTP_501_NOT_IMPLEMENTED, detail=_NOT_IMPLEMENTED)


@router.put("/{appointment_id}", status_code=status.HTTP_501_NOT_IMPLEMENTED)
async def update_appointment(
    appointment_id: str,
    _: Annotated[CurrentUser, Depends(require_permission("scheduling:update"))],
) -> dict:
    raise HTTPException(status_code=status.HTTP_501_NOT_IMPLEMENTED, detail=_NOT_IMPLEMENTED)
