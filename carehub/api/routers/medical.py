"""carehub/api/routers/medical.py — Medical records and logs (medical staff / admin)."""
from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, status

from carehub.api.deps import CurrentUser, get_medical_service, require_permission
from carehub.api.schemas import CamelModel, StaffBrief
from carehub.services.medical import MedicalService

router = APIRouter()


class MedicalRecordOut(CamelModel):
    id: str
    user_id: str
    blood_type: str | None = None
    allergies: str | None = None
    chronic_conditions: str | None = None
    emergency_contact: str | None = None
    created_at: datetime
    updated_at: datetime


class MedicalRecordUpdate(CamelModel):
    blood_type: str | None = None
    allergies: str | None = None
    chronic_conditions: str | None = None
    emergency_contact: str | None = None


class MedicalLogCreate(CamelModel):
    diagnosis: str | None = None
    treatment: str | None = None
    medication: str | None = None


class MedicalLogOut(CamelModel):
    id: str
    record_id: str
    staff_id: str
    diagnosis: str | None = None
    treatment: str | None = None
    medication: str | None = None
    timestamp: datetime
    staff: StaffBrief


@router.get("/{user_id}/record", response_model=MedicalRecordOut)
async def get_record(
    user_id: str,
    _: Annotated[CurrentUser, Depends(require_permission("medical:read"))],
    medical: Annotated[MedicalService, Depends(get_medical_service)],
) -> MedicalRecordOut:
    """Fetch the user's record, creating an empty one on first access."""
    record = await medical.get_or_create_record(user_id)
    return MedicalRecordOut.model_validate(record)


@router.put("/{user_id}/record", response_model=MedicalRecordOut)
async def update_record(
    user_id: str,
    payload: MedicalRecordUpdate,
    _: Annotated[CurrentUser, Depends(require_permission("medical:write"))],
    medical: Annotated[MedicalService, Depends(get_medical_service)],
) -> MedicalRecordOut:
    record = await medical.update_record(user_id, **payload.model_dump(exclude_unset=True))
    return MedicalRecordOut.model_validate(record)


@router.get("/{user_id}/logs", response_model=list[MedicalLogOut])
async def list_logs(
    user_id: str,
    _: Annotated[CurrentUser, Depends(require_permission("medical:read"))],
    medical: Annotated[MedicalService, Depends(get_medical_service)],
) -> list[MedicalLogOut]:
    rows = await medical.list_logs(user_id)
    return [MedicalLogOut.model_validate(r) for r in rows]


@router.post("/{user_id}/logs", response_model=MedicalLogOut, status_code=status.HTTP_201_CREATED)
async def create_log(
    user_id: str,
    payload: MedicalLogCreate,
    current_user: Annotated[CurrentUser, Depends(require_permission("medical:write"))],
    medical: Annotated[MedicalService, Depends(get_medical_service)],
) -> MedicalLogOut:
    log = await medical.add_log(user_id, current_user.id, **payload.model_dump())
    return MedicalLogOut.model_validate(log)
