"""
carehub/api/routers/complaints.py — Complaint lifecycle endpoints.

Creation accepts multipart form data so an image/PDF attachment can travel
with the complaint. Reads are projected by the caller's role.
"""
from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from pydantic import Field

from carehub.api.deps import CurrentUser, get_complaint_service, require_permission
from carehub.api.schemas import CamelModel, FacilityOut, UserBrief
from carehub.db.models import ComplaintStatus, Priority
from carehub.services.complaints import ComplaintFilters, ComplaintService

router = APIRouter()


# ─── Schemas ──────────────────────────────────────────────────────────────────

class AssignmentOut(CamelModel):
    id: str
    complaint_id: str
    is_active: bool
    notes: str | None = None
    assigned_at: datetime
    assigned_to: UserBrief


class StatusHistoryOut(CamelModel):
    id: str
    from_status: str | None = None
    to_status: str
    notes: str | None = None
    changed_at: datetime


class ComplaintOut(CamelModel):
    id: str
    title: str
    description: str
    priority: str
    status: str
    attachment: str | None = None
    resolved_at: datetime | None = None
    closed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    facility: FacilityOut
    created_by: UserBrief
    assignments: list[AssignmentOut] = Field(default_factory=list)


class ComplaintDetailOut(ComplaintOut):
    status_history: list[StatusHistoryOut] = Field(default_factory=list)


class AssignRequest(CamelModel):
    assigned_to_id: str = Field(..., min_length=1)
    notes: str | None = None


class StatusUpdateRequest(CamelModel):
    status: ComplaintStatus
    notes: str | None = None


# ─── Endpoints ────────────────────────────────────────────────────────────────

@router.post("", response_model=ComplaintOut, status_code=status.HTTP_201_CREATED)
async def create_complaint(
    current_user: Annotated[CurrentUser, Depends(require_permission("complaints:create"))],
    complaints: Annotated[ComplaintService, Depends(get_complaint_service)],
    title: Annotated[str, Form(min_length=1)],
    description: Annotated[str, Form(min_length=1)],
    facility_id: Annotated[str, Form(alias="facilityId", min_length=1)],
    priority: Annotated[Priority, Form()] = Priority.MEDIUM,
    attachment: Annotated[UploadFile | None, File()] = None,
) -> ComplaintOut:
    """File a complaint against a facility; facility managers are notified."""
    complaint = await complaints.create(
        title=title.strip(),
        description=description.strip(),
        facility_id=facility_id,
        created_by_id=current_user.id,
        priority=priority,
        attachment=attachment,
    )
    return ComplaintOut.model_validate(complaint)


@router.get("", response_model=list[ComplaintOut])
async def list_complaints(
    current_user: Annotated[CurrentUser, Depends(require_permission("complaints:read"))],
    complaints: Annotated[ComplaintService, Depends(get_complaint_service)],
    status_filter: Annotated[ComplaintStatus | None, Query(alias="status")] = None,
    priority: Annotated[Priority | None, Query()] = None,
    facility_id: Annotated[str | None, Query(alias="facilityId")] = None,
) -> list[ComplaintOut]:
    """Residents see their own complaints, medical staff their active assignments, others all."""
    rows = await complaints.list_for(
        current_user.id,
        current_user.role,
        ComplaintFilters(status=status_filter, priority=priority, facility_id=facility_id),
    )
    return [ComplaintOut.model_validate(c) for c in rows]


@router.get("/{complaint_id}", response_model=ComplaintDetailOut)
async def get_complaint(
    complaint_id: str,
    current_user: Annotated[CurrentUser, Depends(require_permission("complaints:read"))],
    complaints: Annotated[ComplaintService, Depends(get_complaint_service)],
) -> ComplaintDetailOut:
    complaint = await complaints.get(complaint_id, current_user.id, current_user.role)
    return ComplaintDetailOut.model_validate(complaint)


@router.post("/{complaint_id}/assign", response_model=AssignmentOut)
async def assign_complaint(
    complaint_id: str,
    payload: AssignRequest,
    _: Annotated[CurrentUser, Depends(require_permission("complaints:assign"))],
    complaints: Annotated[ComplaintService, Depends(get_complaint_service)],
) -> AssignmentOut:
    """(Re)assign a complaint; a `new` complaint advances to `assigned`."""
    assignment = await complaints.assign(complaint_id, payload.assigned_to_id, payload.notes)
    return AssignmentOut.model_validate(assignment)


@router.patch("/{complaint_id}/status", response_model=ComplaintOut)
async def update_complaint_status(
    complaint_id: str,
    payload: StatusUpdateRequest,
    _: Annotated[CurrentUser, Depends(require_permission("complaints:update_status"))],
    complaints: Annotated[ComplaintService, Depends(get_complaint_service)],
) -> ComplaintOut:
    """Advance status one step along new → assigned → in_progress → resolved → closed."""
    complaint = await complaints.update_status(complaint_id, payload.status, payload.notes)
    return ComplaintOut.model_validate(complaint)
