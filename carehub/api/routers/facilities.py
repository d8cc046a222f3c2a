"""carehub/api/routers/facilities.py — Facility catalog endpoints."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import Field

from carehub.api.deps import CurrentUser, get_facility_service, require_permission
from carehub.api.schemas import CamelModel, FacilityOut, MessageOut
from carehub.db.models import FacilityType
from carehub.services.facilities import FacilityService

router = APIRouter()


class FacilityCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    type: FacilityType
    description: str | None = None
    location: str | None = None


class FacilityUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    type: FacilityType | None = None
    description: str | None = None
    location: str | None = None
    is_active: bool | None = None


@router.get("", response_model=list[FacilityOut])
async def list_facilities(
    _: Annotated[CurrentUser, Depends(require_permission("facilities:read"))],
    facilities: Annotated[FacilityService, Depends(get_facility_service)],
    type: Annotated[FacilityType | None, Query()] = None,
    is_active: Annotated[bool | None, Query(alias="isActive")] = None,
) -> list[FacilityOut]:
    rows = await facilities.list(type=type, is_active=is_active)
    return [FacilityOut.model_validate(f) for f in rows]


@router.post("", response_model=FacilityOut, status_code=status.HTTP_201_CREATED)
async def create_facility(
    payload: FacilityCreate,
    _: Annotated[CurrentUser, Depends(require_permission("facilities:write"))],
    facilities: Annotated[FacilityService, Depends(get_facility_service)],
) -> FacilityOut:
    data = payload.model_dump()
    data["type"] = payload.type.value
    facility = await facilities.create(**data)
    return FacilityOut.model_validate(facility)


@router.put("/{facility_id}", response_model=FacilityOut)
async def update_facility(
    facility_id: str,
    payload: FacilityUpdate,
    _: Annotated[CurrentUser, Depends(require_permission("facilities:write"))],
    facilities: Annotated[FacilityService, Depends(get_facility_service)],
) -> FacilityOut:
    data = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key in ("description", "location")
    }
    if payload.type is not None:
        data["type"] = payload.type.value
    facility = await facilities.update(facility_id, **data)
    return FacilityOut.model_validate(facility)


@router.delete("/{facility_id}", response_model=MessageOut)
async def delete_facility(
    facility_id: str,
    _: Annotated[CurrentUser, Depends(require_permission("facilities:delete"))],
    facilities: Annotated[FacilityService, Depends(get_facility_service)],
) -> MessageOut:
    await facilities.delete(facility_id)
    return MessageOut(message="Facility deleted successfully")
