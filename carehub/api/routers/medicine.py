"""carehub/api/routers/medicine.py — Medicine inventory and availability checker."""
from __future__ import annotations

from datetime import date, datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import Field

from carehub.api.deps import CurrentUser, get_medicine_service, require_permission
from carehub.api.schemas import CamelModel, MessageOut
from carehub.services.medicine import Availability, MedicineService

router = APIRouter()


class MedicineOut(CamelModel):
    id: str
    name: str
    description: str | None = None
    stock_level: int
    unit: str
    expiry_date: date | None = None
    location: str | None = None
    created_at: datetime
    updated_at: datetime


class MedicineCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    stock_level: int = Field(0, ge=0)
    unit: str = Field(..., min_length=1, max_length=50)
    expiry_date: date | None = None
    location: str | None = None


class MedicineUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    stock_level: int | None = Field(None, ge=0)
    unit: str | None = Field(None, min_length=1, max_length=50)
    expiry_date: date | None = None
    location: str | None = None


@router.get("", response_model=list[MedicineOut])
async def list_medicines(
    _: Annotated[CurrentUser, Depends(require_permission("medicine:read"))],
    medicines: Annotated[MedicineService, Depends(get_medicine_service)],
    search: Annotated[str | None, Query()] = None,
    availability: Annotated[Availability | None, Query()] = None,
) -> list[MedicineOut]:
    """Every authenticated user can check availability."""
    rows = await medicines.list(search=search, availability=availability)
    return [MedicineOut.model_validate(m) for m in rows]


@router.post("", response_model=MedicineOut, status_code=status.HTTP_201_CREATED)
async def create_medicine(
    payload: MedicineCreate,
    _: Annotated[CurrentUser, Depends(require_permission("medicine:write"))],
    medicines: Annotated[MedicineService, Depends(get_medicine_service)],
) -> MedicineOut:
    medicine = await medicines.create(**payload.model_dump())
    return MedicineOut.model_validate(medicine)


@router.put("/{medicine_id}", response_model=MedicineOut)
async def update_medicine(
    medicine_id: str,
    payload: MedicineUpdate,
    _: Annotated[CurrentUser, Depends(require_permission("medicine:write"))],
    medicines: Annotated[MedicineService, Depends(get_medicine_service)],
) -> MedicineOut:
    # Omitted fields keep their value; null clears the optional columns.
    data = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key in ("description", "expiry_date", "location")
    }
    medicine = await medicines.update(medicine_id, **data)
    return MedicineOut.model_validate(medicine)


@router.delete("/{medicine_id}", response_model=MessageOut)
async def delete_medicine(
    medicine_id: str,
    _: Annotated[CurrentUser, Depends(require_permission("medicine:delete"))],
    medicines: Annotated[MedicineService, Depends(get_medicine_service)],
) -> MessageOut:
    await medicines.delete(medicine_id)
    return MessageOut(message="Medicine entry deleted successfully")
