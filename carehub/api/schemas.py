"""
carehub/api/schemas.py — Response/request building blocks shared across routers.

The HTTP surface speaks camelCase; models accept either spelling on input.
"""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class UserBrief(CamelModel):
    id: str
    name: str
    email: str
    role: str


class UserOut(UserBrief):
    created_at: datetime | None = None


class StaffBrief(CamelModel):
    name: str
    role: str


class MessageOut(CamelModel):
    message: str


class FacilityOut(CamelModel):
    id: str
    name: str
    type: str
    description: str | None = None
    location: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
