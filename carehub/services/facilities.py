"""carehub/services/facilities.py — Facility catalog CRUD."""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from carehub.db.models import Facility, FacilityType
from carehub.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


class FacilityService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list(
        self,
        type: FacilityType | None = None,
        is_active: bool | None = None,
    ) -> list[Facility]:
        stmt = select(Facility).order_by(Facility.name)
        if type is not None:
            stmt = stmt.where(Facility.type == FacilityType(type).value)
        if is_active is not None:
            stmt = stmt.where(Facility.is_active.is_(is_active))
        return list(await self._session.scalars(stmt))

    async def get(self, facility_id: str) -> Facility:
        facility = await self._session.get(Facility, facility_id)
        if facility is None:
            raise NotFoundError("Facility not found")
        return facility

    async def create(self, **fields: Any) -> Facility:
        await self._ensure_unique_name(fields["name"])
        facility = Facility(**fields)
        self._session.add(facility)
        await self._flush()
        logger.info("Facility %s created (%s)", facility.id, facility.name)
        return facility

    async def update(self, facility_id: str, **fields: Any) -> Facility:
        facility = await self.get(facility_id)
        if "name" in fields and fields["name"] != facility.name:
            await self._ensure_unique_name(fields["name"])
        for key, value in fields.items():
            setattr(facility, key, value)
        await self._flush()
        return facility

    async def delete(self, facility_id: str) -> None:
        facility = await self.get(facility_id)
        await self._session.delete(facility)
        await self._flush()
        logger.info("Facility %s deleted", facility_id)

    async def _ensure_unique_name(self, name: str) -> None:
        existing = await self._session.scalar(select(Facility.id).where(Facility.name == name))
        if existing is not None:
            raise ConflictError("Facility name already exists.")

    async def _flush(self) -> None:
        try:
            await self._session.flush()
        except IntegrityError as exc:
            # Unique name raced past the pre-check, or the facility is still
            # referenced by complaints.
            raise ConflictError("Facility could not be saved: conflicting data.") from exc
