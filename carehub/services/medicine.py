"""carehub/services/medicine.py — Medicine inventory and availability checks."""
from __future__ import annotations

import enum
import logging
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from carehub.db.models import Medicine
from carehub.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


class Availability(str, enum.Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class MedicineService:
    def __init__(self, session: AsyncSession, low_stock_threshold: int = 10) -> None:
        self._session = session
        self._low_stock_threshold = low_stock_threshold

    async def list(
        self,
        search: str | None = None,
        availability: Availability | None = None,
    ) -> list[Medicine]:
        stmt = select(Medicine).order_by(Medicine.name)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(Medicine.name.ilike(pattern), Medicine.description.ilike(pattern))
            )
        if availability is Availability.IN_STOCK:
            stmt = stmt.where(Medicine.stock_level > 0)
        elif availability is Availability.LOW_STOCK:
            stmt = stmt.where(
                Medicine.stock_level > 0, Medicine.stock_level <= self._low_stock_threshold
            )
        elif availability is Availability.OUT_OF_STOCK:
            stmt = stmt.where(Medicine.stock_level == 0)
        return list(await self._session.scalars(stmt))

    async def get(self, medicine_id: str) -> Medicine:
        medicine = await self._session.get(Medicine, medicine_id)
        if medicine is None:
            raise NotFoundError("Medicine not found")
        return medicine

    async def create(self, **fields: Any) -> Medicine:
        await self._ensure_unique_name(fields["name"])
        medicine = Medicine(**fields)
        self._session.add(medicine)
        await self._flush()
        logger.info("Medicine %s added with stock %d", medicine.name, medicine.stock_level)
        return medicine

    async def update(self, medicine_id: str, **fields: Any) -> Medicine:
        medicine = await self.get(medicine_id)
        if "name" in fields and fields["name"] != medicine.name:
            await self._ensure_unique_name(fields["name"])
        for key, value in fields.items():
            setattr(medicine, key, value)
        await self._flush()
        return medicine

    async def delete(self, medicine_id: str) -> None:
        medicine = await self.get(medicine_id)
        await self._session.delete(medicine)
        await self._session.flush()

    async def _ensure_unique_name(self, name: str) -> None:
        existing = await self._session.scalar(select(Medicine.id).where(Medicine.name == name))
        if existing is not None:
            raise ConflictError("Medicine name already exists.")

    async def _flush(self) -> None:
        try:
            await self._session.flush()
        except IntegrityError as exc:
            raise ConflictError("Medicine name already exists.") from exc
