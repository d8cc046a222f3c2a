"""
carehub/services/medical.py — Per-user medical records and staff-authored logs.

A MedicalRecord is created lazily the first time it is read or updated;
MedicalLog rows are append-only and require the record to exist.
"""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from carehub.db.models import MedicalLog, MedicalRecord, User
from carehub.errors import NotFoundError

logger = logging.getLogger(__name__)


class MedicalService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_or_create_record(self, user_id: str) -> MedicalRecord:
        record = await self._find_record(user_id)
        if record is not None:
            return record
        if await self._session.get(User, user_id) is None:
            raise NotFoundError("User not found")
        try:
            async with self._session.begin_nested():
                record = MedicalRecord(user_id=user_id)
                self._session.add(record)
        except IntegrityError:
            # Another request created the record first; use theirs.
            logger.info("Medical record for user %s created concurrently", user_id)
            return await self._require_record(user_id)
        logger.info("Created medical record for user %s", user_id)
        return record

    async def update_record(self, user_id: str, **fields: Any) -> MedicalRecord:
        record = await self.get_or_create_record(user_id)
        for key, value in fields.items():
            setattr(record, key, value)
        await self._session.flush()
        return record

    async def list_logs(self, user_id: str) -> list[MedicalLog]:
        record = await self._require_record(user_id)
        stmt = (
            select(MedicalLog)
            .where(MedicalLog.record_id == record.id)
            .options(selectinload(MedicalLog.staff))
            .order_by(MedicalLog.timestamp.desc())
        )
        return list(await self._session.scalars(stmt))

    async def add_log(
        self,
        user_id: str,
        staff_id: str,
        diagnosis: str | None = None,
        treatment: str | None = None,
        medication: str | None = None,
    ) -> MedicalLog:
        record = await self._require_record(user_id)
        staff = await self._session.get(User, staff_id)
        if staff is None:
            raise NotFoundError("User not found")
        log = MedicalLog(
            record_id=record.id,
            staff=staff,
            diagnosis=diagnosis,
            treatment=treatment,
            medication=medication,
        )
        self._session.add(log)
        await self._session.flush()
        return log

    async def _find_record(self, user_id: str) -> MedicalRecord | None:
        return await self._session.scalar(
            select(MedicalRecord).where(MedicalRecord.user_id == user_id)
        )

    async def _require_record(self, user_id: str) -> MedicalRecord:
        record = await self._find_record(user_id)
        if record is None:
            raise NotFoundError("Medical record not found for this user.")
        return record
