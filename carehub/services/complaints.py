"""
carehub/services/complaints.py — Complaint lifecycle engine.

Complaint status is a forward-only state machine:

    new → assigned → in_progress → resolved → closed

Every accepted transition appends a ComplaintStatusHistory row and notifies
the interested party. Assignment keeps at most one active
ComplaintAssignment per complaint.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import UploadFile
from sqlalchemy import Select, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from carehub.db.models import (
    Complaint,
    ComplaintAssignment,
    ComplaintStatus,
    ComplaintStatusHistory,
    Facility,
    Priority,
    Role,
    User,
    utcnow,
)
from carehub.errors import InvalidTransitionError, NotFoundError
from carehub.services.notifications import NotificationSink
from carehub.storage.uploads import discard_attachment, save_attachment

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS: dict[ComplaintStatus, frozenset[ComplaintStatus]] = {
    ComplaintStatus.NEW:         frozenset({ComplaintStatus.ASSIGNED}),
    ComplaintStatus.ASSIGNED:    frozenset({ComplaintStatus.IN_PROGRESS}),
    ComplaintStatus.IN_PROGRESS: frozenset({ComplaintStatus.RESOLVED}),
    ComplaintStatus.RESOLVED:    frozenset({ComplaintStatus.CLOSED}),
    ComplaintStatus.CLOSED:      frozenset(),
}


def check_transition(current: str, target: str) -> ComplaintStatus:
    """
    Validate ``current → target`` against the transition table.

    Returns the target as a ComplaintStatus.

    Raises:
        InvalidTransitionError: naming both states when the edge is not allowed
            (including unknown status values).
    """
    try:
        current_status = ComplaintStatus(current)
        target_status = ComplaintStatus(target)
    except ValueError as exc:
        raise InvalidTransitionError(str(current), str(target)) from exc
    if target_status not in ALLOWED_TRANSITIONS[current_status]:
        raise InvalidTransitionError(current_status.value, target_status.value)
    return target_status


@dataclass
class ComplaintFilters:
    status: ComplaintStatus | None = None
    priority: Priority | None = None
    facility_id: str | None = None


def scope_for(stmt: Select, user_id: str, role: str) -> Select:
    """Restrict a complaint query to what ``role`` may see."""
    if role == Role.RESIDENT.value:
        return stmt.where(Complaint.created_by_id == user_id)
    if role == Role.MEDICAL_STAFF.value:
        return stmt.where(
            Complaint.assignments.any(
                (ComplaintAssignment.assigned_to_id == user_id)
                & ComplaintAssignment.is_active.is_(True)
            )
        )
    return stmt


class ComplaintService:
    def __init__(self, session: AsyncSession, notifications: NotificationSink) -> None:
        self._session = session
        self._notifications = notifications

    # ── Commands ──────────────────────────────────────────────────────────────

    async def create(
        self,
        *,
        title: str,
        description: str,
        facility_id: str,
        created_by_id: str,
        priority: Priority = Priority.MEDIUM,
        attachment: UploadFile | None = None,
    ) -> Complaint:
        facility = await self._session.get(Facility, facility_id)
        if facility is None:
            raise NotFoundError("Facility not found")
        creator = await self._session.get(User, created_by_id)
        if creator is None:
            raise NotFoundError("User not found")

        attachment_path = await save_attachment(attachment) if attachment is not None else None

        complaint = Complaint(
            title=title,
            description=description,
            priority=Priority(priority).value,
            status=ComplaintStatus.NEW.value,
            facility=facility,
            created_by=creator,
            attachment=attachment_path,
            assignments=[],
            status_history=[
                ComplaintStatusHistory(
                    from_status=None,
                    to_status=ComplaintStatus.NEW.value,
                    notes="Complaint created",
                )
            ],
        )
        self._session.add(complaint)
        try:
            await self._session.flush()
        except SQLAlchemyError:
            if attachment_path is not None:
                discard_attachment(attachment_path)
            raise
        logger.info("Complaint %s created by %s at facility %s", complaint.id, creator.id, facility.id)

        managers = await self._session.scalars(
            select(User.id).where(User.role == Role.FACILITY_MANAGER.value)
        )
        await self._notifications.notify_many(
            list(managers),
            "New Complaint",
            f"New complaint: {title} at {facility.name}",
        )
        return complaint

    async def assign(
        self,
        complaint_id: str,
        assignee_id: str,
        notes: str | None = None,
    ) -> ComplaintAssignment:
        complaint = await self._session.get(Complaint, complaint_id)
        if complaint is None:
            raise NotFoundError("Complaint not found")
        assignee = await self._session.get(User, assignee_id)
        if assignee is None:
            raise NotFoundError("Assigned user not found")

        await self._session.execute(
            update(ComplaintAssignment)
            .where(
                ComplaintAssignment.complaint_id == complaint_id,
                ComplaintAssignment.is_active.is_(True),
            )
            .values(is_active=False)
        )

        assignment = ComplaintAssignment(
            complaint_id=complaint_id,
            assigned_to=assignee,
            notes=notes,
            is_active=True,
        )
        self._session.add(assignment)

        if complaint.status == ComplaintStatus.NEW.value:
            complaint.status = ComplaintStatus.ASSIGNED.value
            self._session.add(
                ComplaintStatusHistory(
                    complaint_id=complaint_id,
                    from_status=ComplaintStatus.NEW.value,
                    to_status=ComplaintStatus.ASSIGNED.value,
                    notes=f"Assigned to {assignee.name}",
                )
            )
        await self._session.flush()
        logger.info("Complaint %s assigned to %s", complaint_id, assignee_id)

        await self._notifications.notify(
            assignee.id,
            "Complaint Assigned",
            f"You have been assigned to: {complaint.title}",
        )
        return assignment

    async def update_status(
        self,
        complaint_id: str,
        target: ComplaintStatus | str,
        notes: str | None = None,
    ) -> Complaint:
        complaint = await self._session.get(Complaint, complaint_id)
        if complaint is None:
            raise NotFoundError("Complaint not found")

        previous = complaint.status
        new_status = check_transition(previous, target)

        complaint.status = new_status.value
        if new_status is ComplaintStatus.RESOLVED and complaint.resolved_at is None:
            complaint.resolved_at = utcnow()
        elif new_status is ComplaintStatus.CLOSED and complaint.closed_at is None:
            complaint.closed_at = utcnow()

        self._session.add(
            ComplaintStatusHistory(
                complaint_id=complaint_id,
                from_status=previous,
                to_status=new_status.value,
                notes=notes,
            )
        )
        await self._session.flush()
        logger.info("Complaint %s moved %s → %s", complaint_id, previous, new_status.value)

        await self._notifications.notify(
            complaint.created_by_id,
            "Complaint Status Updated",
            f'Your complaint "{complaint.title}" status changed to {new_status.value}',
        )
        return await self.get(complaint_id)

    # ── Queries ───────────────────────────────────────────────────────────────

    async def list_for(
        self,
        user_id: str,
        role: str,
        filters: ComplaintFilters | None = None,
    ) -> list[Complaint]:
        filters = filters or ComplaintFilters()
        stmt = (
            select(Complaint)
            .options(
                selectinload(Complaint.facility),
                selectinload(Complaint.created_by),
                selectinload(
                    Complaint.assignments.and_(ComplaintAssignment.is_active.is_(True))
                ).selectinload(ComplaintAssignment.assigned_to),
            )
            .order_by(Complaint.created_at.desc())
            .execution_options(populate_existing=True)
        )
        stmt = scope_for(stmt, user_id, role)
        if filters.status is not None:
            stmt = stmt.where(Complaint.status == ComplaintStatus(filters.status).value)
        if filters.priority is not None:
            stmt = stmt.where(Complaint.priority == Priority(filters.priority).value)
        if filters.facility_id is not None:
            stmt = stmt.where(Complaint.facility_id == filters.facility_id)

        result = await self._session.scalars(stmt)
        return list(result)

    async def get(
        self,
        complaint_id: str,
        user_id: str | None = None,
        role: str | None = None,
    ) -> Complaint:
        """
        Load one complaint with facility, creator, assignments and history.

        When a requester is given the same role projection as list_for
        applies, and an out-of-scope complaint is reported as not found.
        """
        stmt = (
            select(Complaint)
            .where(Complaint.id == complaint_id)
            .options(
                selectinload(Complaint.facility),
                selectinload(Complaint.created_by),
                selectinload(Complaint.assignments).selectinload(ComplaintAssignment.assigned_to),
                selectinload(Complaint.status_history),
            )
            .execution_options(populate_existing=True)
        )
        if user_id is not None and role is not None:
            stmt = scope_for(stmt, user_id, role)

        complaint = await self._session.scalar(stmt)
        if complaint is None:
            raise NotFoundError("Complaint not found")
        return complaint
