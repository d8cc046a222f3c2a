"""
carehub/services/dashboard.py — Complaint statistics for the dashboard.

Statistics are a pure projection over complaint rows and are recomputed on
every request; nothing is stored.
"""
from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carehub.db.models import Complaint, ComplaintStatus, Priority, Role


class ComplaintRow(Protocol):
    status: str
    priority: str
    created_at: datetime
    resolved_at: datetime | None


@dataclass
class DashboardStats:
    total_complaints: int = 0
    open_complaints: int = 0
    closed_complaints: int = 0
    avg_resolution_time: float = 0.0  # hours
    complaints_by_status: list[dict[str, int | str]] = field(default_factory=list)
    complaints_by_priority: list[dict[str, int | str]] = field(default_factory=list)


def average_resolution_hours(rows: Iterable[ComplaintRow]) -> float:
    """Mean of resolved_at − created_at in hours, rounded to one decimal; 0 if none resolved."""
    durations = [
        (row.resolved_at - row.created_at).total_seconds()
        for row in rows
        if row.resolved_at is not None
    ]
    if not durations:
        return 0.0
    hours = sum(durations) / len(durations) / 3600
    # Halves round up (0.25 -> 0.3), not to the even digit.
    return float(Decimal(str(hours)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def compute_stats(rows: Iterable[ComplaintRow]) -> DashboardStats:
    rows = list(rows)
    by_status = Counter(row.status for row in rows)
    by_priority = Counter(row.priority for row in rows)
    closed = by_status.get(ComplaintStatus.CLOSED.value, 0)

    return DashboardStats(
        total_complaints=len(rows),
        open_complaints=len(rows) - closed,
        closed_complaints=closed,
        avg_resolution_time=average_resolution_hours(rows),
        # Groups follow lifecycle / severity order and omit empty buckets.
        complaints_by_status=[
            {"status": s.value, "count": by_status[s.value]}
            for s in ComplaintStatus
            if by_status[s.value]
        ],
        complaints_by_priority=[
            {"priority": p.value, "count": by_priority[p.value]}
            for p in Priority
            if by_priority[p.value]
        ],
    )


class DashboardService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def stats_for(self, user_id: str, role: str) -> DashboardStats:
        stmt = select(
            Complaint.status,
            Complaint.priority,
            Complaint.created_at,
            Complaint.resolved_at,
        )
        if role == Role.RESIDENT.value:
            stmt = stmt.where(Complaint.created_by_id == user_id)
        result = await self._session.execute(stmt)
        return compute_stats(result.all())
