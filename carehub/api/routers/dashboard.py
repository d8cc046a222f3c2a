"""carehub/api/routers/dashboard.py — Complaint statistics."""
from __future__ import annotations

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends

from carehub.api.deps import CurrentUser, get_dashboard_service, require_permission
from carehub.api.schemas import CamelModel
from carehub.services.dashboard import DashboardService

router = APIRouter()


class StatusCount(CamelModel):
    status: str
    count: int


class PriorityCount(CamelModel):
    priority: str
    count: int


class DashboardStatsOut(CamelModel):
    total_complaints: int
    open_complaints: int
    closed_complaints: int
    avg_resolution_time: float
    complaints_by_status: list[StatusCount]
    complaints_by_priority: list[PriorityCount]


@router.get("/stats", response_model=DashboardStatsOut)
async def dashboard_stats(
    current_user: Annotated[CurrentUser, Depends(require_permission("dashboard:read"))],
    dashboard: Annotated[DashboardService, Depends(get_dashboard_service)],
) -> DashboardStatsOut:
    """Residents get statistics over their own complaints only."""
    stats = await dashboard.stats_for(current_user.id, current_user.role)
    return DashboardStatsOut.model_validate(asdict(stats))
