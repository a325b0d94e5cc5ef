"""
techintel.api.routers.dashboard.home

Dashboard home endpoints.

Responsibilities:
- Serve the recent activity feed and accept new activity entries.
- Serve headline KPIs and recompute them from stored technologies and signals.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session
from techintel.api.envelopes import ApiModel, data, rows
from techintel.api.errors import db_errors
from techintel.db.base import utcnow
from techintel.db.models import ActivityFeedItem, DashboardKpi
from techintel.db.repositories.dashboard import ActivityRepo, KpiRepo
from techintel.observability.logging import get_logger

router = APIRouter()
log = get_logger(__name__)

# metric_key -> (label, icon, decimal places)
KPI_DEFINITIONS: dict[str, tuple[str, str, int]] = {
    "technologies": ("Technologies Tracked", "Activity", 0),
    "signals": ("Emerging Signals", "TrendingUp", 0),
    "trl_avg": ("Avg TRL", "Target", 1),
}


class ActivityCreate(ApiModel):
    type: str = Field(min_length=1, max_length=32)
    description: str = Field(min_length=1)
    tech: str | None = Field(default=None, max_length=256)
    link: str | None = None


def kpi_change(previous: float, current: float, *, digits: int) -> tuple[float, str, str]:
    """
    Return (change_value, change_label, trend) for a KPI moving from `previous` to `current`.
    """

    change = round(current - previous, digits)
    if change > 0:
        trend = "up"
    elif change < 0:
        trend = "down"
    else:
        trend = "flat"
    shown = f"{change:+.{digits}f}" if digits else f"{int(change):+d}"
    return change, f"{shown} since last refresh", trend


@router.get("/activity")
async def list_activity(
    hours: int = Query(default=24, ge=1, le=24 * 365),
    limit: int = Query(default=20, ge=1, le=500),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    since = utcnow() - timedelta(hours=hours)
    with db_errors("Failed to fetch activity"):
        items = await ActivityRepo(session).find(
            ActivityFeedItem.timestamp >= since,
            order_by=[ActivityFeedItem.timestamp.desc()],
            limit=limit,
        )
    return data(rows(items))


@router.post("/activity", status_code=HTTP_201_CREATED)
async def create_activity(
    body: ActivityCreate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to create activity"):
        item = await ActivityRepo(session).create(**body.model_dump())
        await session.commit()
    return data(item.to_dict())


@router.get("/kpis")
async def list_kpis(session: AsyncSession = Depends(db_session)) -> dict[str, Any]:
    with db_errors("Failed to fetch KPIs"):
        kpis = await KpiRepo(session).find(order_by=[DashboardKpi.metric_key.asc()])
    return data(rows(kpis))


@router.post("/kpis/refresh")
async def refresh_kpis(session: AsyncSession = Depends(db_session)) -> dict[str, Any]:
    repo = KpiRepo(session)
    with db_errors("Failed to refresh KPIs"):
        tech_count, signal_count, avg_trl = await repo.snapshot()
        current = {"technologies": tech_count, "signals": signal_count, "trl_avg": avg_trl}

        for key, (label, icon, digits) in KPI_DEFINITIONS.items():
            existing = await repo.find_one(DashboardKpi.metric_key == key)
            previous = existing.value if existing is not None else 0.0
            value = round(float(current[key]), digits)
            change, change_label, trend = kpi_change(previous, value, digits=digits)
            await repo.upsert(
                key,
                label=label,
                icon=icon,
                value=value,
                change_value=change,
                change_label=change_label,
                trend=trend,
            )
        await session.commit()
        kpis = await repo.find(order_by=[DashboardKpi.metric_key.asc()])

    log.info("kpis_refreshed", technologies=tech_count, signals=signal_count)
    return data(rows(kpis))
