"""
techintel.api.routers.reports.schedules

Report schedule endpoints.

Responsibilities:
- Create schedules with a computed `next_run`.
- Recompute `next_run` whenever recurrence or schedule time changes.
"""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session, settings_dep
from techintel.api.envelopes import ApiModel, data, rows
from techintel.api.errors import bad_request, db_errors, not_found
from techintel.db.base import utcnow
from techintel.db.models import ExportFormat, Recurrence, ScheduledReport
from techintel.db.repositories.reports import ReportRepo, ScheduledReportRepo
from techintel.observability.logging import get_logger
from techintel.services.schedules import ScheduleError, calculate_next_run
from techintel.settings import Settings

router = APIRouter()
log = get_logger(__name__)


class ScheduleCreate(ApiModel):
    report_id: uuid.UUID | None = None
    recurrence: Recurrence | None = None
    enabled: bool = True
    schedule: dict[str, Any] = Field(default_factory=dict)
    recipients: list[str] = Field(default_factory=list)
    delivery_channels: list[str] = Field(default_factory=list)
    export_format: ExportFormat = ExportFormat.pdf
    created_by: str | None = None


class ScheduleUpdate(ApiModel):
    enabled: bool | None = None
    recurrence: Recurrence | None = None
    schedule: dict[str, Any] | None = None
    recipients: list[str] | None = None
    delivery_channels: list[str] | None = None
    export_format: ExportFormat | None = None


def _next_run(recurrence: Recurrence, schedule: dict[str, Any]):
    try:
        return calculate_next_run(recurrence, schedule, now=utcnow())
    except ScheduleError as e:
        raise bad_request("Invalid schedule", str(e)) from e


@router.get("")
async def list_schedules(
    user_id: str | None = Query(default=None),
    enabled: bool | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    where = [ScheduledReport.created_by == (user_id or settings.default_user_id)]
    if enabled is not None:
        where.append(ScheduledReport.enabled.is_(enabled))

    with db_errors("Failed to fetch schedules"):
        schedules = await ScheduledReportRepo(session).find(
            *where, order_by=[ScheduledReport.next_run.asc()]
        )
    return data(rows(schedules))


@router.post("", status_code=HTTP_201_CREATED)
async def create_schedule(
    body: ScheduleCreate,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    if body.report_id is None or body.recurrence is None:
        raise bad_request("Missing required fields: reportId, recurrence")
    next_run = _next_run(body.recurrence, body.schedule)

    with db_errors("Failed to create schedule"):
        report = await ReportRepo(session).get(body.report_id)
        if report is None:
            raise not_found("Report")
        values = body.model_dump()
        values["created_by"] = body.created_by or settings.default_user_id
        schedule = await ScheduledReportRepo(session).create(
            **values, report_name=report.name, next_run=next_run
        )
        await session.commit()

    log.info(
        "report_schedule_created",
        schedule_id=str(schedule.id),
        recurrence=str(schedule.recurrence),
        next_run=schedule.next_run.isoformat(),
    )
    return data(schedule.to_dict())


@router.get("/{schedule_id}")
async def get_schedule(
    schedule_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to fetch schedule"):
        schedule = await ScheduledReportRepo(session).get(schedule_id)
    if schedule is None:
        raise not_found("Schedule")
    return data(schedule.to_dict())


@router.api_route("/{schedule_id}", methods=["PUT", "PATCH"])
async def update_schedule(
    schedule_id: uuid.UUID,
    body: ScheduleUpdate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = ScheduledReportRepo(session)
    changes = {k: v for k, v in body.changes().items() if v is not None}
    with db_errors("Failed to update schedule"):
        schedule = await repo.get(schedule_id)
        if schedule is None:
            raise not_found("Schedule")
        if "recurrence" in changes or "schedule" in changes:
            changes["next_run"] = _next_run(
                changes.get("recurrence", schedule.recurrence),
                changes.get("schedule", schedule.schedule),
            )
        await repo.update(schedule, changes)
        await session.commit()
    return data(schedule.to_dict())


@router.delete("/{schedule_id}")
async def delete_schedule(
    schedule_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = ScheduledReportRepo(session)
    with db_errors("Failed to delete schedule"):
        schedule = await repo.get(schedule_id)
        if schedule is None:
            raise not_found("Schedule")
        await repo.delete(schedule)
        await session.commit()
    return {"message": "Schedule deleted successfully"}
