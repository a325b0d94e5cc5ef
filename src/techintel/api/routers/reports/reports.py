"""
techintel.api.routers.reports.reports

Report definition endpoints.

Responsibilities:
- List a user's reports, newest change first.
- Create, read, update (PUT or PATCH) and delete report definitions.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session, settings_dep
from techintel.api.envelopes import ApiModel, data, parse_enum, rows
from techintel.api.errors import bad_request, db_errors, not_found
from techintel.db.models import Report, ReportStatus
from techintel.db.models.reports import default_layout, default_styling
from techintel.db.repositories.reports import ReportRepo
from techintel.observability.logging import get_logger
from techintel.settings import Settings

router = APIRouter()
log = get_logger(__name__)


class ReportCreate(ApiModel):
    # name/type are checked in the handler so the 400 names both fields.
    name: str | None = None
    type: str | None = None
    description: str = ""
    template_id: str | None = None
    widgets: list[dict[str, Any]] = Field(default_factory=list)
    layout: dict[str, Any] = Field(default_factory=default_layout)
    filters: dict[str, Any] = Field(default_factory=dict)
    styling: dict[str, Any] = Field(default_factory=default_styling)
    status: ReportStatus = ReportStatus.draft
    created_by: str | None = None


class ReportUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=256)
    description: str | None = None
    type: str | None = None
    widgets: list[dict[str, Any]] | None = None
    layout: dict[str, Any] | None = None
    filters: dict[str, Any] | None = None
    styling: dict[str, Any] | None = None
    status: ReportStatus | None = None
    last_generated: datetime | None = None


@router.get("")
async def list_reports(
    user_id: str | None = Query(default=None),
    status: str | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    where = [Report.created_by == (user_id or settings.default_user_id)]
    if (report_status := parse_enum(ReportStatus, status, field="status")) is not None:
        where.append(Report.status == report_status)

    with db_errors("Failed to fetch reports"):
        reports = await ReportRepo(session).find(*where, order_by=[Report.updated_at.desc()])
    return data(rows(reports))


@router.post("", status_code=HTTP_201_CREATED)
async def create_report(
    body: ReportCreate,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    if not body.name or not body.type:
        raise bad_request("Missing required fields: name, type")

    values = body.model_dump()
    values["created_by"] = body.created_by or settings.default_user_id
    with db_errors("Failed to create report"):
        report = await ReportRepo(session).create(**values)
        await session.commit()

    log.info("report_created", report_id=str(report.id), type=report.type)
    return data(report.to_dict())


@router.get("/{report_id}")
async def get_report(
    report_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to fetch report"):
        report = await ReportRepo(session).get(report_id)
    if report is None:
        raise not_found("Report")
    return data(report.to_dict())


@router.api_route("/{report_id}", methods=["PUT", "PATCH"])
async def update_report(
    report_id: uuid.UUID,
    body: ReportUpdate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = ReportRepo(session)
    with db_errors("Failed to update report"):
        report = await repo.get(report_id)
        if report is None:
            raise not_found("Report")
        await repo.update(report, body.changes())
        await session.commit()
    return data(report.to_dict())


@router.delete("/{report_id}")
async def delete_report(
    report_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = ReportRepo(session)
    with db_errors("Failed to delete report"):
        report = await repo.get(report_id)
        if report is None:
            raise not_found("Report")
        await repo.delete(report)
        await session.commit()

    log.info("report_deleted", report_id=str(report_id))
    return {"message": "Report deleted successfully"}
