"""
techintel.api.routers.reports.generated

Generated report version endpoints.

Responsibilities:
- Record a generated version (next version number per report).
- Stamp the parent report's `last_generated` in the same transaction.
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
from techintel.db.models import ExportFormat, GeneratedReport, GenerationStatus
from techintel.db.repositories.reports import GeneratedReportRepo, ReportRepo
from techintel.observability.logging import get_logger
from techintel.settings import Settings

router = APIRouter()
log = get_logger(__name__)


class GeneratedCreate(ApiModel):
    report_id: uuid.UUID | None = None
    format: str | None = None
    status: GenerationStatus = GenerationStatus.generating
    file_url: str | None = None
    file_size: int = Field(default=0, ge=0)
    generated_by: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class GeneratedUpdate(ApiModel):
    comments: list[dict[str, Any]] | None = None
    download_count: int | None = Field(default=None, ge=0)
    status: GenerationStatus | None = None
    file_url: str | None = None
    file_size: int | None = Field(default=None, ge=0)


@router.get("")
async def list_generated(
    report_id: uuid.UUID | None = Query(default=None),
    user_id: str | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    where = [GeneratedReport.generated_by == (user_id or settings.default_user_id)]
    if report_id is not None:
        where.append(GeneratedReport.report_id == report_id)

    with db_errors("Failed to fetch generated reports"):
        generated = await GeneratedReportRepo(session).find(
            *where, order_by=[GeneratedReport.generated_at.desc()]
        )
    return data(rows(generated))


@router.post("", status_code=HTTP_201_CREATED)
async def create_generated(
    body: GeneratedCreate,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    if body.report_id is None or not body.format:
        raise bad_request("Missing required fields: reportId, format")
    try:
        fmt = ExportFormat(body.format)
    except ValueError as e:
        raise bad_request("Invalid format", f"expected one of: {', '.join(ExportFormat)}") from e

    reports = ReportRepo(session)
    generated_repo = GeneratedReportRepo(session)
    now = utcnow()
    with db_errors("Failed to create generated report"):
        report = await reports.get(body.report_id)
        if report is None:
            raise not_found("Report")
        generated = await generated_repo.create(
            report_id=report.id,
            report_name=report.name,
            version=await generated_repo.next_version(report.id),
            format=fmt,
            status=body.status,
            file_url=body.file_url,
            file_size=body.file_size,
            generated_by=body.generated_by or settings.default_user_id,
            generated_at=now,
            download_count=0,
            comments=[],
            meta=body.metadata,
        )
        await reports.touch_generated(report.id, at=now)
        await session.commit()

    log.info("report_generated", report_id=str(report.id), version=generated.version, format=str(fmt))
    return data(generated.to_dict())


@router.patch("/{generated_id}")
async def update_generated(
    generated_id: uuid.UUID,
    body: GeneratedUpdate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = GeneratedReportRepo(session)
    with db_errors("Failed to update generated report"):
        generated = await repo.get(generated_id)
        if generated is None:
            raise not_found("Generated report")
        await repo.update(generated, body.changes())
        await session.commit()
    return data(generated.to_dict())


@router.delete("/{generated_id}")
async def delete_generated(
    generated_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = GeneratedReportRepo(session)
    with db_errors("Failed to delete generated report"):
        generated = await repo.get(generated_id)
        if generated is None:
            raise not_found("Generated report")
        await repo.delete(generated)
        await session.commit()
    return {"message": "Generated report deleted successfully"}
