from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import func, select

from techintel.db.base import utcnow
from techintel.db.models import GeneratedReport, Report, ReportTemplate, ScheduledReport
from techintel.db.repositories.base import CrudRepo


class ReportRepo(CrudRepo[Report]):
    model = Report

    async def touch_generated(self, report_id: uuid.UUID, *, at: datetime | None = None) -> None:
        report = await self.get(report_id)
        if report is not None:
            await self.update(report, {"last_generated": at or utcnow()})


class GeneratedReportRepo(CrudRepo[GeneratedReport]):
    model = GeneratedReport

    async def next_version(self, report_id: uuid.UUID) -> int:
        stmt = select(func.max(GeneratedReport.version)).where(GeneratedReport.report_id == report_id)
        current = (await self._session.execute(stmt)).scalar_one_or_none()
        return int(current or 0) + 1

    async def totals(self, *where) -> tuple[int, int]:
        # (downloads, bytes)
        stmt = select(
            func.coalesce(func.sum(GeneratedReport.download_count), 0),
            func.coalesce(func.sum(GeneratedReport.file_size), 0),
        ).where(*where)
        downloads, size = (await self._session.execute(stmt)).one()
        return int(downloads), int(size)


class ScheduledReportRepo(CrudRepo[ScheduledReport]):
    model = ScheduledReport


class ReportTemplateRepo(CrudRepo[ReportTemplate]):
    model = ReportTemplate
