"""
techintel.db.repositories.ingestion

Repositories for the admin-ingestion tables.

Responsibilities:
- CRUD for connectors, pipeline runs, index operations, secrets, templates and uploads.
- Append ingestion log rows and apply the connector counter updates they imply.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import select

from techintel.db.base import utcnow
from techintel.db.models import (
    ApiSecret,
    ConnectorTemplate,
    DataConnector,
    DocumentUpload,
    IndexOperation,
    IngestionLog,
    LogLevel,
    PipelineRun,
)
from techintel.db.repositories.base import CrudRepo


class ConnectorRepo(CrudRepo[DataConnector]):
    model = DataConnector

    async def touch_last_sync(self, connector_id: uuid.UUID, *, at: datetime | None = None) -> None:
        connector = await self.get(connector_id)
        if connector is not None:
            await self.update(connector, {"last_sync": at or utcnow()})

    async def add_documents(self, connector_id: uuid.UUID, count: int) -> None:
        await self.increment(connector_id, total_documents=count, documents_today=count)

    async def record_error(self, connector_id: uuid.UUID) -> None:
        await self.increment(connector_id, error_count=1)


class IngestionLogRepo(CrudRepo[IngestionLog]):
    model = IngestionLog

    async def add(
        self,
        *,
        level: LogLevel,
        message: str,
        connector_id: uuid.UUID | None = None,
        details: dict[str, Any] | None = None,
        document_id: str | None = None,
        retryable: bool = False,
        retry_count: int = 0,
        max_retries: int = 3,
    ) -> IngestionLog:
        # Log rows are append-only; the route decides whether a failure here is fatal.
        return await self.create(
            level=level,
            message=message,
            connector_id=connector_id,
            details=details,
            document_id=document_id,
            retryable=retryable,
            retry_count=retry_count,
            max_retries=max_retries,
        )


class PipelineRunRepo(CrudRepo[PipelineRun]):
    model = PipelineRun

    async def since(self, start: datetime) -> list[PipelineRun]:
        stmt = select(PipelineRun).where(PipelineRun.start_time >= start).order_by(PipelineRun.start_time)
        return list((await self._session.execute(stmt)).scalars().all())


class IndexOperationRepo(CrudRepo[IndexOperation]):
    model = IndexOperation


class SecretRepo(CrudRepo[ApiSecret]):
    model = ApiSecret


class ConnectorTemplateRepo(CrudRepo[ConnectorTemplate]):
    model = ConnectorTemplate


class UploadRepo(CrudRepo[DocumentUpload]):
    model = DocumentUpload
