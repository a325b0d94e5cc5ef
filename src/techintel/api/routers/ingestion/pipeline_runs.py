"""
techintel.api.routers.ingestion.pipeline_runs

Pipeline run endpoints.

Responsibilities:
- Record ingestion runs and their counters.
- On start: log the run and touch the connector's `last_sync`.
- On completion: stamp end time/duration and credit processed documents to the connector.
"""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session
from techintel.api.envelopes import ApiModel, data, parse_enum, rows
from techintel.api.errors import db_errors, not_found
from techintel.db.base import utcnow
from techintel.db.models import LogLevel, PipelineRun, PipelineRunStatus
from techintel.db.repositories.ingestion import ConnectorRepo, IngestionLogRepo, PipelineRunRepo
from techintel.observability.logging import get_logger

router = APIRouter()
log = get_logger(__name__)

_FINISHED = (PipelineRunStatus.completed, PipelineRunStatus.failed)


class PipelineRunCreate(ApiModel):
    connector_id: uuid.UUID | None = None
    connector_name: str = Field(min_length=1, max_length=256)
    documents_queued: int = Field(default=0, ge=0)


class PipelineRunUpdate(ApiModel):
    status: PipelineRunStatus | None = None
    documents_processed: int | None = Field(default=None, ge=0)
    documents_queued: int | None = Field(default=None, ge=0)
    documents_failed: int | None = Field(default=None, ge=0)
    error_messages: list[str] | None = None
    throughput: float | None = Field(default=None, ge=0)
    memory_usage: float | None = None
    cpu_usage: float | None = None


@router.get("")
async def list_pipeline_runs(
    status: str | None = Query(default=None),
    connector_id: uuid.UUID | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=1000),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    where = []
    if (run_status := parse_enum(PipelineRunStatus, status, field="status")) is not None:
        where.append(PipelineRun.status == run_status)
    if connector_id is not None:
        where.append(PipelineRun.connector_id == connector_id)

    with db_errors("Failed to fetch pipeline runs"):
        runs = await PipelineRunRepo(session).find(
            *where, order_by=[PipelineRun.start_time.desc()], limit=limit
        )
    return data(rows(runs))


@router.post("", status_code=HTTP_201_CREATED)
async def create_pipeline_run(
    body: PipelineRunCreate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    now = utcnow()
    with db_errors("Failed to create pipeline run"):
        run = await PipelineRunRepo(session).create(
            connector_id=body.connector_id,
            connector_name=body.connector_name,
            status=PipelineRunStatus.running,
            start_time=now,
            documents_queued=body.documents_queued,
            documents_processed=0,
            documents_failed=0,
            error_messages=[],
            throughput=0.0,
            memory_usage=0.0,
            cpu_usage=0.0,
        )
        await IngestionLogRepo(session).add(
            level=LogLevel.info,
            connector_id=body.connector_id,
            message=f'Pipeline run started for "{body.connector_name}"',
        )
        if body.connector_id is not None:
            await ConnectorRepo(session).touch_last_sync(body.connector_id, at=now)
        await session.commit()

    log.info("pipeline_run_started", run_id=str(run.id), connector_id=str(body.connector_id))
    return data(run.to_dict())


@router.get("/{run_id}")
async def get_pipeline_run(
    run_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to fetch pipeline run"):
        run = await PipelineRunRepo(session).get(run_id)
    if run is None:
        raise not_found("Pipeline run")
    return data(run.to_dict())


@router.patch("/{run_id}")
async def update_pipeline_run(
    run_id: uuid.UUID,
    body: PipelineRunUpdate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = PipelineRunRepo(session)
    changes = body.changes()
    with db_errors("Failed to update pipeline run"):
        run = await repo.get(run_id)
        if run is None:
            raise not_found("Pipeline run")

        if body.status in _FINISHED:
            end_time = utcnow()
            changes["end_time"] = end_time
            changes["duration"] = int((end_time - run.start_time).total_seconds())

        await repo.update(run, changes)
        if run.status == PipelineRunStatus.completed and run.connector_id is not None:
            await ConnectorRepo(session).add_documents(run.connector_id, run.documents_processed)
        await session.commit()

    if body.status is not None:
        log.info("pipeline_run_updated", run_id=str(run.id), status=str(run.status))
    return data(run.to_dict())


@router.delete("/{run_id}")
async def delete_pipeline_run(
    run_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = PipelineRunRepo(session)
    with db_errors("Failed to delete pipeline run"):
        run = await repo.get(run_id)
        if run is None:
            raise not_found("Pipeline run")
        await repo.delete(run)
        await session.commit()
    return {"message": "Pipeline run deleted successfully"}
