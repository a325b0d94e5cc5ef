"""
techintel.api.routers.forecasting.jobs

Forecast job endpoints.

Responsibilities:
- Create pending jobs and schedule their execution after the response is sent.
- Expose job status/progress for polling.
"""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session, sessionmaker_from_app, settings_dep
from techintel.api.envelopes import ApiModel, data, parse_enum, rows
from techintel.api.errors import db_errors, not_found
from techintel.db.models import ForecastJob, JobStatus, ScenarioType
from techintel.db.repositories.forecasting import ForecastingModelRepo, ForecastJobRepo
from techintel.services.forecast_jobs import ForecastJobService, run_forecast_job
from techintel.settings import Settings

router = APIRouter()


class JobCreate(ApiModel):
    model_id: uuid.UUID
    tech_ids: list[str] = Field(min_length=1)
    scenario: ScenarioType = ScenarioType.baseline
    parameters: dict[str, Any] = Field(default_factory=dict)
    created_by: str = "system"
    random_seed: int | None = None


@router.get("")
async def list_jobs(
    status: str | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    where = []
    if (job_status := parse_enum(JobStatus, status, field="status")) is not None:
        where.append(ForecastJob.status == job_status)

    with db_errors("Failed to fetch jobs"):
        jobs = await ForecastJobRepo(session).find(*where, order_by=[ForecastJob.created_at.desc()])
    return data(rows(jobs))


@router.get("/{job_id}")
async def get_job(
    job_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to fetch job"):
        job = await ForecastJobRepo(session).get(job_id)
    if job is None:
        raise not_found("Job")
    return data(job.to_dict())


@router.post("", status_code=HTTP_201_CREATED)
async def create_job(
    body: JobCreate,
    background: BackgroundTasks,
    session: AsyncSession = Depends(db_session),
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    with db_errors("Failed to create job"):
        model = await ForecastingModelRepo(session).get(body.model_id)
        if model is None:
            raise not_found("Model")
        job_id = await ForecastJobService(session=session, settings=settings).create(
            model=model,
            tech_ids=body.tech_ids,
            scenario=body.scenario,
            parameters=body.parameters,
            created_by=body.created_by,
            random_seed=body.random_seed,
        )

    background.add_task(run_forecast_job, session_factory, settings, job_id)
    return data(
        {
            "job_id": str(job_id),
            "status": JobStatus.pending.value,
            "estimated_time": settings.forecast_estimated_time,
        }
    )
