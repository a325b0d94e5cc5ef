"""
techintel.api.routers.tech_detail.forecast

Per-technology forecast endpoints.

Responsibilities:
- Return the latest stored forecast result for the technology.
- Queue a forecast job for this technology on the chosen (or most used ready) model.
"""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session, sessionmaker_from_app, settings_dep
from techintel.api.envelopes import ApiModel, data
from techintel.api.errors import db_errors, not_found
from techintel.api.routers.tech_detail.deps import technology_dep
from techintel.auth.deps import get_principal
from techintel.auth.models import Principal
from techintel.db.models import ForecastingModel, JobStatus, ModelStatus, ScenarioType, Technology
from techintel.db.repositories.forecasting import ForecastingModelRepo, ForecastResultRepo
from techintel.services.forecast_jobs import ForecastJobService, run_forecast_job
from techintel.settings import Settings

router = APIRouter()


class ForecastRequest(ApiModel):
    model_id: uuid.UUID | None = None
    scenario: ScenarioType = ScenarioType.baseline
    parameters: dict[str, Any] = Field(default_factory=dict)


async def _pick_model(session: AsyncSession, model_id: uuid.UUID | None) -> ForecastingModel | None:
    repo = ForecastingModelRepo(session)
    if model_id is not None:
        return await repo.get(model_id)
    ready = await repo.find(
        ForecastingModel.status == ModelStatus.ready,
        order_by=[ForecastingModel.usage_count.desc()],
        limit=1,
    )
    return ready[0] if ready else None


@router.get("")
async def latest_forecast(
    technology_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to fetch forecast"):
        result = await ForecastResultRepo(session).latest_for_tech(str(technology_id))
    return data(result.to_dict() if result is not None else None, tech_id=str(technology_id))


@router.post("", status_code=HTTP_201_CREATED)
async def run_forecast(
    body: ForecastRequest,
    background: BackgroundTasks,
    technology: Technology = Depends(technology_dep),
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    with db_errors("Failed to create job"):
        model = await _pick_model(session, body.model_id)
        if model is None:
            raise not_found("Model")
        job_id = await ForecastJobService(session=session, settings=settings).create(
            model=model,
            tech_ids=[str(technology.id)],
            scenario=body.scenario,
            parameters=body.parameters,
            created_by=principal.subject,
        )

    background.add_task(run_forecast_job, session_factory, settings, job_id)
    return data(
        {
            "job_id": str(job_id),
            "model_id": str(model.id),
            "status": JobStatus.pending.value,
            "estimated_time": settings.forecast_estimated_time,
        },
        tech_id=str(technology.id),
    )
