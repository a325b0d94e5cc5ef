"""
techintel.db.repositories.forecasting

Repositories for the forecasting tables.

Responsibilities:
- CRUD for the model catalog, scenario presets and scheduled runs.
- Create forecast jobs and persist their progress checkpoints.
- Append forecast results produced by the job pipeline.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from techintel.db.base import utcnow
from techintel.db.models import (
    ForecastingModel,
    ForecastJob,
    ForecastResult,
    JobStatus,
    ScenarioPreset,
    ScheduledRun,
)
from techintel.db.repositories.base import CrudRepo


class ForecastingModelRepo(CrudRepo[ForecastingModel]):
    model = ForecastingModel


class ForecastJobRepo(CrudRepo[ForecastJob]):
    model = ForecastJob

    async def set_state(
        self,
        *,
        job_id: uuid.UUID,
        status: JobStatus | None = None,
        progress: int | None = None,
        state: dict[str, Any] | None = None,
        started_at: datetime | None = None,
        completed_at: datetime | None = None,
        error: str | None = None,
    ) -> ForecastJob | None:
        # Checkpoints lock the row so a concurrent PATCH cannot interleave with a step write.
        job = await self._session.get(ForecastJob, job_id, with_for_update=True)
        if job is None:
            return None
        if status is not None:
            job.status = status
        if progress is not None:
            job.progress = progress
        if state is not None:
            job.state = state
        if started_at is not None:
            job.started_at = started_at
        if completed_at is not None:
            job.completed_at = completed_at
        if error is not None:
            job.error = error
        job.updated_at = utcnow()
        await self._session.flush()
        return job


class ForecastResultRepo(CrudRepo[ForecastResult]):
    model = ForecastResult

    async def latest_for_tech(self, tech_id: str) -> ForecastResult | None:
        rows = await self.find(
            ForecastResult.tech_id == tech_id,
            order_by=[ForecastResult.generated_at.desc()],
            limit=1,
        )
        return rows[0] if rows else None


class ScenarioPresetRepo(CrudRepo[ScenarioPreset]):
    model = ScenarioPreset


class ScheduledRunRepo(CrudRepo[ScheduledRun]):
    model = ScheduledRun
