"""
techintel.services.forecast_jobs

Forecast job lifecycle service (transaction + persistence owner).

Responsibilities:
- Create pending jobs for a catalog model.
- Execute the forecast pipeline with durable per-step checkpointing (progress + state).
- Persist one forecast result per technology and mark the job completed or failed.
"""

from __future__ import annotations

import asyncio
import platform
import random
import time
import uuid
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from techintel.db.base import utcnow
from techintel.db.models import ForecastingModel, JobStatus, ScenarioType, Technology
from techintel.db.repositories.forecasting import (
    ForecastingModelRepo,
    ForecastJobRepo,
    ForecastResultRepo,
)
from techintel.db.session import session_scope
from techintel.forecasting.graph import build_graph
from techintel.forecasting.reducers import append_steps, merge_by_tech
from techintel.forecasting.state import ForecastState
from techintel.observability.logging import get_logger
from techintel.settings import Settings

log = get_logger(__name__)


class ForecastJobService:
    def __init__(self, *, session: AsyncSession, settings: Settings) -> None:
        self._session = session
        self._settings = settings

        self._models = ForecastingModelRepo(session)
        self._jobs = ForecastJobRepo(session)
        self._results = ForecastResultRepo(session)

    async def create(
        self,
        *,
        model: ForecastingModel,
        tech_ids: list[str],
        scenario: ScenarioType,
        parameters: dict[str, Any],
        created_by: str,
        random_seed: int | None = None,
    ) -> uuid.UUID:
        job = await self._jobs.create(
            model_id=model.id,
            model_name=model.name,
            status=JobStatus.pending,
            progress=0,
            tech_ids=tech_ids,
            scenario=scenario,
            parameters=parameters,
            created_by=created_by,
            random_seed=random_seed if random_seed is not None else random.randint(0, 9999),
            environment={
                "python_version": platform.python_version(),
                "model_version": model.version,
            },
        )
        await self._models.increment(model.id, usage_count=1)
        await self._session.commit()
        log.info("forecast_job_created", job_id=str(job.id), model_id=str(model.id))
        return job.id

    async def execute(self, job_id: uuid.UUID) -> JobStatus:
        job = await self._jobs.get(job_id)
        if job is None:
            raise ValueError("forecast job not found")
        structlog.contextvars.bind_contextvars(job_id=str(job_id))

        state: ForecastState = {
            "job_id": str(job_id),
            "model_id": str(job.model_id),
            "model_version": job.environment.get("model_version", ""),
            "tech_ids": list(job.tech_ids),
            "tech_names": await self._tech_names(job.tech_ids),
            "scenario": str(job.scenario),
            "parameters": dict(job.parameters or {}),
            "random_seed": job.random_seed,
            "start_year": utcnow().year,
            "steps": [],
        }

        started = time.perf_counter()
        try:
            final_state = await self._execute_with_checkpoints(job_id=job_id, state=state)
            await self._persist_results(
                job_id=job_id,
                state=final_state,
                compute_time=_format_elapsed(time.perf_counter() - started),
            )
            await self._jobs.set_state(
                job_id=job_id, status=JobStatus.completed, progress=100, completed_at=utcnow()
            )
            await self._session.commit()
            log.info("forecast_job_completed", job_id=str(job_id))
            return JobStatus.completed
        except Exception as e:
            # The job row carries the failure; callers run this after the response is sent.
            # Rollback expires loaded rows, so only `job_id` is used from here on.
            await self._session.rollback()
            await self._jobs.set_state(job_id=job_id, status=JobStatus.failed, error=str(e))
            await self._session.commit()
            log.exception("forecast_job_failed", job_id=str(job_id))
            return JobStatus.failed

    async def _tech_names(self, tech_ids: list[str]) -> dict[str, str]:
        ids: list[uuid.UUID] = []
        for raw in tech_ids:
            try:
                ids.append(uuid.UUID(str(raw)))
            except ValueError:
                continue
        names = {t: t for t in tech_ids}
        if ids:
            rows = await self._session.execute(
                select(Technology.id, Technology.name).where(Technology.id.in_(ids))
            )
            names.update({str(tid): name for tid, name in rows.all()})
        return names

    async def _execute_with_checkpoints(self, *, job_id: uuid.UUID, state: ForecastState) -> ForecastState:
        """
        Stream node updates and persist progress + merged state after each step.
        """

        graph = build_graph()
        last_state: ForecastState = dict(state)  # type: ignore[assignment]
        delay = self._settings.forecast_step_delay_seconds

        async for update in graph.astream(state, stream_mode="updates"):
            if not isinstance(update, dict) or not update:
                continue
            node_name, node_update = next(iter(update.items()))
            if isinstance(node_update, dict):
                last_state = _merge(last_state, node_update)

            progress = int(last_state.get("progress", 0))
            first_step = node_name == "prepare"
            await self._jobs.set_state(
                job_id=job_id,
                status=JobStatus.running,
                progress=min(progress, 99),
                state=dict(last_state),
                started_at=utcnow() if first_step else None,
            )
            await self._session.commit()
            log.info("forecast_step_completed", step=node_name, progress=progress)

            if delay:
                await asyncio.sleep(delay)

        return last_state

    async def _persist_results(self, *, job_id: uuid.UUID, state: ForecastState, compute_time: str) -> None:
        job = await self._jobs.get(job_id)
        if job is None:
            return
        for tech_id in state["tech_ids"]:
            await self._results.create(
                job_id=job.id,
                model_id=job.model_id,
                tech_id=tech_id,
                tech_name=state.get("tech_names", {}).get(tech_id, tech_id),
                scenario=job.scenario,
                predictions=state["predictions"][tech_id],
                metrics=state["metrics"][tech_id],
                uncertainty=state["uncertainty"][tech_id],
                explainability=state.get("explainability", []),
                top_influencing_sources=[],
                compute_time=compute_time,
            )


def _merge(state: ForecastState, update: dict[str, Any]) -> ForecastState:
    # Mirror the graph reducers so the checkpoint matches the graph's own view of state.
    merged: dict[str, Any] = dict(state)
    for key, value in update.items():
        if key == "steps":
            merged["steps"] = append_steps(merged.get("steps"), value)
        elif isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_by_tech(merged[key], value)
        else:
            merged[key] = value
    return merged  # type: ignore[return-value]


def _format_elapsed(seconds: float) -> str:
    minutes, secs = divmod(int(round(seconds)), 60)
    return f"{minutes}m {secs}s" if minutes else f"{secs}s"


async def run_forecast_job(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings,
    job_id: uuid.UUID,
) -> None:
    # Background entrypoint: the request session is closed by now, so open a fresh one.
    async with session_scope(session_factory) as session:
        await ForecastJobService(session=session, settings=settings).execute(job_id)
    structlog.contextvars.unbind_contextvars("job_id")


# --- Module Notes -----------------------------------------------------------
# Progress is capped at 99 while steps run and set to 100 together with the
# `completed` status and the result rows, so readers never see 100 without results.
