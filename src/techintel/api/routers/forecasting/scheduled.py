from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session
from techintel.api.envelopes import ApiModel, data, rows
from techintel.api.errors import bad_request, db_errors, not_found
from techintel.db.base import utcnow
from techintel.db.models import ScenarioType, ScheduledRun
from techintel.db.repositories.forecasting import ForecastingModelRepo, ScheduledRunRepo
from techintel.services.schedules import calculate_next_run

router = APIRouter()


class ScheduledRunCreate(ApiModel):
    name: str = Field(min_length=1, max_length=256)
    model_id: uuid.UUID
    tech_ids: list[str] = Field(min_length=1)
    scenario: ScenarioType = ScenarioType.baseline
    parameters: dict[str, Any] = Field(default_factory=dict)
    schedule: dict[str, Any] = Field(default_factory=dict)
    notifications: dict[str, Any] = Field(default_factory=dict)
    created_by: str = "system"


@router.get("")
async def list_scheduled(
    active: bool | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    where = []
    if active is not None:
        where.append(ScheduledRun.is_active.is_(active))

    with db_errors("Failed to fetch scheduled runs"):
        runs = await ScheduledRunRepo(session).find(*where, order_by=[ScheduledRun.created_at.desc()])
    return data(rows(runs))


@router.post("", status_code=HTTP_201_CREATED)
async def create_scheduled(
    body: ScheduledRunCreate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    next_run = None
    frequency = body.schedule.get("frequency")
    if frequency is not None:
        try:
            next_run = calculate_next_run(frequency, body.schedule, now=utcnow())
        except ValueError as e:
            # ScheduleError, or a frequency outside daily/weekly/monthly/quarterly.
            raise bad_request("Invalid schedule", str(e)) from e

    with db_errors("Failed to create scheduled run"):
        if await ForecastingModelRepo(session).get(body.model_id) is None:
            raise not_found("Model")
        run = await ScheduledRunRepo(session).create(
            **body.model_dump(), is_active=True, next_run=next_run
        )
        await session.commit()
    return data(run.to_dict())
