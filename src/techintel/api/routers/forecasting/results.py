from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from techintel.api.deps import db_session
from techintel.api.envelopes import data, rows
from techintel.api.errors import db_errors
from techintel.db.models import ForecastResult
from techintel.db.repositories.forecasting import ForecastResultRepo

router = APIRouter()


@router.get("")
async def list_results(
    job_id: uuid.UUID | None = Query(default=None),
    model_id: uuid.UUID | None = Query(default=None),
    tech_id: str | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    where = []
    if job_id is not None:
        where.append(ForecastResult.job_id == job_id)
    if model_id is not None:
        where.append(ForecastResult.model_id == model_id)
    if tech_id:
        where.append(ForecastResult.tech_id == tech_id)

    with db_errors("Failed to fetch results"):
        results = await ForecastResultRepo(session).find(
            *where, order_by=[ForecastResult.generated_at.desc()]
        )
    return data(rows(results))
