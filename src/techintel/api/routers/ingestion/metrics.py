from __future__ import annotations

from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from techintel.api.deps import db_session
from techintel.api.envelopes import data
from techintel.api.errors import db_errors
from techintel.db.base import utcnow
from techintel.db.repositories.ingestion import PipelineRunRepo
from techintel.services.pipeline_metrics import compute_metrics, throughput_buckets

router = APIRouter()


@router.get("/metrics")
async def pipeline_metrics(session: AsyncSession = Depends(db_session)) -> dict[str, Any]:
    with db_errors("Failed to fetch metrics"):
        runs = await PipelineRunRepo(session).find()
    return data(compute_metrics(runs, now=utcnow()))


@router.get("/throughput")
async def throughput(
    hours: int = Query(default=24, ge=1, le=24 * 31),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    now = utcnow()
    with db_errors("Failed to fetch throughput data"):
        runs = await PipelineRunRepo(session).since(now - timedelta(hours=hours))
    return data(throughput_buckets(runs, hours=hours, now=now))
