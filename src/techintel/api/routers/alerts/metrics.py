from __future__ import annotations

from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from techintel.api.deps import db_session
from techintel.api.envelopes import data
from techintel.db.base import utcnow
from techintel.db.models import TriggeredEvent
from techintel.db.repositories.alerts import AlertRepo, TriggeredEventRepo
from techintel.observability.logging import get_logger
from techintel.services.alert_metrics import DEFAULT_METRICS, compute_alert_metrics

router = APIRouter()
log = get_logger(__name__)


@router.get("/metrics")
async def alert_metrics(session: AsyncSession = Depends(db_session)) -> dict[str, Any]:
    now = utcnow()
    events = TriggeredEventRepo(session)
    try:
        by_state = await AlertRepo(session).count_by_state()
        triggers_24h = await events.count_since(now - timedelta(hours=24))
        week = await events.find(TriggeredEvent.triggered_at >= now - timedelta(days=7))
    except SQLAlchemyError as e:
        # The dashboard tile renders defaults rather than an error.
        log.error("alert_metrics_failed", error=str(e))
        return data(dict(DEFAULT_METRICS))

    return data(
        compute_alert_metrics(
            by_state=by_state,
            triggers_24h=triggers_24h,
            triggers_7d=len(week),
            recent_events=week,
        )
    )
