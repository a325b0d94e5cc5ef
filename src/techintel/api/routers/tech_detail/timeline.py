from __future__ import annotations

import uuid
from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from techintel.api.deps import db_session
from techintel.api.envelopes import data, rows, split_csv
from techintel.api.errors import db_errors
from techintel.db.models import TimelineEvent
from techintel.db.repositories.technology import TimelineRepo

router = APIRouter()


@router.get("")
async def list_timeline(
    technology_id: uuid.UUID,
    types: str | None = Query(default=None),
    min_impact_score: float | None = Query(default=None),
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    where = [TimelineEvent.technology_id == technology_id]
    if wanted := split_csv(types):
        where.append(TimelineEvent.type.in_(wanted))
    if min_impact_score is not None:
        where.append(TimelineEvent.impact_score >= min_impact_score)
    if date_from is not None:
        where.append(TimelineEvent.date >= date_from)
    if date_to is not None:
        where.append(TimelineEvent.date <= date_to)

    with db_errors("Failed to fetch timeline events"):
        events = await TimelineRepo(session).find(*where, order_by=[TimelineEvent.date.asc()])
    return data(rows(events), tech_id=str(technology_id), total=len(events))
