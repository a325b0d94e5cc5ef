from __future__ import annotations

import uuid
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from techintel.api.deps import db_session
from techintel.api.envelopes import data, rows
from techintel.api.errors import db_errors
from techintel.db.models import TechnologySource
from techintel.db.repositories.technology import SourceRepo

router = APIRouter()

SORT_COLUMNS = {
    "date": TechnologySource.date,
    "impact": TechnologySource.impact_score,
    "citations": TechnologySource.citation_count,
}


@router.get("")
async def list_sources(
    technology_id: uuid.UUID,
    page: int = Query(default=1, ge=1),
    size: int = Query(default=20, ge=1, le=200),
    type: str | None = Query(default=None),
    confidence: str | None = Query(default=None),
    sort_by: Literal["date", "impact", "citations"] = Query(default="date"),
    sort_order: Literal["asc", "desc"] = Query(default="desc"),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    where = [TechnologySource.technology_id == technology_id]
    if type:
        where.append(TechnologySource.type == type)
    if confidence:
        where.append(TechnologySource.confidence == confidence)
    column = SORT_COLUMNS[sort_by]
    order = column.asc() if sort_order == "asc" else column.desc()

    repo = SourceRepo(session)
    with db_errors("Failed to fetch sources"):
        total = await repo.count(*where)
        sources = await repo.find(*where, order_by=[order], limit=size, offset=(page - 1) * size)
    return data(
        rows(sources), tech_id=str(technology_id), total=total, page=page, page_size=size
    )
