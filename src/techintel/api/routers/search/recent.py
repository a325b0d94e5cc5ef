from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from techintel.api.deps import db_session
from techintel.api.envelopes import data
from techintel.api.errors import db_errors
from techintel.auth.deps import get_principal
from techintel.auth.models import Principal
from techintel.db.models import SearchHistory
from techintel.db.repositories.search import SearchHistoryRepo
from techintel.services.search import recent_unique

router = APIRouter()


@router.get("")
async def list_recent(
    limit: int = Query(default=5, ge=1, le=50),
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to fetch recent searches"):
        # Over-fetch so repeated queries still leave `limit` distinct entries.
        history = await SearchHistoryRepo(session).find(
            SearchHistory.user_id == principal.subject,
            order_by=[SearchHistory.created_at.desc()],
            limit=limit * 2,
        )
    return data(recent_unique(history, limit))
