from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from techintel.api.deps import db_session
from techintel.api.envelopes import data, rows
from techintel.api.errors import db_errors, not_found
from techintel.auth.deps import get_principal
from techintel.auth.models import Principal
from techintel.db.models import SearchHistory
from techintel.db.repositories.search import SearchHistoryRepo

router = APIRouter()


@router.get("")
async def list_history(
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to fetch search history"):
        items, total = await SearchHistoryRepo(session).page(principal.subject, limit=limit, offset=offset)
    return data(rows(items), total=total, limit=limit, offset=offset)


@router.delete("")
async def delete_history(
    id: uuid.UUID | None = Query(default=None),
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = SearchHistoryRepo(session)
    with db_errors("Failed to delete search history"):
        if id is None:
            await repo.clear(principal.subject)
            await session.commit()
            return {"message": "Search history cleared successfully"}

        entry = await repo.find_one(SearchHistory.id == id, SearchHistory.user_id == principal.subject)
        if entry is None:
            raise not_found("Search")
        await repo.delete(entry)
        await session.commit()
    return {"message": "Search deleted successfully"}
