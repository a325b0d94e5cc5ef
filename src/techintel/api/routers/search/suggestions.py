from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from techintel.api.deps import db_session
from techintel.api.envelopes import ApiModel, data
from techintel.api.errors import db_errors
from techintel.auth.deps import get_principal
from techintel.auth.models import Principal
from techintel.db.repositories.search import SearchHistoryRepo, SuggestionRepo
from techintel.services.search import merge_suggestions

router = APIRouter()

# Shorter queries get the trending list instead of matches.
MIN_QUERY_LENGTH = 2


class SuggestionUse(ApiModel):
    suggestion: str = Field(min_length=1, max_length=512)


@router.get("")
async def list_suggestions(
    q: str | None = Query(default=None),
    limit: int = Query(default=10, ge=1, le=50),
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    text = (q or "").strip()
    repo = SuggestionRepo(session)
    with db_errors("Failed to fetch suggestions"):
        if len(text) < MIN_QUERY_LENGTH:
            trending = await repo.trending(limit)
            return data(
                [{"suggestion": s.suggestion, "type": s.type, "popularity": s.popularity} for s in trending],
                type="trending",
            )
        catalog = await repo.matching(text, limit)
        recent = await SearchHistoryRepo(session).matching(principal.subject, text, limit=5)
    return data(merge_suggestions(recent, catalog)[:limit], type="matches")


@router.post("")
async def use_suggestion(
    body: SuggestionUse,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to update suggestion"):
        suggestion = await SuggestionRepo(session).record_use(body.suggestion.strip())
        await session.commit()
    return data(suggestion.to_dict())
