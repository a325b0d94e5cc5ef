"""
techintel.db.repositories.search

Repositories for search tables and the technology-source search query.

Responsibilities:
- Run filtered, sorted, paginated keyword search over technology sources.
- Page and clear a user's search history; manage saved searches.
- Bump suggestion popularity or add user-generated suggestions.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy import String, cast, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from techintel.db.models import (
    SavedSearch,
    SearchHistory,
    SearchSuggestion,
    Technology,
    TechnologySource,
)
from techintel.db.repositories.base import CrudRepo


@dataclass(slots=True)
class SearchQuery:
    text: str
    domains: Sequence[str] = ()
    source_types: Sequence[str] = ()
    trl_levels: Sequence[int] = ()
    date_from: dt.date | None = None
    date_to: dt.date | None = None
    confidence: Sequence[str] = ()
    sort_by: str = "relevance"
    page: int = 1
    size: int = 20


class TechnologySearchRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def run(self, q: SearchQuery) -> tuple[list[tuple[TechnologySource, Technology]], int]:
        pattern = f"%{q.text.strip()}%"
        where = [
            or_(
                TechnologySource.title.ilike(pattern),
                TechnologySource.summary.ilike(pattern),
                Technology.name.ilike(pattern),
            )
        ]
        if q.source_types:
            where.append(TechnologySource.type.in_(q.source_types))
        if q.trl_levels:
            where.append(Technology.current_trl.in_(q.trl_levels))
        if q.confidence:
            where.append(TechnologySource.confidence.in_(q.confidence))
        if q.date_from is not None:
            where.append(TechnologySource.date >= q.date_from)
        if q.date_to is not None:
            where.append(TechnologySource.date <= q.date_to)
        if q.domains:
            # JSON list column rendered as text; matches the quoted element.
            domains_text = cast(Technology.domains, String)
            where.append(or_(*(domains_text.like(f'%"{d}"%') for d in q.domains)))

        total = (
            await self._session.execute(
                select(func.count(TechnologySource.id))
                .join(Technology, Technology.id == TechnologySource.technology_id)
                .where(*where)
            )
        ).scalar_one()

        order = {
            "date": [TechnologySource.date.desc()],
            "trl": [Technology.current_trl.desc(), TechnologySource.date.desc()],
            "citations": [TechnologySource.citation_count.desc(), TechnologySource.date.desc()],
        }.get(q.sort_by, [TechnologySource.impact_score.desc(), TechnologySource.date.desc()])

        stmt = (
            select(TechnologySource, Technology)
            .join(Technology, Technology.id == TechnologySource.technology_id)
            .where(*where)
            .order_by(*order, TechnologySource.id)
            .limit(q.size)
            .offset((q.page - 1) * q.size)
        )
        result = await self._session.execute(stmt)
        return [(source, tech) for source, tech in result.all()], int(total)


class SearchHistoryRepo(CrudRepo[SearchHistory]):
    model = SearchHistory

    async def page(self, user_id: str, *, limit: int, offset: int) -> tuple[list[SearchHistory], int]:
        items = await self.find(
            SearchHistory.user_id == user_id,
            order_by=[SearchHistory.created_at.desc()],
            limit=limit,
            offset=offset,
        )
        return items, await self.count(SearchHistory.user_id == user_id)

    async def matching(self, user_id: str, text: str, *, limit: int) -> list[SearchHistory]:
        return await self.find(
            SearchHistory.user_id == user_id,
            SearchHistory.query.ilike(f"%{text}%"),
            order_by=[SearchHistory.created_at.desc()],
            limit=limit,
        )

    async def clear(self, user_id: str) -> int:
        result = await self._session.execute(delete(SearchHistory).where(SearchHistory.user_id == user_id))
        return int(result.rowcount or 0)


class SavedSearchRepo(CrudRepo[SavedSearch]):
    model = SavedSearch


class SuggestionRepo(CrudRepo[SearchSuggestion]):
    model = SearchSuggestion

    async def trending(self, limit: int) -> list[SearchSuggestion]:
        return await self.find(
            SearchSuggestion.type == "trending",
            order_by=[SearchSuggestion.popularity.desc()],
            limit=limit,
        )

    async def matching(self, text: str, limit: int) -> list[SearchSuggestion]:
        return await self.find(
            SearchSuggestion.suggestion.ilike(f"%{text}%"),
            order_by=[SearchSuggestion.popularity.desc()],
            limit=limit,
        )

    async def record_use(self, suggestion: str) -> SearchSuggestion:
        existing = await self.find_one(SearchSuggestion.suggestion == suggestion)
        if existing is None:
            return await self.create(suggestion=suggestion, type="user_generated", popularity=1)
        await self.increment(existing.id, popularity=1)
        await self._session.refresh(existing)
        return existing
