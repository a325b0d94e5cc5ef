"""
techintel.api.routers.search.search

Keyword search over stored technology sources.

Responsibilities:
- Validate the query and filters, run the paginated search and shape each hit.
- Record the executed search (mode, filters, result count) in the caller's history.
"""

from __future__ import annotations

import datetime as dt
import math
from typing import Any, Literal

from fastapi import APIRouter, Depends
from pydantic import Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from techintel.api.deps import db_session
from techintel.api.envelopes import ApiModel, data
from techintel.api.errors import bad_request, db_errors
from techintel.auth.deps import get_principal
from techintel.auth.models import Principal
from techintel.db.models import Technology, TechnologySource
from techintel.db.repositories.search import SearchHistoryRepo, SearchQuery, TechnologySearchRepo
from techintel.observability.logging import get_logger
from techintel.services.search import trl_levels

router = APIRouter()
log = get_logger(__name__)


class DateRange(ApiModel):
    from_: dt.date | None = Field(default=None, alias="from")
    to: dt.date | None = None


class SearchFilters(ApiModel):
    domain: list[str] = Field(default_factory=list)
    trl: list[str] = Field(default_factory=list)
    source_type: list[str] = Field(default_factory=list)
    confidence: list[str] = Field(default_factory=list)
    date_range: DateRange | None = None


class SearchRequest(ApiModel):
    query: str = ""
    semantic: bool = True
    filters: SearchFilters = Field(default_factory=SearchFilters)
    page: int = Field(default=1, ge=1)
    size: int = Field(default=20, ge=1, le=100)
    sort_by: Literal["relevance", "date", "trl", "citations"] = "relevance"

    @field_validator("query")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()


def hit_view(source: TechnologySource, tech: Technology) -> dict[str, Any]:
    row = source.to_dict()
    row["technology"] = {
        "id": str(tech.id),
        "name": tech.name,
        "currentTrl": tech.current_trl,
        "domains": list(tech.domains or []),
    }
    return row


@router.post("")
async def run_search(
    body: SearchRequest,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    if not body.query:
        raise bad_request("Search query is required")

    filters = body.filters
    q = SearchQuery(
        text=body.query,
        domains=filters.domain,
        source_types=filters.source_type,
        trl_levels=trl_levels(filters.trl),
        confidence=filters.confidence,
        date_from=filters.date_range.from_ if filters.date_range else None,
        date_to=filters.date_range.to if filters.date_range else None,
        sort_by=body.sort_by,
        page=body.page,
        size=body.size,
    )

    with db_errors("Failed to execute search"):
        hits, total = await TechnologySearchRepo(session).run(q)
        await SearchHistoryRepo(session).create(
            user_id=principal.subject,
            query=body.query,
            search_mode="semantic" if body.semantic else "keyword",
            filters=filters.model_dump(mode="json", by_alias=True, exclude_defaults=True),
            result_count=total,
        )
        await session.commit()

    log.info("search_executed", user_id=principal.subject, total=total, sort_by=body.sort_by)
    return data(
        [hit_view(source, tech) for source, tech in hits],
        total=total,
        page=body.page,
        size=body.size,
        total_pages=math.ceil(total / body.size),
        has_more=total > body.page * body.size,
    )
