"""
techintel.api.routers.tech_detail.detail

Technology header endpoints.

Responsibilities:
- Render technology metadata (watch state, related/source counts) with its TRL history.
- Apply analyst edits to the technology's headline fields.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from techintel.api.deps import db_session
from techintel.api.envelopes import ApiModel, data
from techintel.api.errors import db_errors
from techintel.api.routers.tech_detail.deps import technology_dep
from techintel.auth.deps import get_principal, require_roles
from techintel.auth.models import Principal
from techintel.db.models import Technology, TechnologySource, TrlHistory
from techintel.db.repositories.technology import (
    SourceRepo,
    TechnologyRepo,
    TrlHistoryRepo,
    WatchRepo,
)
from techintel.observability.logging import get_logger

router = APIRouter()
log = get_logger(__name__)


class TechnologyUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=256)
    canonical_summary: str | None = None
    domains: list[str] | None = None
    # `to_camel` would produce `currentTrl`; clients send `currentTRL`.
    current_trl: int | None = Field(default=None, ge=1, le=9, alias="currentTRL")
    confidence: float | None = Field(default=None, ge=0, le=1)


def _trl_entry(entry: TrlHistory) -> dict[str, Any]:
    return {
        "trl": entry.trl,
        "date": entry.date.isoformat(),
        "confidence": entry.confidence,
        "evidenceIds": list(entry.evidence_ids or []),
        "reasoning": entry.reasoning,
        "keyMilestones": list(entry.key_milestones or []),
    }


@router.get("")
async def get_technology(
    technology: Technology = Depends(technology_dep),
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to fetch technology"):
        history = await TrlHistoryRepo(session).for_technology(technology.id)
        watch = await WatchRepo(session).for_user(principal.subject, technology.id)
        related = await TechnologyRepo(session).related_count(technology.id)
        sources = await SourceRepo(session).count(TechnologySource.technology_id == technology.id)

    return data(
        {
            "metadata": {
                "id": str(technology.id),
                "name": technology.name,
                "canonicalSummary": technology.canonical_summary,
                "domains": list(technology.domains or []),
                "currentTRL": technology.current_trl,
                "confidence": technology.confidence,
                "lastUpdated": technology.updated_at.isoformat(),
                "isWatched": watch is not None,
                "relatedTechCount": related,
                "sourceCount": sources,
            },
            "trlHistory": [_trl_entry(h) for h in history],
        }
    )


@router.patch("")
async def update_technology(
    body: TechnologyUpdate,
    technology: Technology = Depends(technology_dep),
    principal: Principal = Depends(require_roles("analyst")),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to update technology"):
        await TechnologyRepo(session).update(technology, body.changes())
        await session.commit()

    log.info("technology_updated", technology_id=str(technology.id), actor=principal.subject)
    return data(technology.to_dict())
