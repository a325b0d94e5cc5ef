from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from techintel.api.deps import db_session, settings_dep
from techintel.api.envelopes import ApiModel, data
from techintel.api.errors import bad_request, db_errors
from techintel.db.models import OnboardingDomain
from techintel.db.repositories.onboarding import DomainRepo
from techintel.observability.logging import get_logger
from techintel.settings import Settings

router = APIRouter()
log = get_logger(__name__)


class DomainSelection(ApiModel):
    user_id: str | None = None
    domain_ids: list[str] = []


@router.get("")
async def list_domains(
    user_id: str | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    repo = DomainRepo(session)
    with db_errors("Failed to fetch domains"):
        domains = await repo.find(order_by=[OnboardingDomain.name.asc()])
        selected = await repo.selected_ids(user_id or settings.default_user_id)
    return data(
        [
            {
                "id": d.id,
                "name": d.name,
                "category": d.category,
                "description": d.description,
                "icon": d.icon,
                "selected": d.id in selected,
                "technologyCount": d.technology_count,
            }
            for d in domains
        ]
    )


@router.post("")
async def select_domains(
    body: DomainSelection,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    user_id = body.user_id or settings.default_user_id
    repo = DomainRepo(session)
    with db_errors("Failed to update domains"):
        known = {d.id for d in await repo.find(OnboardingDomain.id.in_(body.domain_ids))}
        unknown = sorted(set(body.domain_ids) - known)
        if unknown:
            raise bad_request("Unknown domain ids", unknown)
        count = await repo.replace_selection(user_id, body.domain_ids)
        await session.commit()

    log.info("onboarding_domains_selected", user_id=user_id, count=count)
    return {"message": "Domains updated successfully", "count": count}
