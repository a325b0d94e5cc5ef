from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from techintel.api.deps import db_session
from techintel.api.envelopes import ApiModel, data
from techintel.api.errors import db_errors, not_found
from techintel.api.routers.tech_detail.deps import technology_dep
from techintel.auth.deps import get_principal
from techintel.auth.models import Principal
from techintel.db.models import Technology
from techintel.db.repositories.technology import WatchRepo
from techintel.observability.logging import get_logger

router = APIRouter()
log = get_logger(__name__)


class WatchRequest(ApiModel):
    alert_frequency: Literal["none", "daily", "weekly", "realtime"] = "none"


@router.post("")
async def watch_technology(
    body: WatchRequest,
    technology: Technology = Depends(technology_dep),
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to update watch"):
        watch = await WatchRepo(session).upsert(
            user_id=principal.subject,
            technology_id=technology.id,
            alert_frequency=body.alert_frequency,
        )
        await session.commit()

    log.info("technology_watched", technology_id=str(technology.id), user_id=principal.subject)
    return data(watch.to_dict())


@router.delete("")
async def unwatch_technology(
    technology: Technology = Depends(technology_dep),
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = WatchRepo(session)
    with db_errors("Failed to delete watch"):
        watch = await repo.for_user(principal.subject, technology.id)
        if watch is None:
            raise not_found("Watch")
        await repo.delete(watch)
        await session.commit()
    return {"message": "Watch deleted successfully"}
