from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from techintel.api.deps import db_session, settings_dep
from techintel.api.envelopes import ApiModel, data
from techintel.api.errors import db_errors
from techintel.db.repositories.alerts import PreferencesRepo
from techintel.settings import Settings

router = APIRouter()


class PreferencesUpdate(ApiModel):
    user_id: str | None = None
    enable_in_app: bool | None = None
    enable_email: bool | None = None
    enable_slack: bool | None = None
    quiet_hours: dict[str, Any] | None = None
    severity_filters: dict[str, bool] | None = None
    digest_mode: dict[str, Any] | None = None


@router.get("")
async def get_preferences(
    user_id: str | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    with db_errors("Failed to fetch preferences"):
        prefs = await PreferencesRepo(session).get_or_create(user_id or settings.default_user_id)
        await session.commit()
    return data(prefs.to_dict())


@router.put("")
async def put_preferences(
    body: PreferencesUpdate,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    changes = {k: v for k, v in body.changes().items() if k != "user_id" and v is not None}
    repo = PreferencesRepo(session)
    with db_errors("Failed to update preferences"):
        prefs = await repo.get_or_create(body.user_id or settings.default_user_id)
        await repo.update(prefs, changes)
        await session.commit()
    return data(prefs.to_dict())
