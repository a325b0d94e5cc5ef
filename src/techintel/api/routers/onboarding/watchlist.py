from __future__ import annotations

import uuid
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session, settings_dep
from techintel.api.envelopes import ApiModel, data
from techintel.api.errors import db_errors, not_found
from techintel.db.models import WatchlistItem
from techintel.db.repositories.onboarding import WatchlistRepo
from techintel.settings import Settings

router = APIRouter()


class WatchlistCreate(ApiModel):
    user_id: str | None = None
    name: str = Field(min_length=1, max_length=256)
    type: Literal["technology", "organization", "keyword"]
    description: str = ""


def watchlist_view(item: WatchlistItem) -> dict[str, Any]:
    return {
        "id": str(item.id),
        "name": item.name,
        "type": item.type,
        "description": item.description,
        "addedAt": item.added_at.isoformat(),
        "activityCount": item.activity_count,
    }


@router.get("")
async def list_watchlist(
    user_id: str | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    with db_errors("Failed to fetch watchlist"):
        items = await WatchlistRepo(session).for_user(user_id or settings.default_user_id)
    return data([watchlist_view(item) for item in items])


@router.post("", status_code=HTTP_201_CREATED)
async def add_watchlist_item(
    body: WatchlistCreate,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    with db_errors("Failed to add watchlist item"):
        item = await WatchlistRepo(session).create(
            user_id=body.user_id or settings.default_user_id,
            name=body.name,
            type=body.type,
            description=body.description,
            activity_count=0,
        )
        await session.commit()
    return data(watchlist_view(item), message="Item added successfully")


@router.delete("")
async def remove_watchlist_item(
    item_id: uuid.UUID = Query(),
    user_id: str | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    repo = WatchlistRepo(session)
    with db_errors("Failed to remove watchlist item"):
        item = await repo.find_one(
            WatchlistItem.id == item_id,
            WatchlistItem.user_id == (user_id or settings.default_user_id),
        )
        if item is None:
            raise not_found("Watchlist item")
        await repo.delete(item)
        await session.commit()
    return {"message": "Item removed successfully"}
