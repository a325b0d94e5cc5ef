from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session
from techintel.api.envelopes import ApiModel, data, rows
from techintel.api.errors import db_errors
from techintel.db.models import WatchedTechnology
from techintel.db.repositories.alerts import WatchedTechnologyRepo

router = APIRouter()


class WatchedTechnologyCreate(ApiModel):
    technology_id: str = Field(min_length=1, max_length=128)
    name: str = Field(min_length=1, max_length=256)
    domain: str = Field(min_length=1, max_length=128)
    alerts_enabled: bool = True
    recent_changes: list[dict[str, Any]] = Field(default_factory=list)


@router.get("")
async def list_watched(
    alerts_enabled: bool | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    where = []
    if alerts_enabled is not None:
        where.append(WatchedTechnology.alerts_enabled.is_(alerts_enabled))

    with db_errors("Failed to fetch watched technologies"):
        watched = await WatchedTechnologyRepo(session).find(
            *where, order_by=[WatchedTechnology.last_update.desc()]
        )
    return data(rows(watched))


@router.post("", status_code=HTTP_201_CREATED)
async def create_watched(
    body: WatchedTechnologyCreate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to create watched technology"):
        watched = await WatchedTechnologyRepo(session).create(**body.model_dump(), update_count=0)
        await session.commit()
    return data(watched.to_dict())
