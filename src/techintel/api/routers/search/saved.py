from __future__ import annotations

import uuid
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session
from techintel.api.envelopes import ApiModel, data, rows
from techintel.api.errors import db_errors, not_found
from techintel.auth.deps import get_principal
from techintel.auth.models import Principal
from techintel.db.models import SavedSearch
from techintel.db.repositories.search import SavedSearchRepo
from techintel.observability.logging import get_logger

router = APIRouter()
log = get_logger(__name__)

SearchMode = Literal["semantic", "keyword"]
AlertFrequency = Literal["none", "daily", "weekly"]


class SavedSearchCreate(ApiModel):
    name: str = Field(min_length=1, max_length=256)
    query: str = Field(min_length=1)
    search_mode: SearchMode = "semantic"
    filters: dict[str, Any] = Field(default_factory=dict)
    alert_frequency: AlertFrequency = "none"
    is_active: bool = True


class SavedSearchUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=256)
    query: str | None = Field(default=None, min_length=1)
    search_mode: SearchMode | None = None
    filters: dict[str, Any] | None = None
    alert_frequency: AlertFrequency | None = None
    is_active: bool | None = None


async def _owned(repo: SavedSearchRepo, search_id: uuid.UUID, principal: Principal) -> SavedSearch:
    saved = await repo.find_one(SavedSearch.id == search_id, SavedSearch.user_id == principal.subject)
    if saved is None:
        raise not_found("Saved search")
    return saved


@router.get("")
async def list_saved(
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = SavedSearchRepo(session)
    mine = SavedSearch.user_id == principal.subject
    with db_errors("Failed to fetch saved searches"):
        items = await repo.find(mine, order_by=[SavedSearch.created_at.desc()], limit=limit, offset=offset)
        total = await repo.count(mine)
    return data(rows(items), total=total, limit=limit, offset=offset)


@router.post("", status_code=HTTP_201_CREATED)
async def create_saved(
    body: SavedSearchCreate,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to save search"):
        saved = await SavedSearchRepo(session).create(user_id=principal.subject, **body.model_dump())
        await session.commit()

    log.info("search_saved", saved_search_id=str(saved.id), user_id=principal.subject)
    return data(saved.to_dict())


@router.patch("/{search_id}")
async def update_saved(
    search_id: uuid.UUID,
    body: SavedSearchUpdate,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = SavedSearchRepo(session)
    with db_errors("Failed to update saved search"):
        saved = await _owned(repo, search_id, principal)
        await repo.update(saved, body.changes())
        await session.commit()
    return data(saved.to_dict())


@router.delete("/{search_id}")
async def delete_saved(
    search_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = SavedSearchRepo(session)
    with db_errors("Failed to delete saved search"):
        saved = await _owned(repo, search_id, principal)
        await repo.delete(saved)
        await session.commit()
    return {"message": "Saved search deleted successfully"}
