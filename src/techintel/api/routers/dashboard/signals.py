from __future__ import annotations

import datetime as dt
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session
from techintel.api.envelopes import ApiModel, data, rows
from techintel.api.errors import db_errors
from techintel.db.base import utcnow
from techintel.db.repositories.dashboard import DashboardSignalRepo

router = APIRouter()

Importance = Literal["high", "medium", "low"]


class SignalCreate(ApiModel):
    type: str = Field(min_length=1, max_length=32)
    title: str = Field(min_length=1)
    tech: str = Field(min_length=1, max_length=256)
    importance: Importance = "medium"
    date: dt.date | None = None
    value: str | None = Field(default=None, max_length=256)
    metadata: dict[str, Any] = Field(default_factory=dict)


@router.get("")
async def list_top_signals(
    type: str | None = Query(default=None),
    importance: Importance | None = Query(default=None),
    limit: int = Query(default=8, ge=1, le=100),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to fetch signals"):
        signals = await DashboardSignalRepo(session).top(
            type_=None if type in (None, "", "all") else type,
            importance=importance,
            limit=limit,
        )
    return data(rows(signals))


@router.post("", status_code=HTTP_201_CREATED)
async def create_signal(
    body: SignalCreate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    values = body.model_dump(exclude={"metadata", "date"})
    with db_errors("Failed to create signal"):
        signal = await DashboardSignalRepo(session).create(
            **values, date=body.date or utcnow().date(), meta=body.metadata
        )
        await session.commit()
    return data(signal.to_dict())
