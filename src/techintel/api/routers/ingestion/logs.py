from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session
from techintel.api.envelopes import ApiModel, data, parse_enum, rows
from techintel.api.errors import db_errors
from techintel.db.models import IngestionLog, LogLevel
from techintel.db.repositories.ingestion import ConnectorRepo, IngestionLogRepo

router = APIRouter()


class LogCreate(ApiModel):
    level: LogLevel
    message: str = Field(min_length=1)
    connector_id: uuid.UUID | None = None
    details: dict[str, Any] | None = None
    document_id: str | None = None
    retryable: bool = False
    retry_count: int = Field(default=0, ge=0)
    max_retries: int = Field(default=3, ge=0)


@router.get("")
async def list_logs(
    level: str | None = Query(default=None),
    connector_id: uuid.UUID | None = Query(default=None),
    limit: int = Query(default=100, ge=1, le=1000),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    where = []
    if (log_level := parse_enum(LogLevel, level, field="level")) is not None:
        where.append(IngestionLog.level == log_level)
    if connector_id is not None:
        where.append(IngestionLog.connector_id == connector_id)

    with db_errors("Failed to fetch logs"):
        logs = await IngestionLogRepo(session).find(
            *where, order_by=[IngestionLog.timestamp.desc()], limit=limit
        )
    return data(rows(logs))


@router.post("", status_code=HTTP_201_CREATED)
async def create_log(
    body: LogCreate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to create log"):
        entry = await IngestionLogRepo(session).add(**body.model_dump())
        if body.level == LogLevel.error and body.connector_id is not None:
            await ConnectorRepo(session).record_error(body.connector_id)
        await session.commit()
    return data(entry.to_dict())
