"""
techintel.api.routers.ingestion.connectors

Data connector endpoints.

Responsibilities:
- List/create/read/update/delete connectors.
- Write the connector lifecycle rows into `ingestion_logs`.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session
from techintel.api.envelopes import ApiModel, data, parse_enum, rows
from techintel.api.errors import db_errors, not_found
from techintel.db.base import utcnow
from techintel.db.models import ConnectorStatus, ConnectorType, DataConnector, LogLevel
from techintel.db.repositories.ingestion import ConnectorRepo, IngestionLogRepo
from techintel.observability.logging import get_logger

router = APIRouter()
log = get_logger(__name__)


class ConnectorCreate(ApiModel):
    name: str = Field(min_length=1, max_length=256)
    type: ConnectorType
    provider: str = Field(min_length=1, max_length=256)
    api_endpoint: str = ""
    description: str | None = None
    icon: str = "📄"
    requires_auth: bool = False
    auth_type: str | None = None
    polling_interval: int = Field(default=60, ge=1)
    config: dict[str, Any] = Field(default_factory=dict)
    capabilities: list[str] = Field(default_factory=list)


class ConnectorUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=256)
    type: ConnectorType | None = None
    provider: str | None = None
    status: ConnectorStatus | None = None
    api_endpoint: str | None = None
    description: str | None = None
    icon: str | None = None
    requires_auth: bool | None = None
    auth_type: str | None = None
    polling_interval: int | None = Field(default=None, ge=1)
    last_sync: datetime | None = None
    next_sync: datetime | None = None
    config: dict[str, Any] | None = None
    capabilities: list[str] | None = None
    health_score: int | None = Field(default=None, ge=0, le=100)


@router.get("")
async def list_connectors(
    type: str | None = Query(default=None),
    status: str | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    where = []
    if (connector_type := parse_enum(ConnectorType, type, field="type")) is not None:
        where.append(DataConnector.type == connector_type)
    if (connector_status := parse_enum(ConnectorStatus, status, field="status")) is not None:
        where.append(DataConnector.status == connector_status)

    with db_errors("Failed to fetch connectors"):
        connectors = await ConnectorRepo(session).find(
            *where, order_by=[DataConnector.created_at.desc()]
        )
    return data(rows(connectors))


@router.post("", status_code=HTTP_201_CREATED)
async def create_connector(
    body: ConnectorCreate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to create connector"):
        connector = await ConnectorRepo(session).create(
            **body.model_dump(),
            status=ConnectorStatus.configuring,
            next_sync=utcnow() + timedelta(minutes=body.polling_interval),
            health_score=100,
        )
        await IngestionLogRepo(session).add(
            level=LogLevel.info,
            connector_id=connector.id,
            message=f'Connector "{connector.name}" created successfully',
        )
        await session.commit()

    log.info("connector_created", connector_id=str(connector.id), type=str(connector.type))
    return data(connector.to_dict())


@router.get("/{connector_id}")
async def get_connector(
    connector_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to fetch connector"):
        connector = await ConnectorRepo(session).get(connector_id)
    if connector is None:
        raise not_found("Connector")
    return data(connector.to_dict())


@router.patch("/{connector_id}")
async def update_connector(
    connector_id: uuid.UUID,
    body: ConnectorUpdate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = ConnectorRepo(session)
    with db_errors("Failed to update connector"):
        connector = await repo.get(connector_id)
        if connector is None:
            raise not_found("Connector")
        await repo.update(connector, body.changes())
        await session.commit()

    # Best-effort audit row: a failed log write never fails the update.
    try:
        await IngestionLogRepo(session).add(
            level=LogLevel.info,
            connector_id=connector.id,
            message=f'Connector "{connector.name}" updated',
        )
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        log.warning("connector_update_log_failed", connector_id=str(connector.id), error=str(e))

    return data(connector.to_dict())


@router.delete("/{connector_id}")
async def delete_connector(
    connector_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = ConnectorRepo(session)
    with db_errors("Failed to delete connector"):
        connector = await repo.get(connector_id)
        if connector is None:
            raise not_found("Connector")
        name = connector.name
        await repo.delete(connector)
        await session.commit()

    log.info("connector_deleted", connector_id=str(connector_id))
    return {"message": f'Connector "{name}" deleted successfully'}
