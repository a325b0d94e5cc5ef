from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session
from techintel.api.envelopes import ApiModel, data, parse_enum, rows
from techintel.api.errors import db_errors, not_found
from techintel.db.base import utcnow
from techintel.db.models import IndexOperation, IndexOperationStatus, IndexOperationType
from techintel.db.repositories.ingestion import IndexOperationRepo
from techintel.observability.logging import get_logger

router = APIRouter()
log = get_logger(__name__)


class IndexOperationCreate(ApiModel):
    type: IndexOperationType


class IndexOperationUpdate(ApiModel):
    status: IndexOperationStatus | None = None
    affected_documents: int | None = Field(default=None, ge=0)
    progress: int | None = Field(default=None, ge=0, le=100)
    estimated_time_remaining: int | None = Field(default=None, ge=0)


@router.get("")
async def list_index_operations(
    status: str | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=1000),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    where = []
    if (op_status := parse_enum(IndexOperationStatus, status, field="status")) is not None:
        where.append(IndexOperation.status == op_status)

    with db_errors("Failed to fetch index operations"):
        ops = await IndexOperationRepo(session).find(
            *where, order_by=[IndexOperation.start_time.desc()], limit=limit
        )
    return data(rows(ops))


@router.post("", status_code=HTTP_201_CREATED)
async def create_index_operation(
    body: IndexOperationCreate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to create index operation"):
        op = await IndexOperationRepo(session).create(
            type=body.type,
            status=IndexOperationStatus.pending,
            affected_documents=0,
            progress=0,
        )
        await session.commit()
    log.info("index_operation_queued", operation_id=str(op.id), type=str(op.type))
    return data(op.to_dict())


@router.patch("/{operation_id}")
async def update_index_operation(
    operation_id: uuid.UUID,
    body: IndexOperationUpdate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = IndexOperationRepo(session)
    changes = body.changes()
    if body.status in (IndexOperationStatus.completed, IndexOperationStatus.failed):
        changes["end_time"] = utcnow()

    with db_errors("Failed to update index operation"):
        op = await repo.get(operation_id)
        if op is None:
            raise not_found("Index operation")
        await repo.update(op, changes)
        await session.commit()
    return data(op.to_dict())


@router.delete("/{operation_id}")
async def delete_index_operation(
    operation_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = IndexOperationRepo(session)
    with db_errors("Failed to delete index operation"):
        op = await repo.get(operation_id)
        if op is None:
            raise not_found("Index operation")
        await repo.delete(op)
        await session.commit()
    return {"message": "Index operation deleted successfully"}
