"""
techintel.api.routers.forecasting.models

Forecasting model catalog endpoints.

Responsibilities:
- Paginated catalog listing with type/status/tag filters, most used first.
- Create, read, update (PUT or PATCH) and delete catalog entries.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy import String, cast
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session
from techintel.api.envelopes import ApiModel, data, paged, parse_enum, split_csv
from techintel.api.errors import db_errors, not_found
from techintel.db.models import ForecastingModel, ModelStatus, ModelType
from techintel.db.repositories.forecasting import ForecastingModelRepo
from techintel.observability.logging import get_logger

router = APIRouter()
log = get_logger(__name__)


class ModelCreate(ApiModel):
    name: str = Field(min_length=1, max_length=256)
    type: ModelType
    version: str = Field(min_length=1, max_length=64)
    description: str = ""
    long_description: str | None = None
    tags: list[str] = Field(default_factory=list)
    created_by: str = "system"


class ModelUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=256)
    description: str | None = None
    long_description: str | None = None
    status: ModelStatus | None = None
    tags: list[str] | None = None
    is_published: bool | None = None
    last_trained: datetime | None = None
    accuracy: float | None = Field(default=None, ge=0, le=100)


def _has_tag(tag: str):
    # JSON arrays render as `["a", "b"]` on both SQLite and Postgres.
    return cast(ForecastingModel.tags, String).contains(f'"{tag}"', autoescape=True)


@router.get("")
async def list_models(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=200),
    type: str | None = Query(default=None),
    status: str | None = Query(default=None),
    tags: str | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    where = []
    if (model_type := parse_enum(ModelType, type, field="type")) is not None:
        where.append(ForecastingModel.type == model_type)
    if (model_status := parse_enum(ModelStatus, status, field="status")) is not None:
        where.append(ForecastingModel.status == model_status)
    where.extend(_has_tag(tag) for tag in split_csv(tags))

    repo = ForecastingModelRepo(session)
    with db_errors("Failed to fetch models"):
        total = await repo.count(*where)
        models = await repo.find(
            *where,
            order_by=[ForecastingModel.usage_count.desc(), ForecastingModel.last_trained.desc()],
            limit=page_size,
            offset=(page - 1) * page_size,
        )
    return paged(models, total=total, page=page, page_size=page_size)


@router.post("", status_code=HTTP_201_CREATED)
async def create_model(
    body: ModelCreate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to create model"):
        model = await ForecastingModelRepo(session).create(
            **body.model_dump(),
            status=ModelStatus.training,
            is_published=False,
            accuracy=0.0,
            usage_count=0,
        )
        await session.commit()

    log.info("forecasting_model_created", model_id=str(model.id), type=str(model.type))
    return data(model.to_dict())


@router.get("/{model_id}")
async def get_model(
    model_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to fetch model"):
        model = await ForecastingModelRepo(session).get(model_id)
    if model is None:
        raise not_found("Model")
    return data(model.to_dict())


@router.api_route("/{model_id}", methods=["PUT", "PATCH"])
async def update_model(
    model_id: uuid.UUID,
    body: ModelUpdate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = ForecastingModelRepo(session)
    with db_errors("Failed to update model"):
        model = await repo.get(model_id)
        if model is None:
            raise not_found("Model")
        await repo.update(model, body.changes())
        await session.commit()
    return data(model.to_dict())


@router.delete("/{model_id}")
async def delete_model(
    model_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = ForecastingModelRepo(session)
    with db_errors("Failed to delete model"):
        model = await repo.get(model_id)
        if model is None:
            raise not_found("Model")
        await repo.delete(model)
        await session.commit()

    log.info("forecasting_model_deleted", model_id=str(model_id))
    return {"message": "Model deleted successfully"}
