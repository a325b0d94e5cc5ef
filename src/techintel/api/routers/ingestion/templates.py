from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session
from techintel.api.envelopes import ApiModel, data, rows
from techintel.api.errors import db_errors
from techintel.db.models import ConnectorTemplate, ConnectorType
from techintel.db.repositories.ingestion import ConnectorTemplateRepo

router = APIRouter()


class ConnectorTemplateCreate(ApiModel):
    name: str = Field(min_length=1, max_length=256)
    type: ConnectorType
    provider: str = Field(min_length=1, max_length=256)
    description: str = ""
    required_fields: list[str] = Field(default_factory=list)
    optional_fields: list[str] = Field(default_factory=list)
    default_config: dict[str, Any] = Field(default_factory=dict)
    documentation_url: str | None = None
    popular: bool = False


@router.get("")
async def list_templates(
    popular: bool = Query(default=False),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    where = [ConnectorTemplate.popular.is_(True)] if popular else []
    with db_errors("Failed to fetch templates"):
        templates = await ConnectorTemplateRepo(session).find(
            *where,
            order_by=[ConnectorTemplate.popular.desc(), ConnectorTemplate.name.asc()],
        )
    return data(rows(templates))


@router.post("", status_code=HTTP_201_CREATED)
async def create_template(
    body: ConnectorTemplateCreate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to create template"):
        template = await ConnectorTemplateRepo(session).create(**body.model_dump())
        await session.commit()
    return data(template.to_dict())
