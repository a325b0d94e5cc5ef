from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session
from techintel.api.envelopes import ApiModel, data, rows
from techintel.api.errors import db_errors
from techintel.db.models import AlertFrequency, AlertTemplate
from techintel.db.repositories.alerts import AlertTemplateRepo

router = APIRouter()


class AlertTemplateCreate(ApiModel):
    name: str = Field(min_length=1, max_length=256)
    description: str = ""
    category: str = Field(min_length=1, max_length=64)
    trigger_type: str = Field(min_length=1, max_length=64)
    default_conditions: list[dict[str, Any]] = Field(default_factory=list)
    recommended_frequency: AlertFrequency = AlertFrequency.daily
    icon: str = "📄"
    popular: bool = False


@router.get("")
async def list_templates(
    category: str | None = Query(default=None),
    popular: bool = Query(default=False),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    where = []
    if category and category != "all":
        where.append(AlertTemplate.category == category)
    if popular:
        where.append(AlertTemplate.popular.is_(True))

    with db_errors("Failed to fetch templates"):
        templates = await AlertTemplateRepo(session).find(
            *where, order_by=[AlertTemplate.popular.desc(), AlertTemplate.name.asc()]
        )
    return data(rows(templates))


@router.post("", status_code=HTTP_201_CREATED)
async def create_template(
    body: AlertTemplateCreate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to create template"):
        template = await AlertTemplateRepo(session).create(**body.model_dump())
        await session.commit()
    return data(template.to_dict())
