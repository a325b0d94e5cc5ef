from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session
from techintel.api.envelopes import ApiModel, data, rows
from techintel.api.errors import bad_request, db_errors
from techintel.db.models import ReportTemplate
from techintel.db.repositories.reports import ReportTemplateRepo

router = APIRouter()


class ReportTemplateCreate(ApiModel):
    name: str | None = None
    type: str | None = None
    description: str = ""
    thumbnail: str = ""
    widgets: list[dict[str, Any]] = Field(default_factory=list)
    category: str = "custom"


@router.get("")
async def list_templates(
    type: str | None = Query(default=None),
    category: str | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    where = []
    if type:
        where.append(ReportTemplate.type == type)
    if category:
        where.append(ReportTemplate.category == category)

    with db_errors("Failed to fetch templates"):
        templates = await ReportTemplateRepo(session).find(
            *where, order_by=[ReportTemplate.usage_count.desc()]
        )
    return data(rows(templates))


@router.post("", status_code=HTTP_201_CREATED)
async def create_template(
    body: ReportTemplateCreate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    if not body.name or not body.type:
        raise bad_request("Missing required fields: name, type")

    with db_errors("Failed to create template"):
        template = await ReportTemplateRepo(session).create(**body.model_dump(), usage_count=0)
        await session.commit()
    return data(template.to_dict())
