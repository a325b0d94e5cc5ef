from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session
from techintel.api.envelopes import ApiModel, data, rows
from techintel.api.errors import db_errors
from techintel.db.models import ScenarioPreset, ScenarioType
from techintel.db.repositories.forecasting import ScenarioPresetRepo

router = APIRouter()


class ScenarioCreate(ApiModel):
    name: str = Field(min_length=1, max_length=256)
    type: ScenarioType
    description: str = ""
    parameters: dict[str, Any] = Field(default_factory=dict)
    created_by: str = "system"
    is_public: bool = False


@router.get("")
async def list_scenarios(
    public: bool | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    where = []
    if public is not None:
        where.append(ScenarioPreset.is_public.is_(public))

    with db_errors("Failed to fetch scenarios"):
        presets = await ScenarioPresetRepo(session).find(
            *where, order_by=[ScenarioPreset.usage_count.desc()]
        )
    return data(rows(presets))


@router.post("", status_code=HTTP_201_CREATED)
async def create_scenario(
    body: ScenarioCreate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to create scenario"):
        preset = await ScenarioPresetRepo(session).create(**body.model_dump(), usage_count=0)
        await session.commit()
    return data(preset.to_dict())
