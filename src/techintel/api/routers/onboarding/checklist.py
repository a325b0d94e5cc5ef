from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from techintel.api.deps import db_session, settings_dep
from techintel.api.envelopes import ApiModel, data
from techintel.api.errors import db_errors
from techintel.db.models import OnboardingChecklist
from techintel.db.repositories.onboarding import ChecklistRepo
from techintel.services.onboarding import checklist_progress
from techintel.settings import Settings

router = APIRouter()


class ChecklistItem(ApiModel):
    id: str = Field(min_length=1)
    label: str
    completed: bool = False
    optional: bool = False
    help_text: str | None = None
    action: str | None = None


class ChecklistUpdate(ApiModel):
    user_id: str | None = None
    items: list[ChecklistItem] = Field(min_length=1)


def checklist_view(checklist: OnboardingChecklist) -> dict[str, Any]:
    return {"id": str(checklist.id), "items": checklist.items, "progress": checklist.progress}


@router.get("")
async def get_checklist(
    user_id: str | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    with db_errors("Failed to fetch checklist"):
        checklist = await ChecklistRepo(session).get_or_create(user_id or settings.default_user_id)
        await session.commit()
    return data(checklist_view(checklist))


@router.put("")
async def put_checklist(
    body: ChecklistUpdate,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    # Items are stored in their wire (camelCase) shape.
    items = [item.model_dump(by_alias=True, exclude_none=True) for item in body.items]
    repo = ChecklistRepo(session)
    with db_errors("Failed to update checklist"):
        checklist = await repo.get_or_create(body.user_id or settings.default_user_id)
        await repo.update(checklist, {"items": items, "progress": checklist_progress(items)})
        await session.commit()
    return data(checklist_view(checklist))
