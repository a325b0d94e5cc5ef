from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from techintel.api.deps import db_session, settings_dep
from techintel.api.envelopes import ApiModel, data
from techintel.api.errors import db_errors
from techintel.db.models import OnboardingProgress
from techintel.db.repositories.onboarding import ProgressRepo
from techintel.settings import Settings

router = APIRouter()


class ProgressUpdate(ApiModel):
    user_id: str | None = None
    current_step: int | None = Field(default=None, ge=1)
    completed_steps: list[int] | None = None
    is_complete: bool | None = None
    skipped: bool | None = None


def progress_view(progress: OnboardingProgress) -> dict[str, Any]:
    return {
        "currentStep": progress.current_step,
        "totalSteps": progress.total_steps,
        "completedSteps": list(progress.completed_steps or []),
        "isComplete": progress.is_complete,
        "skipped": progress.skipped,
    }


@router.get("")
async def get_progress(
    user_id: str | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    with db_errors("Failed to fetch progress"):
        progress = await ProgressRepo(session).get_or_create(user_id or settings.default_user_id)
        await session.commit()
    return data(progress_view(progress))


@router.put("")
async def put_progress(
    body: ProgressUpdate,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    changes = {k: v for k, v in body.changes().items() if k != "user_id"}
    repo = ProgressRepo(session)
    with db_errors("Failed to update progress"):
        progress = await repo.get_or_create(body.user_id or settings.default_user_id)
        if changes:
            await repo.update(progress, changes)
        await session.commit()
    return data(progress_view(progress), message="Progress updated successfully")
