from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from techintel.api.deps import db_session
from techintel.api.envelopes import data
from techintel.api.errors import db_errors
from techintel.db.base import utcnow
from techintel.db.repositories.technology import SignalRepo
from techintel.services.signals import group_signals

router = APIRouter()


@router.get("")
async def signals(
    technology_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to fetch signals"):
        points = await SignalRepo(session).for_technology(technology_id)
    return data(
        {"signals": group_signals(points), "lastUpdated": utcnow().isoformat()},
        tech_id=str(technology_id),
    )
