from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_200_OK, HTTP_201_CREATED

from techintel.api.deps import db_session
from techintel.api.errors import db_errors
from techintel.db.repositories.onboarding import DomainRepo, seed_catalogs
from techintel.observability.logging import get_logger

router = APIRouter()
log = get_logger(__name__)


@router.post("")
async def seed_onboarding(response: Response, session: AsyncSession = Depends(db_session)) -> dict[str, Any]:
    with db_errors("Failed to seed onboarding catalogs"):
        created = await seed_catalogs(session)
        if created is None:
            response.status_code = HTTP_200_OK
            return {"message": "Database already seeded", "domainCount": await DomainRepo(session).count()}
        await session.commit()

    response.status_code = HTTP_201_CREATED
    log.info("onboarding_seeded", **created)
    return {"message": "Database seeded successfully", **created}
