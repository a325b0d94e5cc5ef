from __future__ import annotations

import uuid

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from techintel.api.deps import db_session
from techintel.api.errors import db_errors, not_found
from techintel.db.models import Technology
from techintel.db.repositories.technology import TechnologyRepo


async def technology_dep(
    technology_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> Technology:
    # Shares the request session, so handlers can keep writing through it.
    with db_errors("Failed to fetch technology"):
        technology = await TechnologyRepo(session).get(technology_id)
    if technology is None:
        raise not_found("Technology")
    return technology
