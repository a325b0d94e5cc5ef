from __future__ import annotations

from fastapi import APIRouter, Depends

from techintel.api.routers.search import history, recent, saved, search, suggestions
from techintel.auth.deps import get_principal

PREFIX = "/api/search"

# Every route requires a bearer token; the subject owns history and saved searches.
# The search itself lives at the bare prefix, so each child carries the full prefix.
router = APIRouter(tags=["search"], dependencies=[Depends(get_principal)])
router.include_router(history.router, prefix=f"{PREFIX}/history")
router.include_router(saved.router, prefix=f"{PREFIX}/saved")
router.include_router(recent.router, prefix=f"{PREFIX}/recent")
router.include_router(suggestions.router, prefix=f"{PREFIX}/suggestions")
router.include_router(search.router, prefix=PREFIX)
