from __future__ import annotations

from fastapi import APIRouter

from techintel.api.routers.onboarding import checklist, connectors, domains, progress, seed, watchlist

router = APIRouter(prefix="/api/onboarding", tags=["onboarding"])
router.include_router(progress.router, prefix="/progress")
router.include_router(checklist.router, prefix="/checklist")
router.include_router(domains.router, prefix="/domains")
router.include_router(watchlist.router, prefix="/watchlist")
router.include_router(connectors.router, prefix="/connectors")
router.include_router(seed.router, prefix="/seed")
