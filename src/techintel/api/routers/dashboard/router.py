from __future__ import annotations

from fastapi import APIRouter

from techintel.api.routers.dashboard import analytics, home, signals

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])
router.include_router(home.router)
router.include_router(analytics.router, prefix="/analytics")
router.include_router(signals.router, prefix="/signals")
