from __future__ import annotations

from fastapi import APIRouter

from techintel.api.routers.forecasting import jobs, models, results, scenarios, scheduled

router = APIRouter(prefix="/api/forecasting", tags=["forecasting"])
router.include_router(models.router, prefix="/models")
router.include_router(jobs.router, prefix="/jobs")
router.include_router(results.router, prefix="/results")
router.include_router(scenarios.router, prefix="/scenarios")
router.include_router(scheduled.router, prefix="/scheduled")
