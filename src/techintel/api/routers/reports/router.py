from __future__ import annotations

from fastapi import APIRouter

from techintel.api.routers.reports import generated, metrics, reports, schedules, templates

router = APIRouter(prefix="/api", tags=["reports"])

# Fixed sub-paths are mounted before `/reports/{report_id}` so they are never read as ids.
router.include_router(generated.router, prefix="/reports/generated")
router.include_router(schedules.router, prefix="/reports/schedules")
router.include_router(templates.router, prefix="/reports/templates")
router.include_router(metrics.router, prefix="/reports")
router.include_router(reports.router, prefix="/reports")
