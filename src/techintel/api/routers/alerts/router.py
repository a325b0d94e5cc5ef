from __future__ import annotations

from fastapi import APIRouter

from techintel.api.routers.alerts import alerts, events, metrics, preferences, templates, watched

router = APIRouter(prefix="/api", tags=["alerts"])

# Fixed sub-paths are mounted before `/alerts/{alert_id}` so they are never read as ids.
router.include_router(events.router, prefix="/alerts/events")
router.include_router(metrics.router, prefix="/alerts")
router.include_router(preferences.router, prefix="/alerts/preferences")
router.include_router(templates.router, prefix="/alerts/templates")
router.include_router(watched.router, prefix="/alerts/watched-technologies")
router.include_router(alerts.router, prefix="/alerts")
