from __future__ import annotations

from fastapi import APIRouter, Depends

from techintel.api.routers.tech_detail import (
    comments,
    detail,
    export,
    forecast,
    knowledge_graph,
    signals,
    sources,
    timeline,
    watch,
)
from techintel.auth.deps import get_principal

# Every route requires a bearer token; handlers that need the caller also depend on it.
router = APIRouter(
    prefix="/api/tech-detail",
    tags=["tech-detail"],
    dependencies=[Depends(get_principal)],
)
router.include_router(detail.router, prefix="/{technology_id}")
router.include_router(sources.router, prefix="/{technology_id}/sources")
router.include_router(timeline.router, prefix="/{technology_id}/timeline")
router.include_router(watch.router, prefix="/{technology_id}/watch")
router.include_router(knowledge_graph.router, prefix="/{technology_id}/knowledge-graph")
router.include_router(forecast.router, prefix="/{technology_id}/forecast")
router.include_router(signals.router, prefix="/{technology_id}/signals")
router.include_router(comments.router, prefix="/{technology_id}/comments")
router.include_router(export.router, prefix="/{technology_id}/export")
