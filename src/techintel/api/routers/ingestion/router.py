from __future__ import annotations

from fastapi import APIRouter

from techintel.api.routers.ingestion import (
    connectors,
    index_operations,
    logs,
    metrics,
    pipeline_runs,
    secrets,
    templates,
    uploads,
)

router = APIRouter(prefix="/api/admin-ingestion", tags=["admin-ingestion"])
router.include_router(connectors.router, prefix="/connectors")
router.include_router(pipeline_runs.router, prefix="/pipeline-runs")
router.include_router(logs.router, prefix="/logs")
router.include_router(index_operations.router, prefix="/index-operations")
router.include_router(secrets.router, prefix="/secrets")
router.include_router(templates.router, prefix="/templates")
router.include_router(uploads.router, prefix="/uploads")
router.include_router(metrics.router)
