"""
techintel.api.app

FastAPI app factory for the technology-intelligence dashboard API.

Responsibilities:
- Build the FastAPI application and register routers, middleware and error handlers.
- Initialize and dispose shared infrastructure (DB engine/session factory).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from techintel import __version__
from techintel.api.errors import register_error_handlers
from techintel.api.routers.alerts.router import router as alerts_router
from techintel.api.routers.dashboard.router import router as dashboard_router
from techintel.api.routers.dev_auth import router as dev_auth_router
from techintel.api.routers.forecasting.router import router as forecasting_router
from techintel.api.routers.health import router as health_router
from techintel.api.routers.ingestion.router import router as ingestion_router
from techintel.api.routers.onboarding.router import router as onboarding_router
from techintel.api.routers.reports.router import router as reports_router
from techintel.api.routers.search.router import router as search_router
from techintel.api.routers.tech_detail.router import router as tech_detail_router
from techintel.db.init_db import init_db
from techintel.db.session import create_engine, create_sessionmaker
from techintel.observability.logging import configure_logging, get_logger
from techintel.observability.middleware import RequestContextMiddleware
from techintel.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        # One engine + session factory per process; routers get sessions via `api.deps.db_session`
        # and the forecast background task opens its own from the same factory.
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Prod runs Alembic migrations instead.
            await init_db(engine)
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Technology Intelligence Dashboard API",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    # Read by `api.deps.settings_dep`.
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware)
    register_error_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(dashboard_router)
    app.include_router(ingestion_router)
    app.include_router(alerts_router)
    app.include_router(forecasting_router)
    app.include_router(reports_router)
    app.include_router(tech_detail_router)
    app.include_router(onboarding_router)
    app.include_router(search_router)

    return app


# --- Module Notes -----------------------------------------------------------
# App composition stays here; queries live in routers and repositories, aggregation
# in `techintel.services`, the forecast workflow in `techintel.forecasting`.
