"""
tests.conftest

Shared fixtures: an app bound to a throwaway SQLite file and an httpx client over ASGI.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import timedelta

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from techintel.api.app import create_app
from techintel.auth.jwt import JwtConfig, issue_token
from techintel.db.models import Technology
from techintel.settings import Settings


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path}/test.db",
        forecast_step_delay_seconds=0,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    # httpx ASGITransport does not run the lifespan; enter it explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def session_factory(app: FastAPI) -> async_sessionmaker[AsyncSession]:
    return app.state.sessionmaker


@pytest.fixture
def auth_headers(settings: Settings):
    def _headers(subject: str = "analyst-1", roles: list[str] | None = None) -> dict[str, str]:
        token = issue_token(
            cfg=JwtConfig.from_settings(settings),
            subject=subject,
            roles=roles if roles is not None else [],
            ttl=timedelta(minutes=5),
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest_asyncio.fixture
async def technology(session_factory: async_sessionmaker[AsyncSession]) -> Technology:
    async with session_factory() as session:
        tech = Technology(
            name="Solid-State Batteries",
            canonical_summary="Batteries with a solid electrolyte.",
            domains=["energy", "materials"],
            current_trl=5,
            confidence=0.7,
        )
        session.add(tech)
        await session.commit()
        return tech
