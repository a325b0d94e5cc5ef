"""
tests.test_smoke

Minimal smoke tests to validate the service can boot and serve core endpoints.

Responsibilities:
- Ensure the FastAPI app starts and DB readiness check works in test mode.
- Ensure the dev token route mints tokens the API accepts.
"""

from __future__ import annotations

import httpx
import pytest

from techintel.settings import Settings


@pytest.mark.asyncio
async def test_health_endpoints(client: httpx.AsyncClient) -> None:
    r = await client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"

    r = await client.get("/readyz")
    assert r.status_code == 200
    assert r.json()["status"] == "ready"


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: httpx.AsyncClient) -> None:
    r = await client.get("/healthz", headers={"x-request-id": "req-123"})
    assert r.headers["x-request-id"] == "req-123"


@pytest.mark.asyncio
async def test_dev_token_is_accepted(client: httpx.AsyncClient, technology) -> None:
    r = await client.post("/v1/dev/token", json={"subject": "dev-user", "roles": ["analyst"]})
    assert r.status_code == 200
    token = r.json()["access_token"]
    assert r.json()["token_type"] == "bearer"

    r = await client.get(
        f"/api/tech-detail/{technology.id}", headers={"Authorization": f"Bearer {token}"}
    )
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(client: httpx.AsyncClient) -> None:
    r = await client.get("/api/nope")
    assert r.status_code == 404
    assert "error" in r.json()


def test_settings_env_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TI_DEFAULT_USER_ID", "someone")
    monkeypatch.setenv("TI_FORECAST_STEP_DELAY_SECONDS", "0")
    s = Settings()
    assert s.default_user_id == "someone"
    assert s.forecast_step_delay_seconds == 0
    assert "jwt_secret" not in repr(s)
