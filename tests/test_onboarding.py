from __future__ import annotations

import uuid

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import select

from techintel.db.models import UserConnector
from techintel.services.onboarding import checklist_progress, default_checklist


@pytest_asyncio.fixture
async def seeded_client(client: httpx.AsyncClient) -> httpx.AsyncClient:
    r = await client.post("/api/onboarding/seed")
    assert r.status_code == 201
    return client


@pytest.mark.asyncio
async def test_seed_is_idempotent(seeded_client: httpx.AsyncClient) -> None:
    r = await seeded_client.post("/api/onboarding/seed")
    assert r.status_code == 200
    assert r.json() == {"message": "Database already seeded", "domainCount": 8}


@pytest.mark.asyncio
async def test_progress_get_or_create_and_update(client: httpx.AsyncClient) -> None:
    r = await client.get("/api/onboarding/progress")
    assert r.json()["data"] == {
        "currentStep": 1,
        "totalSteps": 6,
        "completedSteps": [],
        "isComplete": False,
        "skipped": False,
    }

    r = await client.put("/api/onboarding/progress", json={"currentStep": 3, "completedSteps": [1, 2]})
    assert r.status_code == 200
    assert r.json()["message"] == "Progress updated successfully"
    assert r.json()["data"]["currentStep"] == 3

    # Other users start fresh.
    r = await client.get("/api/onboarding/progress", params={"user_id": "someone-else"})
    assert r.json()["data"]["currentStep"] == 1

    r = await client.get("/api/onboarding/progress")
    assert r.json()["data"]["completedSteps"] == [1, 2]

    r = await client.put("/api/onboarding/progress", json={"currentStep": None})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_checklist_defaults_and_progress(client: httpx.AsyncClient) -> None:
    r = await client.get("/api/onboarding/checklist")
    checklist = r.json()["data"]
    assert [item["id"] for item in checklist["items"]] == [f"check-{n}" for n in range(1, 7)]
    assert checklist["items"][1]["action"] == "SELECT_DOMAINS"
    assert checklist["progress"] == 0

    items = checklist["items"]
    items[0]["completed"] = True
    items[1]["completed"] = True
    r = await client.put("/api/onboarding/checklist", json={"items": items})
    assert r.status_code == 200
    updated = r.json()["data"]
    assert updated["id"] == checklist["id"]
    assert updated["progress"] == 33.33
    assert updated["items"][0]["helpText"] == "Add your name, role, and organization"

    r = await client.put("/api/onboarding/checklist", json={})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_domain_selection(seeded_client: httpx.AsyncClient) -> None:
    r = await seeded_client.get("/api/onboarding/domains")
    domains = r.json()["data"]
    assert [d["name"] for d in domains] == sorted(d["name"] for d in domains)
    assert not any(d["selected"] for d in domains)

    r = await seeded_client.post(
        "/api/onboarding/domains", json={"domainIds": ["dom-001", "dom-004", "dom-001"]}
    )
    assert r.json() == {"message": "Domains updated successfully", "count": 2}

    r = await seeded_client.post("/api/onboarding/domains", json={"domainIds": ["dom-002"]})
    assert r.json()["count"] == 1

    r = await seeded_client.get("/api/onboarding/domains")
    assert [d["id"] for d in r.json()["data"] if d["selected"]] == ["dom-002"]

    r = await seeded_client.post("/api/onboarding/domains", json={"domainIds": ["dom-999"]})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_watchlist_crud(seeded_client: httpx.AsyncClient) -> None:
    r = await seeded_client.get("/api/onboarding/watchlist", params={"user_id": "suggestions"})
    assert len(r.json()["data"]) == 6

    r = await seeded_client.get("/api/onboarding/watchlist")
    assert r.json()["data"] == []

    r = await seeded_client.post("/api/onboarding/watchlist", json={"name": "CRISPR", "type": "technology"})
    assert r.status_code == 201
    item = r.json()["data"]
    assert item["activityCount"] == 0

    r = await seeded_client.post("/api/onboarding/watchlist", json={"name": "CRISPR"})
    assert r.status_code == 400

    r = await seeded_client.delete("/api/onboarding/watchlist")
    assert r.status_code == 400

    r = await seeded_client.delete("/api/onboarding/watchlist", params={"item_id": item["id"]})
    assert r.json() == {"message": "Item removed successfully"}

    r = await seeded_client.delete("/api/onboarding/watchlist", params={"item_id": str(uuid.uuid4())})
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_connector_toggle_encrypts_key(seeded_client: httpx.AsyncClient, session_factory) -> None:
    r = await seeded_client.get("/api/onboarding/connectors")
    connectors = r.json()["data"]
    assert [c["recommended"] for c in connectors][:3] == [True, True, True]
    assert not any(c["enabled"] for c in connectors)

    r = await seeded_client.post(
        "/api/onboarding/connectors", json={"connectorId": "conn-001", "apiKey": "uspto-secret"}
    )
    assert r.status_code == 201
    assert r.json()["data"]["enabled"] is True
    assert r.json()["data"]["apiKey"] == "****"

    r = await seeded_client.post("/api/onboarding/connectors", json={"connectorId": "conn-001", "enabled": False})
    assert r.status_code == 200
    assert r.json()["data"]["enabled"] is False
    assert r.json()["data"]["apiKey"] == "****"

    async with session_factory() as session:
        stored = (await session.execute(select(UserConnector))).scalar_one()
    assert stored.encrypted_api_key and "uspto-secret" not in stored.encrypted_api_key

    r = await seeded_client.post("/api/onboarding/connectors", json={"connectorId": "conn-404"})
    assert r.status_code == 404
    assert r.json()["error"] == "Connector not found"

    r = await seeded_client.post("/api/onboarding/connectors", json={})
    assert r.status_code == 400


def test_checklist_progress() -> None:
    items = default_checklist()
    assert checklist_progress(items) == 0
    items[0]["completed"] = True
    assert checklist_progress(items) == 16.67
    assert checklist_progress([]) == 0
    # Each call hands out a fresh copy.
    assert default_checklist()[0]["completed"] is False
