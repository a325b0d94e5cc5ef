from __future__ import annotations

import uuid

import httpx
import pytest

from techintel.db.models import AlertState
from techintel.services.alert_metrics import delivery_success_rate, signal_to_noise


async def _create_alert(client: httpx.AsyncClient, **overrides) -> dict:
    body = {"name": "Patent surge", "triggerType": "patent_velocity", "severity": "high", **overrides}
    r = await client.post("/api/alerts", json=body)
    assert r.status_code == 201, r.text
    return r.json()["data"]


@pytest.mark.asyncio
async def test_create_alert_defaults(client: httpx.AsyncClient) -> None:
    alert = await _create_alert(client)
    assert alert["state"] == "active"
    assert alert["trigger_count"] == 0
    assert alert["created_by"] == "default-user"
    assert alert["dedup_rules"]["enabled"] is True
    assert alert["throttle"]["enabled"] is False


@pytest.mark.asyncio
async def test_alert_filters_and_crud(client: httpx.AsyncClient) -> None:
    high = await _create_alert(client)
    await _create_alert(client, name="Funding round", severity="low")

    r = await client.get("/api/alerts", params={"severity": "high"})
    assert [a["id"] for a in r.json()["data"]] == [high["id"]]

    r = await client.get("/api/alerts", params={"state": "all"})
    assert len(r.json()["data"]) == 2

    r = await client.get("/api/alerts", params={"severity": "urgent"})
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid severity"

    r = await client.patch(f"/api/alerts/{high['id']}", json={"state": "muted"})
    assert r.json()["data"]["state"] == "muted"

    r = await client.delete(f"/api/alerts/{high['id']}")
    assert r.json() == {"message": "Alert deleted successfully"}
    r = await client.get(f"/api/alerts/{high['id']}")
    assert r.status_code == 404
    assert r.json()["error"] == "Alert not found"


@pytest.mark.asyncio
async def test_event_increments_trigger_count_once(client: httpx.AsyncClient) -> None:
    alert = await _create_alert(client)

    r = await client.post(
        "/api/alerts/events",
        json={"alertId": alert["id"], "deliveryStatus": [{"channel": "email", "status": "delivered"}]},
    )
    assert r.status_code == 201
    event = r.json()["data"]
    assert event["alert_name"] == "Patent surge"
    assert event["severity"] == "high"

    r = await client.get(f"/api/alerts/{alert['id']}")
    refreshed = r.json()["data"]
    assert refreshed["trigger_count"] == 1
    assert refreshed["last_triggered"] is not None

    r = await client.get("/api/alerts/events", params={"alert_id": alert["id"]})
    assert len(r.json()["data"]) == 1


@pytest.mark.asyncio
async def test_event_for_missing_alert_is_404(client: httpx.AsyncClient) -> None:
    r = await client.post("/api/alerts/events", json={"alertId": str(uuid.uuid4())})
    assert r.status_code == 404
    assert r.json()["error"] == "Alert not found"


@pytest.mark.asyncio
async def test_alert_metrics(client: httpx.AsyncClient) -> None:
    r = await client.get("/api/alerts/metrics")
    assert r.status_code == 200
    empty = r.json()["data"]
    assert empty["totalAlerts"] == 0
    assert empty["successRate"] == 100

    alert = await _create_alert(client)
    muted = await _create_alert(client, name="Quiet")
    await client.patch(f"/api/alerts/{muted['id']}", json={"state": "muted"})
    await client.post(
        "/api/alerts/events",
        json={
            "alertId": alert["id"],
            "deliveryStatus": [
                {"channel": "email", "status": "delivered"},
                {"channel": "slack", "status": "failed"},
            ],
        },
    )

    r = await client.get("/api/alerts/metrics")
    metrics = r.json()["data"]
    assert metrics["totalAlerts"] == 2
    assert metrics["activeAlerts"] == 1
    assert metrics["mutedAlerts"] == 1
    assert metrics["triggersLast24h"] == 1
    assert metrics["triggersLast7d"] == 1
    assert metrics["successRate"] == 50.0
    assert metrics["signalToNoiseRatio"] == 0.5


@pytest.mark.asyncio
async def test_preferences_are_created_then_updated(client: httpx.AsyncClient) -> None:
    r = await client.get("/api/alerts/preferences")
    prefs = r.json()["data"]
    assert prefs["user_id"] == "default-user"
    assert prefs["enable_in_app"] is True
    assert prefs["severity_filters"] == {"critical": True, "high": True, "medium": True, "low": True}

    r = await client.put(
        "/api/alerts/preferences",
        json={"enableSlack": True, "quietHours": {"enabled": True, "start": "23:00", "end": "07:00"}},
    )
    updated = r.json()["data"]
    assert updated["id"] == prefs["id"]
    assert updated["enable_slack"] is True
    assert updated["quiet_hours"]["start"] == "23:00"

    r = await client.get("/api/alerts/preferences", params={"user_id": "someone-else"})
    assert r.json()["data"]["id"] != prefs["id"]


@pytest.mark.asyncio
async def test_templates_and_watched(client: httpx.AsyncClient) -> None:
    await client.post(
        "/api/alerts/templates",
        json={"name": "TRL jump", "category": "maturity", "triggerType": "trl_change", "popular": True},
    )
    await client.post(
        "/api/alerts/templates",
        json={"name": "Funding", "category": "market", "triggerType": "funding"},
    )
    r = await client.get("/api/alerts/templates", params={"category": "maturity"})
    assert [t["name"] for t in r.json()["data"]] == ["TRL jump"]
    r = await client.get("/api/alerts/templates", params={"category": "all"})
    assert [t["name"] for t in r.json()["data"]] == ["TRL jump", "Funding"]

    r = await client.post(
        "/api/alerts/watched-technologies",
        json={"technologyId": "tech-1", "name": "Fusion", "domain": "energy", "alertsEnabled": False},
    )
    assert r.status_code == 201
    assert r.json()["data"]["update_count"] == 0

    r = await client.get("/api/alerts/watched-technologies", params={"alerts_enabled": "true"})
    assert r.json()["data"] == []
    r = await client.get("/api/alerts/watched-technologies", params={"alerts_enabled": "false"})
    assert [w["name"] for w in r.json()["data"]] == ["Fusion"]


class _Event:
    def __init__(self, delivery_status):
        self.delivery_status = delivery_status


def test_delivery_success_rate() -> None:
    assert delivery_success_rate([]) == 100.0
    events = [
        _Event([{"status": "delivered"}, {"status": "delivered"}]),
        _Event([{"status": "failed"}, "garbage"]),
    ]
    assert delivery_success_rate(events) == 66.7


def test_signal_to_noise() -> None:
    assert signal_to_noise(0, 0) == 0.8
    assert signal_to_noise(10, 9) == 0.5
    assert signal_to_noise(4, 1) == 0.75
    assert AlertState.muted.value == "muted"
