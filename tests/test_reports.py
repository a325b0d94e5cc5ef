from __future__ import annotations

import uuid

import httpx
import pytest


async def _create_report(client: httpx.AsyncClient, **overrides) -> dict:
    r = await client.post("/api/reports", json={"name": "Q3 Energy Outlook", "type": "executive", **overrides})
    assert r.status_code == 201, r.text
    return r.json()["data"]


@pytest.mark.asyncio
async def test_create_report_requires_name_and_type(client: httpx.AsyncClient) -> None:
    r = await client.post("/api/reports", json={"name": "No type"})
    assert r.status_code == 400
    assert r.json()["error"] == "Missing required fields: name, type"

    report = await _create_report(client)
    assert report["status"] == "draft"
    assert report["created_by"] == "default-user"
    assert report["layout"]
    assert report["styling"]


@pytest.mark.asyncio
async def test_report_listing_is_per_user(client: httpx.AsyncClient) -> None:
    await _create_report(client)
    await _create_report(client, name="Other", createdBy="someone-else")

    r = await client.get("/api/reports")
    assert [rep["name"] for rep in r.json()["data"]] == ["Q3 Energy Outlook"]
    r = await client.get("/api/reports", params={"user_id": "someone-else"})
    assert [rep["name"] for rep in r.json()["data"]] == ["Other"]


@pytest.mark.asyncio
async def test_report_put_patch_delete(client: httpx.AsyncClient) -> None:
    report = await _create_report(client)
    url = f"/api/reports/{report['id']}"

    r = await client.put(url, json={"status": "published"})
    assert r.json()["data"]["status"] == "published"
    r = await client.patch(url, json={"description": "Updated"})
    assert r.json()["data"]["description"] == "Updated"

    r = await client.delete(url)
    assert r.json() == {"message": "Report deleted successfully"}
    r = await client.get(url)
    assert r.status_code == 404
    assert r.json()["error"] == "Report not found"


@pytest.mark.asyncio
async def test_report_update_null_handling(client: httpx.AsyncClient) -> None:
    report = await _create_report(client, description="Draft notes")
    url = f"/api/reports/{report['id']}"

    r = await client.put(url, json={"name": None})
    assert r.status_code == 400
    assert r.json()["details"][0]["field"] == "name"

    # Nullable columns can still be cleared.
    r = await client.patch(url, json={"description": None})
    assert r.status_code == 200
    assert r.json()["data"]["description"] is None
    assert r.json()["data"]["name"] == "Q3 Energy Outlook"


@pytest.mark.asyncio
async def test_generated_reports_are_versioned(client: httpx.AsyncClient) -> None:
    report = await _create_report(client)
    assert report["last_generated"] is None

    r = await client.post("/api/reports/generated", json={"reportId": report["id"]})
    assert r.status_code == 400
    assert r.json()["error"] == "Missing required fields: reportId, format"

    r = await client.post("/api/reports/generated", json={"reportId": report["id"], "format": "gif"})
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid format"

    versions = []
    for fmt in ("pdf", "pptx"):
        r = await client.post(
            "/api/reports/generated",
            json={"reportId": report["id"], "format": fmt, "fileSize": 1024 * 1024, "metadata": {"pages": 4}},
        )
        assert r.status_code == 201
        generated = r.json()["data"]
        versions.append(generated["version"])
        assert generated["report_name"] == "Q3 Energy Outlook"
        assert generated["metadata"] == {"pages": 4}
        assert generated["download_count"] == 0
    assert versions == [1, 2]

    r = await client.get(f"/api/reports/{report['id']}")
    assert r.json()["data"]["last_generated"] is not None

    r = await client.get("/api/reports/generated", params={"report_id": report["id"]})
    assert [g["version"] for g in r.json()["data"]] == [2, 1]


@pytest.mark.asyncio
async def test_generated_for_missing_report_is_404(client: httpx.AsyncClient) -> None:
    r = await client.post("/api/reports/generated", json={"reportId": str(uuid.uuid4()), "format": "pdf"})
    assert r.status_code == 404
    assert r.json()["error"] == "Report not found"


@pytest.mark.asyncio
async def test_schedules(client: httpx.AsyncClient) -> None:
    report = await _create_report(client)

    r = await client.post("/api/reports/schedules", json={"reportId": report["id"]})
    assert r.status_code == 400
    assert r.json()["error"] == "Missing required fields: reportId, recurrence"

    r = await client.post(
        "/api/reports/schedules",
        json={"reportId": report["id"], "recurrence": "daily", "schedule": {"time": "25:99"}},
    )
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid schedule"

    for bad_day in (None, "monday", 9):
        r = await client.post(
            "/api/reports/schedules",
            json={
                "reportId": report["id"],
                "recurrence": "weekly",
                "schedule": {"time": "00:00", "dayOfWeek": bad_day},
            },
        )
        assert r.status_code == 400
        assert r.json()["error"] == "Invalid schedule"

    r = await client.post(
        "/api/reports/schedules",
        json={
            "reportId": report["id"],
            "recurrence": "weekly",
            "schedule": {"time": "08:30", "dayOfWeek": 1},
            "recipients": ["cto@example.com"],
        },
    )
    assert r.status_code == 201
    schedule = r.json()["data"]
    assert schedule["report_name"] == "Q3 Energy Outlook"
    assert schedule["enabled"] is True
    assert schedule["next_run"].endswith("08:30:00")

    r = await client.patch(
        f"/api/reports/schedules/{schedule['id']}", json={"schedule": {"time": "17:45"}}
    )
    assert r.json()["data"]["next_run"].endswith("17:45:00")

    r = await client.put(f"/api/reports/schedules/{schedule['id']}", json={"enabled": False})
    assert r.json()["data"]["enabled"] is False

    r = await client.get("/api/reports/schedules", params={"enabled": "true"})
    assert r.json()["data"] == []


@pytest.mark.asyncio
async def test_report_templates(client: httpx.AsyncClient) -> None:
    r = await client.post("/api/reports/templates", json={"name": "Exec brief"})
    assert r.status_code == 400
    assert r.json()["error"] == "Missing required fields: name, type"

    r = await client.post(
        "/api/reports/templates", json={"name": "Exec brief", "type": "executive", "category": "leadership"}
    )
    assert r.status_code == 201
    r = await client.get("/api/reports/templates", params={"category": "leadership"})
    assert [t["name"] for t in r.json()["data"]] == ["Exec brief"]


@pytest.mark.asyncio
async def test_report_metrics(client: httpx.AsyncClient) -> None:
    report = await _create_report(client)
    await client.post(
        "/api/reports/generated",
        json={"reportId": report["id"], "format": "pdf", "fileSize": 3 * 1024 * 1024},
    )
    await client.post(
        "/api/reports/schedules", json={"reportId": report["id"], "recurrence": "monthly"}
    )

    r = await client.get("/api/reports/metrics")
    metrics = r.json()["data"]
    assert metrics["totalReports"] == 1
    assert metrics["activeSchedules"] == 1
    assert metrics["generatedThisMonth"] == 1
    assert metrics["totalDownloads"] == 0
    assert metrics["avgGenerationTime"] == 12.4
    assert metrics["storageUsed"] == 3.0
