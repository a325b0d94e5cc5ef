from __future__ import annotations

import uuid

import httpx
import pytest

CONNECTOR = {"name": "USPTO Patents", "type": "patent", "provider": "USPTO"}


async def _create_connector(client: httpx.AsyncClient, **overrides) -> dict:
    r = await client.post("/api/admin-ingestion/connectors", json={**CONNECTOR, **overrides})
    assert r.status_code == 201, r.text
    return r.json()["data"]


@pytest.mark.asyncio
async def test_create_connector_applies_defaults_and_logs_once(client: httpx.AsyncClient) -> None:
    connector = await _create_connector(client, pollingInterval=30)

    assert connector["status"] == "configuring"
    assert connector["health_score"] == 100
    assert connector["api_endpoint"] == ""
    assert connector["requires_auth"] is False
    assert connector["config"] == {}
    assert connector["capabilities"] == []
    assert connector["polling_interval"] == 30
    assert connector["next_sync"] is not None

    r = await client.get("/api/admin-ingestion/logs", params={"connector_id": connector["id"]})
    logs = r.json()["data"]
    assert [entry["message"] for entry in logs] == ['Connector "USPTO Patents" created successfully']
    assert logs[0]["level"] == "info"


@pytest.mark.asyncio
async def test_connector_filters(client: httpx.AsyncClient) -> None:
    await _create_connector(client)
    await _create_connector(client, name="arXiv", type="research", provider="arXiv")

    r = await client.get("/api/admin-ingestion/connectors", params={"type": "research"})
    assert [c["name"] for c in r.json()["data"]] == ["arXiv"]

    r = await client.get("/api/admin-ingestion/connectors", params={"type": "all"})
    assert len(r.json()["data"]) == 2

    r = await client.get("/api/admin-ingestion/connectors", params={"status": "bogus"})
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid status"


@pytest.mark.asyncio
async def test_connector_create_validation(client: httpx.AsyncClient) -> None:
    r = await client.post("/api/admin-ingestion/connectors", json={"name": "x", "type": "nope"})
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Invalid request"
    assert isinstance(body["details"], list)


@pytest.mark.asyncio
async def test_connector_get_update_delete(client: httpx.AsyncClient) -> None:
    connector = await _create_connector(client)
    url = f"/api/admin-ingestion/connectors/{connector['id']}"

    r = await client.patch(url, json={"status": "active", "healthScore": 90})
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "active"
    assert r.json()["data"]["health_score"] == 90

    r = await client.get("/api/admin-ingestion/logs", params={"connector_id": connector["id"]})
    messages = {entry["message"] for entry in r.json()["data"]}
    assert 'Connector "USPTO Patents" updated' in messages

    r = await client.delete(url)
    assert r.status_code == 200
    assert r.json() == {"message": 'Connector "USPTO Patents" deleted successfully'}

    r = await client.get(url)
    assert r.status_code == 404
    assert r.json()["error"] == "Connector not found"


@pytest.mark.asyncio
async def test_connector_update_rejects_null_for_required_fields(client: httpx.AsyncClient) -> None:
    connector = await _create_connector(client)
    url = f"/api/admin-ingestion/connectors/{connector['id']}"

    r = await client.patch(url, json={"name": None, "status": "active"})
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid request"
    assert r.json()["details"][0]["field"] == "name"

    r = await client.get(url)
    assert r.json()["data"]["name"] == "USPTO Patents"
    assert r.json()["data"]["status"] == "configuring"


@pytest.mark.asyncio
async def test_missing_connector_is_404(client: httpx.AsyncClient) -> None:
    r = await client.patch(f"/api/admin-ingestion/connectors/{uuid.uuid4()}", json={"name": "n"})
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_pipeline_run_lifecycle_updates_connector(client: httpx.AsyncClient) -> None:
    connector = await _create_connector(client)
    assert connector["last_sync"] is None

    r = await client.post(
        "/api/admin-ingestion/pipeline-runs",
        json={"connectorId": connector["id"], "connectorName": connector["name"], "documentsQueued": 40},
    )
    assert r.status_code == 201
    run = r.json()["data"]
    assert run["status"] == "running"
    assert run["documents_processed"] == 0
    assert run["documents_queued"] == 40

    r = await client.get(f"/api/admin-ingestion/connectors/{connector['id']}")
    assert r.json()["data"]["last_sync"] is not None

    r = await client.get("/api/admin-ingestion/logs", params={"connector_id": connector["id"]})
    started = [e for e in r.json()["data"] if e["message"].startswith("Pipeline run started")]
    assert [e["message"] for e in started] == ['Pipeline run started for "USPTO Patents"']

    r = await client.patch(
        f"/api/admin-ingestion/pipeline-runs/{run['id']}",
        json={"status": "completed", "documentsProcessed": 25, "throughput": 2.5},
    )
    assert r.status_code == 200
    finished = r.json()["data"]
    assert finished["end_time"] is not None
    assert finished["duration"] >= 0

    r = await client.get(f"/api/admin-ingestion/connectors/{connector['id']}")
    updated = r.json()["data"]
    assert updated["total_documents"] == 25
    assert updated["documents_today"] == 25


@pytest.mark.asyncio
async def test_pipeline_metrics_and_throughput(client: httpx.AsyncClient) -> None:
    r = await client.get("/api/admin-ingestion/metrics")
    assert r.status_code == 200
    empty = r.json()["data"]
    assert empty["total_runs"] == 0
    assert empty["error_rate"] == 0

    for name in ("a", "b"):
        await client.post("/api/admin-ingestion/pipeline-runs", json={"connectorName": name})
    r = await client.get("/api/admin-ingestion/pipeline-runs")
    first, second = r.json()["data"]
    await client.patch(f"/api/admin-ingestion/pipeline-runs/{first['id']}", json={"status": "failed"})

    r = await client.get("/api/admin-ingestion/metrics")
    metrics = r.json()["data"]
    assert metrics["total_runs"] == 2
    assert metrics["failed_runs"] == 1
    assert metrics["active_jobs"] == 1
    assert metrics["error_rate"] == 50

    r = await client.get("/api/admin-ingestion/throughput", params={"hours": 6})
    points = r.json()["data"]
    assert len(points) == 6
    assert sum(p["activeConnectors"] for p in points) == 2
    assert all(p["timestamp"].endswith(":00:00.000Z") for p in points)


@pytest.mark.asyncio
async def test_error_log_increments_connector_error_count(client: httpx.AsyncClient) -> None:
    connector = await _create_connector(client)

    r = await client.post(
        "/api/admin-ingestion/logs",
        json={"level": "error", "message": "HTTP 503 from upstream", "connectorId": connector["id"]},
    )
    assert r.status_code == 201
    entry = r.json()["data"]
    assert entry["retryable"] is False
    assert entry["retry_count"] == 0
    assert entry["max_retries"] == 3

    await client.post(
        "/api/admin-ingestion/logs",
        json={"level": "warning", "message": "slow", "connectorId": connector["id"]},
    )

    r = await client.get(f"/api/admin-ingestion/connectors/{connector['id']}")
    assert r.json()["data"]["error_count"] == 1

    r = await client.get("/api/admin-ingestion/logs", params={"level": "error"})
    assert [e["message"] for e in r.json()["data"]] == ["HTTP 503 from upstream"]


@pytest.mark.asyncio
async def test_secrets_are_masked_and_never_returned(client: httpx.AsyncClient) -> None:
    r = await client.post(
        "/api/admin-ingestion/secrets",
        json={"name": "OpenAlex", "service": "openalex", "key": "sk-live-1234567890abcdef"},
    )
    assert r.status_code == 201
    secret = r.json()["data"]
    assert secret["masked"] == "sk-...abcdef"
    assert secret["status"] == "active"
    assert "encrypted_key" not in secret
    assert "key" not in secret

    r = await client.get("/api/admin-ingestion/secrets")
    assert all("encrypted_key" not in s for s in r.json()["data"])

    r = await client.patch(f"/api/admin-ingestion/secrets/{secret['id']}", json={"status": "revoked"})
    assert r.json()["data"]["status"] == "revoked"

    r = await client.delete(f"/api/admin-ingestion/secrets/{secret['id']}")
    assert r.json() == {"message": "Secret deleted successfully"}


@pytest.mark.asyncio
async def test_index_operations(client: httpx.AsyncClient) -> None:
    r = await client.post("/api/admin-ingestion/index-operations", json={"type": "reindex"})
    assert r.status_code == 201
    op = r.json()["data"]
    assert op["status"] == "pending"
    assert op["progress"] == 0

    r = await client.patch(
        f"/api/admin-ingestion/index-operations/{op['id']}",
        json={"status": "completed", "progress": 100, "affectedDocuments": 1200},
    )
    done = r.json()["data"]
    assert done["end_time"] is not None
    assert done["affected_documents"] == 1200

    r = await client.get("/api/admin-ingestion/index-operations", params={"status": "completed"})
    assert len(r.json()["data"]) == 1


@pytest.mark.asyncio
async def test_templates_and_uploads(client: httpx.AsyncClient) -> None:
    for name, popular in (("Zeta", False), ("Alpha", True)):
        await client.post(
            "/api/admin-ingestion/templates",
            json={"name": name, "type": "news", "provider": "p", "popular": popular},
        )
    r = await client.get("/api/admin-ingestion/templates")
    assert [t["name"] for t in r.json()["data"]] == ["Alpha", "Zeta"]
    r = await client.get("/api/admin-ingestion/templates", params={"popular": "true"})
    assert [t["name"] for t in r.json()["data"]] == ["Alpha"]

    r = await client.post(
        "/api/admin-ingestion/uploads",
        json={"fileName": "patents.csv", "fileType": "text/csv", "fileSize": 2048},
    )
    assert r.status_code == 201
    upload = r.json()["data"]
    assert upload["status"] == "uploading"
    assert upload["errors"] == []

    r = await client.patch(
        f"/api/admin-ingestion/uploads/{upload['id']}",
        json={"status": "completed", "progress": 100, "documentsExtracted": 12},
    )
    assert r.json()["data"]["documents_extracted"] == 12
