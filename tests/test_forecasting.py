from __future__ import annotations

import uuid

import httpx
import pytest

from techintel.forecasting.graph import build_graph
from techintel.forecasting.nodes import summarize_predictions
from techintel.forecasting.reducers import append_steps, merge_by_tech


async def _create_model(client: httpx.AsyncClient, **overrides) -> dict:
    body = {"name": "Bass Diffusion", "type": "diffusion", "version": "1.2.0", **overrides}
    r = await client.post("/api/forecasting/models", json=body)
    assert r.status_code == 201, r.text
    return r.json()["data"]


@pytest.mark.asyncio
async def test_model_defaults_and_paging(client: httpx.AsyncClient) -> None:
    model = await _create_model(client, tags=["energy", "s-curve"])
    assert model["status"] == "training"
    assert model["is_published"] is False
    assert model["usage_count"] == 0

    for i in range(2):
        await _create_model(client, name=f"ARIMA {i}", type="arima", tags=["timeseries"])

    r = await client.get("/api/forecasting/models", params={"page": 1, "page_size": 2})
    body = r.json()
    assert body["total"] == 3
    assert body["page"] == 1
    assert body["page_size"] == 2
    assert len(body["data"]) == 2

    r = await client.get("/api/forecasting/models", params={"page": 2, "page_size": 2})
    assert len(r.json()["data"]) == 1

    r = await client.get("/api/forecasting/models", params={"type": "arima"})
    assert r.json()["total"] == 2

    r = await client.get("/api/forecasting/models", params={"tags": "energy"})
    assert [m["id"] for m in r.json()["data"]] == [model["id"]]

    r = await client.get("/api/forecasting/models", params={"type": "prophet"})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_model_put_and_patch_update(client: httpx.AsyncClient) -> None:
    model = await _create_model(client)
    url = f"/api/forecasting/models/{model['id']}"

    r = await client.put(url, json={"status": "ready", "accuracy": 91.5})
    assert r.json()["data"]["status"] == "ready"
    r = await client.patch(url, json={"isPublished": True})
    updated = r.json()["data"]
    assert updated["is_published"] is True
    assert updated["accuracy"] == 91.5

    r = await client.delete(url)
    assert r.json() == {"message": "Model deleted successfully"}
    r = await client.get(url)
    assert r.status_code == 404
    assert r.json()["error"] == "Model not found"


@pytest.mark.asyncio
async def test_job_runs_to_completion_with_results(client: httpx.AsyncClient) -> None:
    model = await _create_model(client)

    r = await client.post(
        "/api/forecasting/jobs",
        json={"modelId": model["id"], "techIds": ["tech-a", "tech-b"], "parameters": {"horizon": 5}},
    )
    assert r.status_code == 201
    accepted = r.json()["data"]
    assert accepted["status"] == "pending"
    assert accepted["estimated_time"]

    # The background task has finished by the time the ASGI call returns.
    r = await client.get(f"/api/forecasting/jobs/{accepted['job_id']}")
    job = r.json()["data"]
    assert job["status"] == "completed"
    assert job["progress"] == 100
    assert job["completed_at"] is not None
    assert [s["step"] for s in job["state"]["steps"]] == [
        "prepare",
        "trl",
        "adoption",
        "market",
        "assemble",
        "explain",
        "summarize",
    ]

    r = await client.get("/api/forecasting/results", params={"job_id": accepted["job_id"]})
    results = r.json()["data"]
    assert sorted(res["tech_id"] for res in results) == ["tech-a", "tech-b"]
    assert all(len(res["predictions"]) == 6 for res in results)
    assert all(res["metrics"]["finalTRL"] == 6.0 for res in results)

    r = await client.get(f"/api/forecasting/models/{model['id']}")
    assert r.json()["data"]["usage_count"] == 1


@pytest.mark.asyncio
async def test_job_writes_one_result_per_distinct_technology(client: httpx.AsyncClient) -> None:
    model = await _create_model(client)
    r = await client.post(
        "/api/forecasting/jobs",
        json={"modelId": model["id"], "techIds": ["tech-a", "tech-b", "tech-a"], "parameters": {"horizon": 2}},
    )
    job_id = r.json()["data"]["job_id"]

    r = await client.get(f"/api/forecasting/jobs/{job_id}")
    assert r.json()["data"]["status"] == "completed"

    r = await client.get("/api/forecasting/results", params={"job_id": job_id})
    assert sorted(res["tech_id"] for res in r.json()["data"]) == ["tech-a", "tech-b"]


@pytest.mark.asyncio
async def test_job_with_invalid_horizon_fails(client: httpx.AsyncClient) -> None:
    model = await _create_model(client)
    r = await client.post(
        "/api/forecasting/jobs",
        json={"modelId": model["id"], "techIds": ["tech-a"], "parameters": {"horizon": 99}},
    )
    job_id = r.json()["data"]["job_id"]

    r = await client.get(f"/api/forecasting/jobs/{job_id}")
    job = r.json()["data"]
    assert job["status"] == "failed"
    assert "horizon" in job["error"]

    r = await client.get("/api/forecasting/results", params={"job_id": job_id})
    assert r.json()["data"] == []


@pytest.mark.asyncio
async def test_job_validation(client: httpx.AsyncClient) -> None:
    r = await client.post("/api/forecasting/jobs", json={"modelId": str(uuid.uuid4()), "techIds": ["x"]})
    assert r.status_code == 404
    assert r.json()["error"] == "Model not found"

    model = await _create_model(client)
    r = await client.post("/api/forecasting/jobs", json={"modelId": model["id"], "techIds": []})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_scenarios_and_scheduled_runs(client: httpx.AsyncClient) -> None:
    r = await client.post(
        "/api/forecasting/scenarios",
        json={"name": "Fast adoption", "type": "optimistic", "isPublic": True, "parameters": {"adoptionFactor": 1.5}},
    )
    assert r.status_code == 201
    r = await client.get("/api/forecasting/scenarios", params={"public": "true"})
    assert [s["name"] for s in r.json()["data"]] == ["Fast adoption"]

    model = await _create_model(client)
    r = await client.post(
        "/api/forecasting/scheduled",
        json={
            "name": "Weekly refresh",
            "modelId": model["id"],
            "techIds": ["tech-a"],
            "schedule": {"frequency": "weekly", "dayOfWeek": 1, "time": "06:00"},
        },
    )
    assert r.status_code == 201
    run = r.json()["data"]
    assert run["is_active"] is True
    assert run["next_run"] is not None

    r = await client.post(
        "/api/forecasting/scheduled",
        json={"name": "Bad", "modelId": model["id"], "techIds": ["t"], "schedule": {"frequency": "hourly"}},
    )
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid schedule"

    r = await client.post(
        "/api/forecasting/scheduled",
        json={
            "name": "Null day",
            "modelId": model["id"],
            "techIds": ["t"],
            "schedule": {"frequency": "weekly", "time": "00:00", "dayOfWeek": None},
        },
    )
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid schedule"


@pytest.mark.asyncio
async def test_graph_applies_scenario_parameters() -> None:
    state = await build_graph().ainvoke(
        {
            "job_id": "j",
            "tech_ids": ["t"],
            "parameters": {"horizon": 3, "adoptionFactor": 2.0, "startYear": 2030},
            "steps": [],
        }
    )
    preds = state["predictions"]["t"]
    assert [p["year"] for p in preds] == [2030, 2031, 2032, 2033]
    assert [p["adoptionShare"] for p in preds] == [5.0, 22.0, 39.0, 56.0]
    assert state["uncertainty"]["t"]["upper"][0] == 5.75
    assert state["progress"] == 100


def test_summarize_predictions() -> None:
    preds = [
        {"year": 2025, "trl": 4.0, "adoptionShare": 5.0, "marketSize": 10.0, "confidence": 95.0},
        {"year": 2026, "trl": 4.4, "adoptionShare": 30.0, "marketSize": 16.2, "confidence": 93.0},
    ]
    summary = summarize_predictions(preds)
    assert summary["finalTRL"] == 4.4
    assert summary["peakAdoption"] == 30.0
    assert summary["peakAdoptionYear"] == 2026
    assert summary["marketSizeYear5"] == 16.2
    assert summary["breakEvenYear"] == 2026
    assert summary["confidenceScore"] == 94


def test_step_log_and_per_tech_reducers() -> None:
    steps = append_steps([{"step": "prepare", "progress": 10}], [{"step": "trl", "progress": 25}])
    steps = append_steps(steps, [{"step": "prepare", "progress": 12}])
    assert steps == [{"step": "prepare", "progress": 12}, {"step": "trl", "progress": 25}]

    assert merge_by_tech({"a": [1.0], "b": [2.0]}, {"b": [3.0]}) == {"a": [1.0], "b": [3.0]}
    assert merge_by_tech(None, None) == {}
