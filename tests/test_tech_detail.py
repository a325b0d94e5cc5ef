from __future__ import annotations

import uuid
from datetime import date

import httpx
import pytest
import pytest_asyncio

from techintel.api.routers.tech_detail.knowledge_graph import center_node_id
from techintel.db.models import (
    KgEdge,
    KgNode,
    SignalDatapoint,
    Technology,
    TechnologyRelationship,
    TechnologySource,
    TimelineEvent,
    TrlHistory,
)


@pytest_asyncio.fixture
async def seeded(session_factory, technology: Technology) -> Technology:
    async with session_factory() as session:
        other = Technology(name="Lithium-Ion", current_trl=9)
        session.add(other)
        await session.flush()
        session.add_all(
            [
                TrlHistory(technology_id=technology.id, trl=3, date=date(2019, 1, 1), confidence=0.6),
                TrlHistory(technology_id=technology.id, trl=5, date=date(2023, 6, 1), confidence=0.8),
                TechnologyRelationship(
                    source_technology_id=technology.id,
                    target_technology_id=other.id,
                    relationship_type="competes_with",
                ),
                TechnologySource(
                    technology_id=technology.id,
                    type="patent",
                    title="Sulfide electrolyte",
                    date=date(2024, 3, 1),
                    confidence="high",
                    impact_score=9.0,
                    citation_count=4,
                ),
                TechnologySource(
                    technology_id=technology.id,
                    type="paper",
                    title='Dendrite "suppression", revisited',
                    date=date(2023, 1, 1),
                    confidence="medium",
                    impact_score=6.5,
                    citation_count=40,
                ),
                TechnologySource(
                    technology_id=technology.id,
                    type="paper",
                    title="Interface stability",
                    date=date(2022, 5, 1),
                    confidence="low",
                    impact_score=3.0,
                    citation_count=12,
                ),
                TimelineEvent(
                    technology_id=technology.id,
                    type="funding",
                    title="Series C",
                    date=date(2021, 2, 1),
                    impact_score=7.0,
                ),
                TimelineEvent(
                    technology_id=technology.id,
                    type="milestone",
                    title="Pilot line",
                    date=date(2023, 9, 1),
                    impact_score=8.5,
                ),
                SignalDatapoint(technology_id=technology.id, signal_type="patents", date=date(2024, 1, 1), value=50),
                SignalDatapoint(technology_id=technology.id, signal_type="patents", date=date(2024, 2, 1), value=75),
                KgNode(technology_id=technology.id, node_id="org-1", node_type="organization", label="QuantumScape"),
                KgNode(technology_id=technology.id, node_id="tech-1", node_type="technology", label="SSB"),
                KgEdge(technology_id=technology.id, source_node_id="org-1", target_node_id="tech-1", edge_type="develops"),
            ]
        )
        await session.commit()
    return technology


@pytest.mark.asyncio
async def test_requires_token(client: httpx.AsyncClient, technology: Technology) -> None:
    r = await client.get(f"/api/tech-detail/{technology.id}")
    assert r.status_code == 401
    assert r.json() == {"error": "Unauthorized"}

    r = await client.get(
        f"/api/tech-detail/{technology.id}", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_unknown_technology_is_404(client: httpx.AsyncClient, auth_headers) -> None:
    r = await client.get(f"/api/tech-detail/{uuid.uuid4()}", headers=auth_headers())
    assert r.status_code == 404
    assert r.json()["error"] == "Technology not found"


@pytest.mark.asyncio
async def test_detail_payload(client: httpx.AsyncClient, auth_headers, seeded: Technology) -> None:
    r = await client.get(f"/api/tech-detail/{seeded.id}", headers=auth_headers())
    assert r.status_code == 200
    body = r.json()["data"]
    meta = body["metadata"]
    assert meta["name"] == "Solid-State Batteries"
    assert meta["currentTRL"] == 5
    assert meta["isWatched"] is False
    assert meta["relatedTechCount"] == 1
    assert meta["sourceCount"] == 3
    assert [h["trl"] for h in body["trlHistory"]] == [3, 5]


@pytest.mark.asyncio
async def test_patch_requires_analyst_role(
    client: httpx.AsyncClient, auth_headers, technology: Technology
) -> None:
    url = f"/api/tech-detail/{technology.id}"
    r = await client.patch(url, json={"currentTRL": 6}, headers=auth_headers(roles=["viewer"]))
    assert r.status_code == 403
    assert r.json()["error"] == "Insufficient role"

    r = await client.patch(url, json={"currentTRL": 6}, headers=auth_headers(roles=["analyst"]))
    assert r.status_code == 200
    assert r.json()["data"]["current_trl"] == 6

    r = await client.patch(url, json={"currentTRL": 12}, headers=auth_headers(roles=["admin"]))
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_sources_paging_and_sorting(
    client: httpx.AsyncClient, auth_headers, seeded: Technology
) -> None:
    url = f"/api/tech-detail/{seeded.id}/sources"
    r = await client.get(url, params={"size": 2}, headers=auth_headers())
    body = r.json()
    assert body["total"] == 3
    assert body["page_size"] == 2
    assert body["tech_id"] == str(seeded.id)
    assert [s["title"] for s in body["data"]] == ["Sulfide electrolyte", 'Dendrite "suppression", revisited']

    r = await client.get(url, params={"sort_by": "citations", "sort_order": "asc"}, headers=auth_headers())
    assert [s["citation_count"] for s in r.json()["data"]] == [4, 12, 40]

    r = await client.get(url, params={"type": "paper", "confidence": "low"}, headers=auth_headers())
    assert [s["title"] for s in r.json()["data"]] == ["Interface stability"]

    r = await client.get(url, params={"sort_by": "views"}, headers=auth_headers())
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_timeline_filters(client: httpx.AsyncClient, auth_headers, seeded: Technology) -> None:
    url = f"/api/tech-detail/{seeded.id}/timeline"
    r = await client.get(url, headers=auth_headers())
    assert [e["title"] for e in r.json()["data"]] == ["Series C", "Pilot line"]
    assert r.json()["total"] == 2

    r = await client.get(url, params={"types": "milestone,patent"}, headers=auth_headers())
    assert [e["title"] for e in r.json()["data"]] == ["Pilot line"]

    r = await client.get(url, params={"min_impact_score": 8}, headers=auth_headers())
    assert [e["title"] for e in r.json()["data"]] == ["Pilot line"]

    r = await client.get(url, params={"date_to": "2022-01-01"}, headers=auth_headers())
    assert [e["title"] for e in r.json()["data"]] == ["Series C"]


@pytest.mark.asyncio
async def test_watch_and_unwatch(client: httpx.AsyncClient, auth_headers, technology: Technology) -> None:
    url = f"/api/tech-detail/{technology.id}/watch"
    r = await client.post(url, json={"alertFrequency": "weekly"}, headers=auth_headers())
    assert r.status_code == 200
    first = r.json()["data"]
    assert first["alert_frequency"] == "weekly"

    r = await client.post(url, json={"alertFrequency": "daily"}, headers=auth_headers())
    assert r.json()["data"]["id"] == first["id"]
    assert r.json()["data"]["alert_frequency"] == "daily"

    r = await client.get(f"/api/tech-detail/{technology.id}", headers=auth_headers())
    assert r.json()["data"]["metadata"]["isWatched"] is True
    r = await client.get(f"/api/tech-detail/{technology.id}", headers=auth_headers("someone-else"))
    assert r.json()["data"]["metadata"]["isWatched"] is False

    r = await client.delete(url, headers=auth_headers())
    assert r.json() == {"message": "Watch deleted successfully"}
    r = await client.delete(url, headers=auth_headers())
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_knowledge_graph(client: httpx.AsyncClient, auth_headers, seeded: Technology) -> None:
    r = await client.get(f"/api/tech-detail/{seeded.id}/knowledge-graph", headers=auth_headers())
    graph = r.json()["data"]["graph"]
    assert graph["centerNodeId"] == "tech-1"
    assert {n["id"] for n in graph["nodes"]} == {"org-1", "tech-1"}
    assert graph["edges"] == [
        {"source": "org-1", "target": "tech-1", "type": "develops", "weight": 1.0, "label": None}
    ]
    assert "generatedAt" in r.json()["data"]


def test_center_node_id_fallbacks() -> None:
    assert center_node_id([], "tech-id") == "tech-id"
    assert center_node_id([{"id": "a", "type": "organization"}], "tech-id") == "a"


@pytest.mark.asyncio
async def test_signals(client: httpx.AsyncClient, auth_headers, seeded: Technology) -> None:
    r = await client.get(f"/api/tech-detail/{seeded.id}/signals", headers=auth_headers())
    signals = r.json()["data"]["signals"]
    assert signals["patents"]["total"] == 75
    assert signals["patents"]["growth"] == 50.0
    assert signals["papers"]["timeseries"] == []


@pytest.mark.asyncio
async def test_comments_threads_and_ownership(
    client: httpx.AsyncClient, auth_headers, technology: Technology
) -> None:
    url = f"/api/tech-detail/{technology.id}/comments"

    r = await client.post(url, json={"content": "   "}, headers=auth_headers())
    assert r.status_code == 400
    assert r.json()["error"] == "Content is required"

    r = await client.post(url, json={"content": "Pilot line looks real."}, headers=auth_headers("alice"))
    assert r.status_code == 201
    parent = r.json()["data"]
    assert parent["user_id"] == "alice"

    r = await client.post(
        url,
        json={"content": "Agreed.", "parentCommentId": parent["id"]},
        headers=auth_headers("bob"),
    )
    assert r.status_code == 201

    r = await client.post(
        url, json={"content": "x", "parentCommentId": str(uuid.uuid4())}, headers=auth_headers()
    )
    assert r.status_code == 404

    r = await client.get(url, headers=auth_headers())
    threads = r.json()["data"]
    assert len(threads) == 1
    assert [reply["content"] for reply in threads[0]["replies"]] == ["Agreed."]

    r = await client.patch(f"{url}/{parent['id']}", json={"content": "Edited"}, headers=auth_headers("bob"))
    assert r.status_code == 404
    r = await client.patch(f"{url}/{parent['id']}", json={"content": "Edited"}, headers=auth_headers("alice"))
    assert r.json()["data"]["content"] == "Edited"

    r = await client.delete(f"{url}/{parent['id']}", headers=auth_headers("bob"))
    assert r.status_code == 404
    r = await client.delete(f"{url}/{parent['id']}", headers=auth_headers("alice"))
    assert r.json() == {"message": "Comment deleted successfully"}


@pytest.mark.asyncio
async def test_export_formats(client: httpx.AsyncClient, auth_headers, seeded: Technology) -> None:
    url = f"/api/tech-detail/{seeded.id}/export"

    r = await client.post(url, json={"format": "gif"}, headers=auth_headers())
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid format"

    r = await client.post(url, json={"format": "csv", "maxSources": 2}, headers=auth_headers())
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert f"technology-{seeded.id}-sources.csv" in r.headers["content-disposition"]
    lines = r.text.splitlines()
    assert len(lines) == 3
    assert "title" in lines[0].split(",")
    assert '"Dendrite ""suppression"", revisited"' in lines[2]

    r = await client.post(
        url,
        json={"format": "json", "includeSources": True, "includeTimeline": True, "includeForecast": True},
        headers=auth_headers("exporter"),
    )
    payload = r.json()["data"]
    assert payload["metadata"]["name"] == "Solid-State Batteries"
    assert payload["generatedBy"] == "exporter"
    assert len(payload["sources"]) == 3
    assert len(payload["timeline"]) == 2
    assert payload["forecast"] is None

    r = await client.post(url, json={"format": "pdf", "includeCharts": True}, headers=auth_headers())
    ticket = r.json()["data"]
    assert ticket["format"] == "pdf"
    assert ticket["data_included"]["charts"] is True


@pytest.mark.asyncio
async def test_forecast_for_technology(
    client: httpx.AsyncClient, auth_headers, technology: Technology
) -> None:
    url = f"/api/tech-detail/{technology.id}/forecast"

    r = await client.get(url, headers=auth_headers())
    assert r.json()["data"] is None

    r = await client.post(url, json={}, headers=auth_headers())
    assert r.status_code == 404
    assert r.json()["error"] == "Model not found"

    r = await client.post(
        "/api/forecasting/models", json={"name": "Bass", "type": "diffusion", "version": "1"}
    )
    model_id = r.json()["data"]["id"]
    await client.patch(f"/api/forecasting/models/{model_id}", json={"status": "ready"})

    r = await client.post(url, json={"scenario": "optimistic"}, headers=auth_headers("planner"))
    assert r.status_code == 201
    accepted = r.json()["data"]
    assert accepted["model_id"] == model_id

    r = await client.get(f"/api/forecasting/jobs/{accepted['job_id']}")
    job = r.json()["data"]
    assert job["status"] == "completed"
    assert job["created_by"] == "planner"

    r = await client.get(url, headers=auth_headers())
    result = r.json()["data"]
    assert result["tech_id"] == str(technology.id)
    assert result["tech_name"] == "Solid-State Batteries"
    assert result["scenario"] == "optimistic"
