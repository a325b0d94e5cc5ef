from __future__ import annotations

from datetime import date

import httpx
import pytest
import pytest_asyncio

from techintel.db.models import SearchHistory, SearchSuggestion, Technology, TechnologySource
from techintel.services.search import merge_suggestions, trl_levels


@pytest_asyncio.fixture
async def corpus(session_factory) -> None:
    async with session_factory() as session:
        battery = Technology(name="Solid-State Batteries", domains=["energy", "materials"], current_trl=5)
        fusion = Technology(name="Compact Fusion", domains=["energy"], current_trl=3)
        qubits = Technology(name="Spin Qubits", domains=["quantum"], current_trl=4)
        session.add_all([battery, fusion, qubits])
        await session.flush()
        session.add_all(
            [
                TechnologySource(
                    technology_id=battery.id, type="patent", title="Sulfide electrolyte battery cell",
                    date=date(2024, 3, 1), impact_score=9.0, citation_count=4,
                ),
                TechnologySource(
                    technology_id=battery.id, type="paper", title="Dendrite growth in battery anodes",
                    date=date(2023, 1, 1), impact_score=5.0, citation_count=40,
                ),
                TechnologySource(
                    technology_id=fusion.id, type="paper", title="Tokamak magnet review",
                    summary="Implications for grid battery storage", date=date(2024, 6, 1),
                    impact_score=7.0, citation_count=12,
                ),
                TechnologySource(
                    technology_id=qubits.id, type="paper", title="Silicon spin qubit fidelity",
                    date=date(2024, 1, 1), impact_score=8.0,
                ),
            ]
        )
        session.add_all(
            [
                SearchSuggestion(suggestion="battery recycling", type="trending", popularity=50),
                SearchSuggestion(suggestion="quantum sensing", type="trending", popularity=80),
                SearchSuggestion(suggestion="Battery Storage", type="user_generated", popularity=3),
            ]
        )
        await session.commit()


@pytest.mark.asyncio
async def test_search_requires_token(client: httpx.AsyncClient) -> None:
    r = await client.post("/api/search", json={"query": "battery"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_keyword_search_filters_sort_and_paging(client: httpx.AsyncClient, auth_headers, corpus) -> None:
    headers = auth_headers()

    r = await client.post("/api/search", json={"query": "  "}, headers=headers)
    assert r.status_code == 400
    assert r.json()["error"] == "Search query is required"

    r = await client.post("/api/search", json={"query": "battery"}, headers=headers)
    body = r.json()
    assert body["total"] == 3
    # Relevance ranks by impact score.
    assert [hit["title"] for hit in body["data"]] == [
        "Sulfide electrolyte battery cell",
        "Tokamak magnet review",
        "Dendrite growth in battery anodes",
    ]
    assert body["data"][0]["technology"]["name"] == "Solid-State Batteries"
    assert body["total_pages"] == 1
    assert body["has_more"] is False

    r = await client.post("/api/search", json={"query": "battery", "sortBy": "citations"}, headers=headers)
    assert r.json()["data"][0]["citation_count"] == 40

    r = await client.post(
        "/api/search",
        json={"query": "battery", "filters": {"trl": ["1-3"]}},
        headers=headers,
    )
    assert [hit["title"] for hit in r.json()["data"]] == ["Tokamak magnet review"]

    r = await client.post(
        "/api/search",
        json={"query": "battery", "filters": {"domain": ["materials"], "sourceType": ["paper"]}},
        headers=headers,
    )
    assert [hit["title"] for hit in r.json()["data"]] == ["Dendrite growth in battery anodes"]

    r = await client.post(
        "/api/search",
        json={"query": "battery", "filters": {"dateRange": {"from": "2024-01-01"}}, "size": 1, "page": 2},
        headers=headers,
    )
    body = r.json()
    assert body["total"] == 2
    assert [hit["title"] for hit in body["data"]] == ["Tokamak magnet review"]
    assert body["total_pages"] == 2
    assert body["has_more"] is False


@pytest.mark.asyncio
async def test_history_recent_and_clear(client: httpx.AsyncClient, auth_headers, corpus) -> None:
    headers = auth_headers()
    for query in ["battery", "qubit", "battery"]:
        await client.post("/api/search", json={"query": query, "semantic": False}, headers=headers)
    await client.post("/api/search", json={"query": "fusion"}, headers=auth_headers("someone-else"))

    r = await client.get("/api/search/history", params={"limit": 2}, headers=headers)
    body = r.json()
    assert body["total"] == 3
    assert len(body["data"]) == 2
    assert body["data"][0]["search_mode"] == "keyword"
    assert body["data"][0]["result_count"] == 3

    r = await client.get("/api/search/recent", headers=headers)
    assert [entry["query"] for entry in r.json()["data"]] == ["battery", "qubit"]

    one = body["data"][0]["id"]
    r = await client.delete("/api/search/history", params={"id": one}, headers=headers)
    assert r.json() == {"message": "Search deleted successfully"}

    r = await client.delete("/api/search/history", params={"id": one}, headers=headers)
    assert r.status_code == 404

    r = await client.delete("/api/search/history", headers=headers)
    assert r.json() == {"message": "Search history cleared successfully"}
    r = await client.get("/api/search/history", headers=headers)
    assert r.json()["total"] == 0

    # Another user's history is untouched.
    r = await client.get("/api/search/history", headers=auth_headers("someone-else"))
    assert r.json()["total"] == 1


@pytest.mark.asyncio
async def test_saved_searches(client: httpx.AsyncClient, auth_headers) -> None:
    headers = auth_headers()
    r = await client.post("/api/search/saved", json={"name": "Batteries"}, headers=headers)
    assert r.status_code == 400

    r = await client.post("/api/search/saved", json={"name": "Batteries", "query": "battery"}, headers=headers)
    assert r.status_code == 201
    saved = r.json()["data"]
    assert saved["search_mode"] == "semantic"
    assert saved["alert_frequency"] == "none"
    assert saved["is_active"] is True

    r = await client.patch(
        f"/api/search/saved/{saved['id']}", json={"alertFrequency": "weekly"}, headers=headers
    )
    assert r.json()["data"]["alert_frequency"] == "weekly"
    assert r.json()["data"]["name"] == "Batteries"

    r = await client.patch(
        f"/api/search/saved/{saved['id']}", json={"isActive": False}, headers=auth_headers("intruder")
    )
    assert r.status_code == 404

    r = await client.get("/api/search/saved", headers=headers)
    assert r.json()["total"] == 1

    r = await client.delete(f"/api/search/saved/{saved['id']}", headers=headers)
    assert r.status_code == 200
    r = await client.get("/api/search/saved", headers=headers)
    assert r.json()["data"] == []


@pytest.mark.asyncio
async def test_suggestions(client: httpx.AsyncClient, auth_headers, corpus, session_factory) -> None:
    headers = auth_headers()
    async with session_factory() as session:
        session.add(SearchHistory(user_id="analyst-1", query="battery storage", result_count=1))
        await session.commit()

    r = await client.get("/api/search/suggestions", params={"q": "b"}, headers=headers)
    assert r.json()["type"] == "trending"
    assert [s["suggestion"] for s in r.json()["data"]] == ["quantum sensing", "battery recycling"]

    r = await client.get("/api/search/suggestions", params={"q": "batt"}, headers=headers)
    suggestions = r.json()["data"]
    assert [s["suggestion"].lower() for s in suggestions] == ["battery storage", "battery recycling"]
    assert suggestions[0]["type"] == "user_generated"

    r = await client.post("/api/search/suggestions", json={"suggestion": "quantum sensing"}, headers=headers)
    assert r.json()["data"]["popularity"] == 81

    r = await client.post("/api/search/suggestions", json={"suggestion": "perovskite"}, headers=headers)
    assert r.json()["data"]["type"] == "user_generated"
    assert r.json()["data"]["popularity"] == 1


def test_trl_levels() -> None:
    assert trl_levels(["TRL 1-3", "7-9"]) == [1, 2, 3, 7, 8, 9]
    assert trl_levels(["1-3", "1-3"]) == [1, 2, 3]
    assert trl_levels(["unknown"]) == []


def test_merge_suggestions_dedupes_case_insensitively() -> None:
    recent = [SearchHistory(user_id="u", query="Fusion power")]
    catalog = [SearchSuggestion(suggestion="fusion power", type="trending", popularity=9)]
    merged = merge_suggestions(recent, catalog)
    assert merged == [{"suggestion": "fusion power", "type": "trending", "popularity": 9}]
