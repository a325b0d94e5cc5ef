"""
techintel.services.search

Query-side helpers for technology search.

Responsibilities:
- Expand TRL range filters ("1-3", "4-6", "7-9") into concrete levels.
- Collapse repeated history entries into a recent-searches list.
- Merge the user's matching history into catalog suggestions without duplicates.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from techintel.db.models import SearchHistory, SearchSuggestion

TRL_RANGES: dict[str, tuple[int, ...]] = {
    "1-3": (1, 2, 3),
    "4-6": (4, 5, 6),
    "7-9": (7, 8, 9),
}

SORT_KEYS = ("relevance", "date", "trl", "citations")


def trl_levels(ranges: Iterable[str]) -> list[int]:
    levels: list[int] = []
    for raw in ranges:
        for key, values in TRL_RANGES.items():
            if key in raw:
                levels.extend(v for v in values if v not in levels)
    return levels


def recent_unique(history: Sequence[SearchHistory], limit: int) -> list[dict[str, Any]]:
    # History arrives newest first; the newest run of each query wins.
    seen: dict[str, dict[str, Any]] = {}
    for entry in history:
        if entry.query not in seen:
            seen[entry.query] = {
                "query": entry.query,
                "searchMode": entry.search_mode,
                "resultCount": entry.result_count,
                "createdAt": entry.created_at.isoformat(),
            }
    return list(seen.values())[:limit]


def merge_suggestions(
    recent: Sequence[SearchHistory], catalog: Sequence[SearchSuggestion]
) -> list[dict[str, Any]]:
    merged: dict[str, dict[str, Any]] = {}
    candidates = [
        {"suggestion": entry.query, "type": "recent", "popularity": 0} for entry in recent
    ] + [
        {"suggestion": s.suggestion, "type": s.type, "popularity": s.popularity} for s in catalog
    ]
    for candidate in candidates:
        # Catalog entries replace a matching recent query but keep its position.
        merged[candidate["suggestion"].lower()] = candidate
    return list(merged.values())
