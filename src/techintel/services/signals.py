from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from techintel.db.models import SignalDatapoint

SIGNAL_TYPES = ("patents", "papers", "funding", "google_trends", "startups")

# Rough citations-per-paper factor used for the papers summary card.
CITATIONS_PER_PAPER = 28


def _empty_groups() -> dict[str, dict[str, Any]]:
    return {
        "patents": {"timeseries": [], "total": 0, "growth": 0.0},
        "papers": {"timeseries": [], "total": 0, "citations": 0},
        "funding": {"timeseries": [], "totalAmount": 0, "rounds": 0},
        "google_trends": {"timeseries": [], "currentInterest": 0},
        "startups": {"timeseries": [], "total": 0, "activeCount": 0},
    }


def group_signals(datapoints: Sequence[SignalDatapoint]) -> dict[str, dict[str, Any]]:
    """Group datapoints (already ordered by date) per signal type and summarize the latest value."""

    groups = _empty_groups()
    for point in datapoints:
        group = groups.get(point.signal_type)
        if group is None:
            continue
        group["timeseries"].append(
            {"date": point.date.isoformat(), "value": float(point.value), "confidence": point.confidence}
        )

    for signal_type, group in groups.items():
        series = group["timeseries"]
        if not series:
            continue
        latest = series[-1]["value"]
        previous = series[-2]["value"] if len(series) > 1 else 0

        if signal_type == "patents":
            group["total"] = latest
            group["growth"] = round((latest - previous) / previous * 100, 1) if previous > 0 else 0.0
        elif signal_type == "papers":
            group["total"] = latest
            group["citations"] = latest * CITATIONS_PER_PAPER
        elif signal_type == "funding":
            group["totalAmount"] = latest
            group["rounds"] = len(series)
        elif signal_type == "google_trends":
            group["currentInterest"] = latest
        elif signal_type == "startups":
            group["total"] = latest
            group["activeCount"] = int(latest * 0.8)

    return groups
