"""
techintel.services.analytics

Dashboard analytics helpers.

Responsibilities:
- Bucket technologies into the four TRL bands shown on the dashboard.
- Map month abbreviations to their calendar number for funding rows.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from typing import Any, NamedTuple


class TrlBand(NamedTuple):
    level: str
    name: str
    color: str
    low: int
    high: int


TRL_BANDS: tuple[TrlBand, ...] = (
    TrlBand("TRL 1-3", "Research", "#ef4444", 1, 3),
    TrlBand("TRL 4-6", "Development", "#f59e0b", 4, 6),
    TrlBand("TRL 7-8", "Demonstration", "#3b82f6", 7, 8),
    TrlBand("TRL 9", "Deployment", "#10b981", 9, 9),
)

MONTHS: tuple[str, ...] = tuple(calendar.month_abbr[1:])


def band_for(trl: int) -> TrlBand:
    clamped = min(max(int(trl), 1), 9)
    return next(band for band in TRL_BANDS if band.low <= clamped <= band.high)


def trl_distribution(levels: Iterable[int]) -> list[dict[str, Any]]:
    """
    Count technologies per TRL band; percentages are rounded to two places and are all 0 when empty.
    """

    counts = {band.level: 0 for band in TRL_BANDS}
    for trl in levels:
        counts[band_for(trl).level] += 1
    total = sum(counts.values())
    return [
        {
            "trl_level": band.level,
            "name": band.name,
            "color": band.color,
            "value": counts[band.level],
            "percentage": round(counts[band.level] / total * 100, 2) if total else 0.0,
        }
        for band in TRL_BANDS
    ]


def month_number(month: str) -> int:
    try:
        return MONTHS.index(month.strip()[:3].title()) + 1
    except ValueError:
        raise ValueError(f"unknown month: {month!r}") from None
