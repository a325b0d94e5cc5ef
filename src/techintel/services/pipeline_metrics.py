"""
techintel.services.pipeline_metrics

Aggregations over pipeline runs for the ingestion dashboard.

Responsibilities:
- Summarize runs into pipeline metrics (success/failure counts, averages, queue depth).
- Bucket runs by hour for the throughput chart, zero-filling empty hours.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Any

from techintel.db.models import PipelineRun, PipelineRunStatus


def compute_metrics(runs: Sequence[PipelineRun], *, now: datetime) -> dict[str, Any]:
    total = len(runs)
    divisor = total or 1
    failed = sum(1 for r in runs if r.status == PipelineRunStatus.failed)
    running = [r for r in runs if r.status == PipelineRunStatus.running]
    hour_ago = now - timedelta(hours=1)

    return {
        "total_runs": total,
        "successful_runs": sum(1 for r in runs if r.status == PipelineRunStatus.completed),
        "failed_runs": failed,
        "average_duration": sum(r.duration or 0 for r in runs) / divisor,
        "total_documents_processed": sum(r.documents_processed for r in runs),
        "avg_throughput": sum(r.throughput for r in runs) / divisor,
        "active_jobs": len(running),
        "error_rate": failed / divisor * 100,
        "queue_depth": sum(r.documents_queued for r in running),
        "processing_rate": sum(r.documents_processed for r in runs if r.start_time >= hour_ago),
    }


def hour_key(ts: datetime) -> str:
    return ts.strftime("%Y-%m-%dT%H:00:00.000Z")


def throughput_buckets(
    runs: Sequence[PipelineRun], *, hours: int, now: datetime
) -> list[dict[str, Any]]:
    """
    One point per hour for the last `hours` hours, oldest first.

    Each point carries the mean run throughput in that hour, an estimated byte rate
    (1 KiB per processed document) and the number of runs that started in it.
    """

    grouped: dict[str, dict[str, float]] = {}
    for run in runs:
        bucket = grouped.setdefault(
            hour_key(run.start_time), {"documents": 0, "throughput": 0.0, "count": 0}
        )
        bucket["documents"] += run.documents_processed
        bucket["throughput"] += run.throughput
        bucket["count"] += 1

    points: list[dict[str, Any]] = []
    for i in range(hours - 1, -1, -1):
        key = hour_key(now - timedelta(hours=i))
        bucket = grouped.get(key)
        if bucket is None:
            points.append(
                {"timestamp": key, "documentsPerSecond": 0, "bytesPerSecond": 0, "activeConnectors": 0}
            )
            continue
        points.append(
            {
                "timestamp": key,
                "documentsPerSecond": bucket["throughput"] / bucket["count"],
                "bytesPerSecond": int(bucket["documents"]) * 1024,
                "activeConnectors": int(bucket["count"]),
            }
        )
    return points


# --- Module Notes -----------------------------------------------------------
# Result sets here are small (runs started within the window); aggregation stays
# in Python to keep the SQL portable between SQLite and Postgres.
