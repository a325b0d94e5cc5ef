"""
tests.test_services

Unit tests for the pure helpers behind the routers.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime

import pytest
from cryptography.fernet import InvalidToken

from techintel.db.models import PipelineRun, PipelineRunStatus, Recurrence, SignalDatapoint
from techintel.services.exports import export_ticket, rows_to_csv
from techintel.services.pipeline_metrics import compute_metrics, throughput_buckets
from techintel.services.schedules import ScheduleError, calculate_next_run
from techintel.services.secrets import EncryptionError, encrypt_secret, get_fernet, mask_key
from techintel.services.signals import group_signals
from techintel.settings import Settings

# Wednesday
NOW = datetime(2025, 1, 15, 10, 0, 0)


def test_mask_key() -> None:
    assert mask_key("sk-abcdefghijkl123456") == "sk-...123456"
    assert mask_key("short") == "***"
    assert mask_key("123456789") == "***"
    assert mask_key("1234567890") == "123...567890"


def test_secret_round_trip_and_prod_requires_key() -> None:
    settings = Settings(env="test")
    token = encrypt_secret(settings, "sk-live-secret")
    assert token != "sk-live-secret"
    assert get_fernet(settings).decrypt(token.encode()) == b"sk-live-secret"

    other = Settings(env="test", jwt_secret="another-secret")
    with pytest.raises(InvalidToken):
        get_fernet(other).decrypt(token.encode())

    with pytest.raises(EncryptionError):
        encrypt_secret(Settings(env="prod"), "x")


@pytest.mark.parametrize(
    ("recurrence", "schedule", "expected"),
    [
        # Later today wins regardless of recurrence.
        (Recurrence.daily, {"time": "12:30"}, datetime(2025, 1, 15, 12, 30)),
        (Recurrence.daily, {"time": "09:00"}, datetime(2025, 1, 16, 9, 0)),
        # Sunday=0, so 5 is Friday.
        (Recurrence.weekly, {"time": "08:00", "dayOfWeek": 5}, datetime(2025, 1, 17, 8, 0)),
        (Recurrence.weekly, {"time": "08:00", "dayOfWeek": 3}, datetime(2025, 1, 22, 8, 0)),
        (Recurrence.monthly, {"time": "08:00", "dayOfMonth": 31}, datetime(2025, 2, 28, 8, 0)),
        (Recurrence.quarterly, {"time": "08:00", "dayOfMonth": 1}, datetime(2025, 4, 1, 8, 0)),
    ],
)
def test_calculate_next_run(recurrence, schedule, expected) -> None:
    assert calculate_next_run(recurrence, schedule, now=NOW) == expected


def test_calculate_next_run_rejects_bad_input() -> None:
    with pytest.raises(ScheduleError):
        calculate_next_run("daily", {"time": "noon"}, now=NOW)
    with pytest.raises(ScheduleError):
        calculate_next_run("weekly", {"time": "00:00", "dayOfWeek": None}, now=NOW)
    with pytest.raises(ScheduleError):
        calculate_next_run("weekly", {"time": "00:00", "dayOfWeek": "monday"}, now=NOW)
    with pytest.raises(ScheduleError):
        calculate_next_run("weekly", {"time": "23:00", "dayOfWeek": 7}, now=NOW)
    with pytest.raises(ScheduleError):
        calculate_next_run("monthly", {"time": "00:00", "dayOfMonth": 0}, now=NOW)
    with pytest.raises(ValueError):
        calculate_next_run("hourly", {}, now=NOW)


def _run(start: datetime, *, status=PipelineRunStatus.completed, processed=0, queued=0, throughput=0.0):
    return PipelineRun(
        connector_name="c",
        status=status,
        start_time=start,
        documents_processed=processed,
        documents_queued=queued,
        throughput=throughput,
        duration=10,
    )


def test_compute_metrics() -> None:
    runs = [
        _run(datetime(2025, 1, 15, 9, 30), processed=100, throughput=4.0),
        _run(datetime(2025, 1, 15, 7, 0), status=PipelineRunStatus.failed, processed=10),
        _run(datetime(2025, 1, 15, 9, 50), status=PipelineRunStatus.running, queued=30, throughput=2.0),
        _run(datetime(2025, 1, 15, 8, 0), status=PipelineRunStatus.cancelled),
    ]
    metrics = compute_metrics(runs, now=NOW)
    assert metrics["total_runs"] == 4
    assert metrics["successful_runs"] == 1
    assert metrics["failed_runs"] == 1
    assert metrics["active_jobs"] == 1
    assert metrics["queue_depth"] == 30
    assert metrics["error_rate"] == 25
    assert metrics["average_duration"] == 10
    assert metrics["total_documents_processed"] == 110
    assert metrics["avg_throughput"] == 1.5
    assert metrics["processing_rate"] == 100


def test_compute_metrics_empty() -> None:
    metrics = compute_metrics([], now=NOW)
    assert metrics["total_runs"] == 0
    assert metrics["error_rate"] == 0
    assert metrics["avg_throughput"] == 0


def test_throughput_buckets_zero_fill() -> None:
    runs = [
        _run(datetime(2025, 1, 15, 9, 10), processed=10, throughput=2.0),
        _run(datetime(2025, 1, 15, 9, 40), processed=30, throughput=4.0),
        _run(datetime(2025, 1, 15, 7, 5), processed=5, throughput=1.0),
    ]
    points = throughput_buckets(runs, hours=4, now=NOW)
    assert [p["timestamp"] for p in points] == [
        "2025-01-15T07:00:00.000Z",
        "2025-01-15T08:00:00.000Z",
        "2025-01-15T09:00:00.000Z",
        "2025-01-15T10:00:00.000Z",
    ]
    assert points[0] == {
        "timestamp": "2025-01-15T07:00:00.000Z",
        "documentsPerSecond": 1.0,
        "bytesPerSecond": 5 * 1024,
        "activeConnectors": 1,
    }
    assert points[1]["activeConnectors"] == 0
    assert points[2]["documentsPerSecond"] == 3.0
    assert points[2]["bytesPerSecond"] == 40 * 1024


def _point(signal_type: str, day: int, value: float) -> SignalDatapoint:
    return SignalDatapoint(signal_type=signal_type, date=date(2025, 1, day), value=value, confidence=0.9)


def test_group_signals() -> None:
    groups = group_signals(
        [
            _point("patents", 1, 100),
            _point("patents", 2, 120),
            _point("papers", 1, 10),
            _point("funding", 1, 5.0),
            _point("funding", 2, 7.5),
            _point("startups", 1, 10),
            _point("unknown", 1, 1),
        ]
    )
    assert groups["patents"]["total"] == 120
    assert groups["patents"]["growth"] == 20.0
    assert groups["papers"]["citations"] == 280
    assert groups["funding"]["totalAmount"] == 7.5
    assert groups["funding"]["rounds"] == 2
    assert groups["startups"]["activeCount"] == 8
    assert groups["google_trends"] == {"timeseries": [], "currentInterest": 0}
    assert groups["patents"]["timeseries"][0] == {"date": "2025-01-01", "value": 100.0, "confidence": 0.9}


def test_rows_to_csv_quotes_and_blanks() -> None:
    csv_text = rows_to_csv(
        [
            {"title": 'A "quoted", title', "url": None, "impact_score": 8.5},
            {"title": "Plain", "url": "https://example.com", "impact_score": 1},
        ]
    )
    assert csv_text.splitlines() == [
        "title,url,impact_score",
        '"A ""quoted"", title",,8.5',
        "Plain,https://example.com,1",
    ]
    assert rows_to_csv([]) == ""


def test_export_ticket() -> None:
    tech_id = uuid.uuid4()
    ticket = export_ticket(technology_id=tech_id, fmt="pdf", included={"sources": True})
    assert ticket["message"] == "Export initiated for format: pdf"
    assert ticket["technology_id"] == str(tech_id)
    assert ticket["download_url"].endswith(".pdf")
