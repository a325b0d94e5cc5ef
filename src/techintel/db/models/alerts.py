"""
techintel.db.models.alerts

Alerting schema.

Responsibilities:
- Define alerts and the events they trigger (cascade on alert delete).
- Define watched technologies, alert templates and per-user notification preferences.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, ForeignKey, String, Text
from sqlalchemy import Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from techintel.db.base import Base, TimestampMixin, UuidPkMixin, enum_column, utcnow


class Severity(enum.StrEnum):
    critical = "critical"
    high = "high"
    medium = "medium"
    low = "low"


class AlertState(enum.StrEnum):
    active = "active"
    muted = "muted"
    paused = "paused"


class AlertFrequency(enum.StrEnum):
    realtime = "realtime"
    hourly = "hourly"
    daily = "daily"
    weekly = "weekly"


def default_dedup_rules() -> dict[str, Any]:
    return {"enabled": True, "window": 60, "field": "title"}


def default_throttle() -> dict[str, Any]:
    return {"enabled": False, "suppressionWindow": 30, "maxEventsPerWindow": 5}


class Alert(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "alerts"

    name: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    severity: Mapped[Severity] = mapped_column(
        enum_column(Severity), nullable=False, default=Severity.medium, index=True
    )
    state: Mapped[AlertState] = mapped_column(
        enum_column(AlertState), nullable=False, default=AlertState.active, index=True
    )
    trigger_type: Mapped[str] = mapped_column(String(64), nullable=False)
    conditions: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    frequency: Mapped[AlertFrequency] = mapped_column(
        enum_column(AlertFrequency), nullable=False, default=AlertFrequency.daily
    )
    delivery_channels: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    dedup_rules: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=default_dedup_rules)
    throttle: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=default_throttle)
    team_subscriptions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_by: Mapped[str] = mapped_column(String(256), nullable=False)
    last_triggered: Mapped[datetime | None] = mapped_column(nullable=True)
    trigger_count: Mapped[int] = mapped_column(nullable=False, default=0)
    estimated_noise: Mapped[int] = mapped_column(nullable=False, default=15)

    events: Mapped[list[TriggeredEvent]] = relationship(
        back_populates="alert", cascade="all, delete-orphan", passive_deletes=True
    )


class TriggeredEvent(UuidPkMixin, Base):
    __tablename__ = "triggered_events"

    alert_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("alerts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    alert_name: Mapped[str] = mapped_column(String(256), nullable=False)
    severity: Mapped[Severity] = mapped_column(enum_column(Severity), nullable=False, index=True)
    triggered_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, index=True)
    matched_documents: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    evidence_snapshot: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    actions_performed: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    # Entries look like {"channel": "email", "status": "delivered"}.
    delivery_status: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)

    alert: Mapped[Alert] = relationship(back_populates="events")


class WatchedTechnology(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "watched_technologies"

    technology_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    domain: Mapped[str] = mapped_column(String(128), nullable=False)
    added_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    last_update: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    update_count: Mapped[int] = mapped_column(nullable=False, default=0)
    alerts_enabled: Mapped[bool] = mapped_column(nullable=False, default=True)
    recent_changes: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)


class AlertTemplate(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "alert_templates"

    name: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    trigger_type: Mapped[str] = mapped_column(String(64), nullable=False)
    default_conditions: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    recommended_frequency: Mapped[AlertFrequency] = mapped_column(
        enum_column(AlertFrequency), nullable=False, default=AlertFrequency.daily
    )
    icon: Mapped[str | None] = mapped_column(String(32), nullable=True)
    popular: Mapped[bool] = mapped_column(nullable=False, default=False)


def default_quiet_hours() -> dict[str, Any]:
    return {"enabled": False, "start": "22:00", "end": "08:00", "timezone": "UTC"}


def default_severity_filters() -> dict[str, bool]:
    return {s.value: True for s in Severity}


def default_digest_mode() -> dict[str, Any]:
    return {"enabled": False, "frequency": "daily", "time": "09:00"}


class NotificationPreferences(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "notification_preferences"

    user_id: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    enable_in_app: Mapped[bool] = mapped_column(nullable=False, default=True)
    enable_email: Mapped[bool] = mapped_column(nullable=False, default=True)
    enable_slack: Mapped[bool] = mapped_column(nullable=False, default=False)
    quiet_hours: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=default_quiet_hours)
    severity_filters: Mapped[dict[str, bool]] = mapped_column(
        JSON, nullable=False, default=default_severity_filters
    )
    digest_mode: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=default_digest_mode)
