"""
techintel.db.models.dashboard

Dashboard home schema.

Responsibilities:
- Define the activity feed and headline KPI rows.
- Define chart series (patent filings, funding, TRL distribution) and top signals.
"""

from __future__ import annotations

import datetime as dt
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from techintel.db.base import Base, TimestampMixin, UuidPkMixin, utcnow


class ActivityFeedItem(UuidPkMixin, Base):
    __tablename__ = "activity_feed"

    # signal | trl_change | alert | report | forecast
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    tech: Mapped[str | None] = mapped_column(String(256), nullable=True)
    link: Mapped[str | None] = mapped_column(Text, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, index=True)


class DashboardKpi(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "dashboard_kpis"

    metric_key: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    label: Mapped[str] = mapped_column(String(128), nullable=False)
    value: Mapped[float] = mapped_column(nullable=False, default=0.0)
    change_value: Mapped[float] = mapped_column(nullable=False, default=0.0)
    change_label: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    icon: Mapped[str | None] = mapped_column(String(32), nullable=True)
    # up | down | flat
    trend: Mapped[str] = mapped_column(String(8), nullable=False, default="flat")


class PatentAnalytics(UuidPkMixin, Base):
    __tablename__ = "patent_analytics"

    date: Mapped[dt.date] = mapped_column(nullable=False, unique=True)
    filings: Mapped[int] = mapped_column(nullable=False, default=0)
    citations: Mapped[int] = mapped_column(nullable=False, default=0)
    week_number: Mapped[int] = mapped_column(nullable=False)
    year: Mapped[int] = mapped_column(nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)


class FundingAnalytics(UuidPkMixin, Base):
    __tablename__ = "funding_analytics"

    # "Jan".."Dec"; month_number keeps ordering chronological.
    month: Mapped[str] = mapped_column(String(3), nullable=False)
    month_number: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(nullable=False)
    amount: Mapped[float] = mapped_column(nullable=False, default=0.0)
    deal_count: Mapped[int] = mapped_column(nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)

    __table_args__ = (UniqueConstraint("month", "year", name="uq_funding_analytics_month_year"),)


class TrlDistribution(UuidPkMixin, Base):
    __tablename__ = "trl_distribution"

    # "TRL 1-3" | "TRL 4-6" | "TRL 7-8" | "TRL 9"
    trl_level: Mapped[str] = mapped_column(String(16), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    value: Mapped[int] = mapped_column(nullable=False, default=0)
    color: Mapped[str] = mapped_column(String(16), nullable=False)
    percentage: Mapped[float] = mapped_column(nullable=False, default=0.0)


class DashboardSignal(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "signals"

    # breakthrough | funding | patent | publication
    type: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    tech: Mapped[str] = mapped_column(String(256), nullable=False)
    # high | medium | low
    importance: Mapped[str] = mapped_column(String(8), nullable=False, default="medium")
    date: Mapped[dt.date] = mapped_column(nullable=False, index=True)
    value: Mapped[str | None] = mapped_column(String(256), nullable=True)
    # `metadata` is reserved on declarative classes.
    meta: Mapped[dict[str, Any]] = mapped_column("metadata", JSON, nullable=False, default=dict)
