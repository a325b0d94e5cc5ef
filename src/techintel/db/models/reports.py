"""
techintel.db.models.reports

Report builder schema.

Responsibilities:
- Define report definitions and their generated versions (cascade on report delete).
- Define report schedules and the template gallery.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, ForeignKey, Index, String, Text
from sqlalchemy import Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from techintel.db.base import Base, TimestampMixin, UuidPkMixin, enum_column, utcnow


class ReportStatus(enum.StrEnum):
    draft = "draft"
    published = "published"
    archived = "archived"


class ExportFormat(enum.StrEnum):
    pdf = "pdf"
    pptx = "pptx"
    docx = "docx"
    xlsx = "xlsx"
    csv = "csv"
    html = "html"


class GenerationStatus(enum.StrEnum):
    generating = "generating"
    completed = "completed"
    failed = "failed"


class Recurrence(enum.StrEnum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    quarterly = "quarterly"


def default_layout() -> dict[str, Any]:
    return {"columns": 12, "rows": 12}


def default_styling() -> dict[str, Any]:
    return {"theme": "light", "primaryColor": "#3b82f6"}


class Report(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "reports"

    name: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    template_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    widgets: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    layout: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=default_layout)
    filters: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    styling: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=default_styling)
    created_by: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    status: Mapped[ReportStatus] = mapped_column(
        enum_column(ReportStatus), nullable=False, default=ReportStatus.draft
    )
    last_generated: Mapped[datetime | None] = mapped_column(nullable=True)

    generated: Mapped[list[GeneratedReport]] = relationship(
        back_populates="report", cascade="all, delete-orphan", passive_deletes=True
    )


class GeneratedReport(UuidPkMixin, Base):
    __tablename__ = "generated_reports"

    report_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("reports.id", ondelete="CASCADE"), nullable=False, index=True
    )
    report_name: Mapped[str] = mapped_column(String(256), nullable=False)
    version: Mapped[int] = mapped_column(nullable=False)
    format: Mapped[ExportFormat] = mapped_column(enum_column(ExportFormat), nullable=False)
    status: Mapped[GenerationStatus] = mapped_column(
        enum_column(GenerationStatus), nullable=False, default=GenerationStatus.generating
    )
    file_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Bytes.
    file_size: Mapped[int] = mapped_column(nullable=False, default=0)
    generated_by: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    generated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    download_count: Mapped[int] = mapped_column(nullable=False, default=0)
    comments: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    # `metadata` is reserved on declarative classes; the column keeps the wire name.
    meta: Mapped[dict[str, Any]] = mapped_column("metadata", JSON, nullable=False, default=dict)

    report: Mapped[Report] = relationship(back_populates="generated")

    __table_args__ = (Index("ix_generated_reports_report_version", "report_id", "version"),)


class ScheduledReport(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "scheduled_reports"

    report_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("reports.id", ondelete="CASCADE"), nullable=False
    )
    report_name: Mapped[str] = mapped_column(String(256), nullable=False)
    enabled: Mapped[bool] = mapped_column(nullable=False, default=True)
    recurrence: Mapped[Recurrence] = mapped_column(enum_column(Recurrence), nullable=False)
    # {"time": "HH:MM", "dayOfWeek": 0-6 (Sunday=0), "dayOfMonth": 1-31}
    schedule: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    recipients: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    delivery_channels: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    export_format: Mapped[ExportFormat] = mapped_column(
        enum_column(ExportFormat), nullable=False, default=ExportFormat.pdf
    )
    next_run: Mapped[datetime] = mapped_column(nullable=False, index=True)
    last_run: Mapped[datetime | None] = mapped_column(nullable=True)
    created_by: Mapped[str] = mapped_column(String(256), nullable=False, index=True)


class ReportTemplate(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "report_templates"

    name: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    thumbnail: Mapped[str | None] = mapped_column(Text, nullable=True)
    widgets: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    category: Mapped[str] = mapped_column(String(64), nullable=False, default="custom", index=True)
    usage_count: Mapped[int] = mapped_column(nullable=False, default=0)
