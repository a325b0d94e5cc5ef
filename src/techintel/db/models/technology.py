"""
techintel.db.models.technology

Technology-detail schema.

Responsibilities:
- Define technologies with their TRL history, sources, timeline and relationships.
- Define per-technology knowledge-graph nodes/edges, signal datapoints and comments.
- Define user watches (one row per user + technology).
"""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Any

from sqlalchemy import JSON, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy import Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column

from techintel.db.base import Base, TimestampMixin, UuidPkMixin, utcnow


def _technology_fk() -> Any:
    return mapped_column(
        SAUuid(as_uuid=True), ForeignKey("technologies.id", ondelete="CASCADE"), nullable=False, index=True
    )


class Technology(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "technologies"

    name: Mapped[str] = mapped_column(String(256), nullable=False)
    canonical_summary: Mapped[str] = mapped_column(Text, nullable=False, default="")
    domains: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    current_trl: Mapped[int] = mapped_column(nullable=False, default=1)
    # 0-1
    confidence: Mapped[float] = mapped_column(nullable=False, default=0.0)


class TrlHistory(UuidPkMixin, Base):
    __tablename__ = "trl_history"

    technology_id: Mapped[uuid.UUID] = _technology_fk()
    trl: Mapped[int] = mapped_column(nullable=False)
    date: Mapped[dt.date] = mapped_column(nullable=False)
    confidence: Mapped[float] = mapped_column(nullable=False, default=0.0)
    evidence_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    reasoning: Mapped[str | None] = mapped_column(Text, nullable=True)
    key_milestones: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)


class TechnologyRelationship(UuidPkMixin, Base):
    __tablename__ = "technology_relationships"

    source_technology_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("technologies.id", ondelete="CASCADE"), nullable=False, index=True
    )
    target_technology_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("technologies.id", ondelete="CASCADE"), nullable=False
    )
    relationship_type: Mapped[str] = mapped_column(String(64), nullable=False)
    strength: Mapped[float] = mapped_column(nullable=False, default=0.5)


class TechnologySource(UuidPkMixin, Base):
    __tablename__ = "technology_sources"

    technology_id: Mapped[uuid.UUID] = _technology_fk()
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str | None] = mapped_column(Text, nullable=True)
    date: Mapped[dt.date] = mapped_column(nullable=False)
    # high | medium | low
    confidence: Mapped[str] = mapped_column(String(16), nullable=False, default="medium")
    impact_score: Mapped[float] = mapped_column(nullable=False, default=0.0)
    citation_count: Mapped[int] = mapped_column(nullable=False, default=0)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(nullable=False, default=utcnow)


class TimelineEvent(UuidPkMixin, Base):
    __tablename__ = "timeline_events"

    technology_id: Mapped[uuid.UUID] = _technology_fk()
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    date: Mapped[dt.date] = mapped_column(nullable=False)
    impact_score: Mapped[float] = mapped_column(nullable=False, default=0.0)
    source_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[dt.datetime] = mapped_column(nullable=False, default=utcnow)


class UserWatch(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "user_watches"

    user_id: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    technology_id: Mapped[uuid.UUID] = _technology_fk()
    # none | daily | weekly | realtime
    alert_frequency: Mapped[str] = mapped_column(String(16), nullable=False, default="none")

    __table_args__ = (UniqueConstraint("user_id", "technology_id", name="uq_user_watches_user_tech"),)


class KgNode(UuidPkMixin, Base):
    __tablename__ = "kg_nodes"

    technology_id: Mapped[uuid.UUID] = _technology_fk()
    node_id: Mapped[str] = mapped_column(String(128), nullable=False)
    node_type: Mapped[str] = mapped_column(String(32), nullable=False)
    label: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    size: Mapped[float | None] = mapped_column(nullable=True)
    color: Mapped[str | None] = mapped_column(String(16), nullable=True)
    meta: Mapped[dict[str, Any]] = mapped_column("metadata", JSON, nullable=False, default=dict)


class KgEdge(UuidPkMixin, Base):
    __tablename__ = "kg_edges"

    technology_id: Mapped[uuid.UUID] = _technology_fk()
    source_node_id: Mapped[str] = mapped_column(String(128), nullable=False)
    target_node_id: Mapped[str] = mapped_column(String(128), nullable=False)
    edge_type: Mapped[str] = mapped_column(String(32), nullable=False)
    weight: Mapped[float] = mapped_column(nullable=False, default=1.0)
    label: Mapped[str | None] = mapped_column(String(256), nullable=True)


class SignalDatapoint(UuidPkMixin, Base):
    __tablename__ = "signal_datapoints"

    technology_id: Mapped[uuid.UUID] = _technology_fk()
    # patents | papers | funding | google_trends | startups
    signal_type: Mapped[str] = mapped_column(String(32), nullable=False)
    date: Mapped[dt.date] = mapped_column(nullable=False)
    value: Mapped[float] = mapped_column(nullable=False)
    confidence: Mapped[float | None] = mapped_column(nullable=True)

    __table_args__ = (Index("ix_signal_datapoints_tech_date", "technology_id", "date"),)


class TechnologyComment(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "technology_comments"

    technology_id: Mapped[uuid.UUID] = _technology_fk()
    user_id: Mapped[str] = mapped_column(String(256), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    parent_comment_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True),
        ForeignKey("technology_comments.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    attached_source_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    is_pinned: Mapped[bool] = mapped_column(nullable=False, default=False)
