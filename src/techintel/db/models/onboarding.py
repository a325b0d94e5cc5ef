"""
techintel.db.models.onboarding

First-run onboarding schema.

Responsibilities:
- Track per-user wizard progress and the getting-started checklist.
- Hold the domain and connector catalogs plus each user's selections.
- Hold watchlist entries (user_id "suggestions" marks the shared suggestions).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from techintel.db.base import Base, TimestampMixin, UuidPkMixin, utcnow


class OnboardingProgress(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "onboarding_progress"

    user_id: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    current_step: Mapped[int] = mapped_column(nullable=False, default=1)
    total_steps: Mapped[int] = mapped_column(nullable=False, default=6)
    completed_steps: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)
    is_complete: Mapped[bool] = mapped_column(nullable=False, default=False)
    skipped: Mapped[bool] = mapped_column(nullable=False, default=False)


class OnboardingChecklist(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "onboarding_checklist"

    user_id: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    items: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    # 0-100
    progress: Mapped[float] = mapped_column(nullable=False, default=0.0)


class OnboardingDomain(TimestampMixin, Base):
    __tablename__ = "onboarding_domains"

    # Catalog ids are stable slugs ("dom-001").
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    category: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    icon: Mapped[str | None] = mapped_column(String(32), nullable=True)
    technology_count: Mapped[int] = mapped_column(nullable=False, default=0)


class UserDomain(UuidPkMixin, Base):
    __tablename__ = "onboarding_user_domains"

    user_id: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    domain_id: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)

    __table_args__ = (UniqueConstraint("user_id", "domain_id", name="uq_user_domains_user_domain"),)


class ConnectorPreset(TimestampMixin, Base):
    __tablename__ = "onboarding_connector_presets"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    provider: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    recommended: Mapped[bool] = mapped_column(nullable=False, default=False)
    requires_auth: Mapped[bool] = mapped_column(nullable=False, default=False)


class UserConnector(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "onboarding_user_connectors"

    user_id: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    connector_id: Mapped[str] = mapped_column(String(64), nullable=False)
    enabled: Mapped[bool] = mapped_column(nullable=False, default=True)
    # Fernet token; never returned by the API.
    encrypted_api_key: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("user_id", "connector_id", name="uq_user_connectors_user_connector"),
    )

    def to_dict(self) -> dict[str, Any]:
        row = super().to_dict()
        row.pop("encrypted_api_key", None)
        return row


class WatchlistItem(UuidPkMixin, Base):
    __tablename__ = "onboarding_watchlist"

    user_id: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    # technology | organization | keyword
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    activity_count: Mapped[int] = mapped_column(nullable=False, default=0)
    added_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, index=True)
