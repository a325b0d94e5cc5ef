"""
techintel.db.models.search

Search history, saved searches and query suggestions.

Responsibilities:
- Record every executed search per user with its result count.
- Store named saved searches with their filters and alert cadence.
- Store the suggestion vocabulary and how often each entry was used.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from techintel.db.base import Base, TimestampMixin, UuidPkMixin, utcnow


class SearchHistory(UuidPkMixin, Base):
    __tablename__ = "search_history"

    user_id: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    query: Mapped[str] = mapped_column(Text, nullable=False)
    # semantic | keyword
    search_mode: Mapped[str] = mapped_column(String(16), nullable=False, default="semantic")
    filters: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    result_count: Mapped[int] = mapped_column(nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, index=True)


class SavedSearch(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "saved_searches"

    user_id: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    query: Mapped[str] = mapped_column(Text, nullable=False)
    search_mode: Mapped[str] = mapped_column(String(16), nullable=False, default="semantic")
    filters: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    # none | daily | weekly
    alert_frequency: Mapped[str] = mapped_column(String(16), nullable=False, default="none")
    is_active: Mapped[bool] = mapped_column(nullable=False, default=True)
    last_run_at: Mapped[datetime | None] = mapped_column(nullable=True)


class SearchSuggestion(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "search_suggestions"

    suggestion: Mapped[str] = mapped_column(String(512), nullable=False, unique=True)
    # trending | user_generated
    type: Mapped[str] = mapped_column(String(32), nullable=False, default="trending", index=True)
    popularity: Mapped[int] = mapped_column(nullable=False, default=0)
