"""
techintel.db.base

SQLAlchemy declarative base and shared column helpers.

Responsibilities:
- Provide a shared DeclarativeBase for all ORM models.
- Provide id/timestamp mixins and enum column helpers used by every table.
- Render rows as plain dicts keyed by column name (the API's row shape).
"""

from __future__ import annotations

import enum
import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Enum, inspect
from sqlalchemy import Uuid as SAUuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    # Persist naive UTC timestamps; SQLite has no tz-aware column type.
    return datetime.now(tz=UTC).replace(tzinfo=None)


def enum_column(enum_cls: type[enum.Enum]) -> Enum:
    # Store enum *values* (the lowercase strings clients send) as VARCHAR + CHECK.
    return Enum(
        enum_cls,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        validate_strings=True,
        length=32,
    )


class Base(DeclarativeBase):
    def to_dict(self) -> dict[str, Any]:
        # Keyed by DB column name so attributes renamed to dodge `Base.metadata` keep their wire name.
        mapper = inspect(type(self))
        return {attr.columns[0].name: getattr(self, attr.key) for attr in mapper.column_attrs}


class UuidPkMixin:
    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, onupdate=utcnow)


# --- Module Notes -----------------------------------------------------------
# All ORM models inherit from `Base` so Alembic and metadata discovery work; the
# `techintel.db.models` package imports every table module for that reason.
