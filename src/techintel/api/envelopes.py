"""
techintel.api.envelopes

Response envelopes and request-parsing helpers shared by all routers.

Responsibilities:
- Wrap payloads as `{"data": ...}` (plus pagination fields for paged lists).
- Provide the camelCase/snake_case tolerant base model for request bodies.
- Parse "all"-aware enum filters and comma-separated query values.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from techintel.api.errors import bad_request
from techintel.db.base import Base

EnumT = TypeVar("EnumT", bound=enum.Enum)


class ApiModel(BaseModel):
    """
    Base for request bodies: accepts `reportId` and `report_id` alike.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        protected_namespaces=(),
    )

    @model_validator(mode="after")
    def _naive_utc(self):
        # Timestamps are stored as naive UTC.
        for name, value in self.__dict__.items():
            if isinstance(value, datetime) and value.tzinfo is not None:
                self.__dict__[name] = value.astimezone(UTC).replace(tzinfo=None)
        return self

    def changes(self) -> dict[str, Any]:
        # Only fields the client actually sent, keyed by attribute (snake_case) name.
        return self.model_dump(exclude_unset=True)


def data(payload: Any, **extra: Any) -> dict[str, Any]:
    return {"data": payload, **extra}


def rows(items: Iterable[Base]) -> list[dict[str, Any]]:
    return [item.to_dict() for item in items]


def paged(items: Iterable[Base], *, total: int, page: int, page_size: int) -> dict[str, Any]:
    return data(rows(items), total=total, page=page, page_size=page_size)


def parse_enum(enum_cls: type[EnumT], raw: str | None, *, field: str) -> EnumT | None:
    """
    Map a query value onto `enum_cls`; None and "all" mean "no filter".
    """

    if raw is None or raw == "" or raw == "all":
        return None
    try:
        return enum_cls(raw)
    except ValueError as e:
        allowed = ", ".join(str(m.value) for m in enum_cls)
        raise bad_request(f"Invalid {field}", f"expected one of: {allowed}") from e


def split_csv(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]
