"""
techintel.db.repositories.base

Generic async CRUD repository.

Responsibilities:
- Fetch, filter, count, create, update and delete rows of one ORM model.
- Apply counter increments as single UPDATE statements (`col = col + n`).

Repositories flush but never commit; routers own the transaction boundary.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, func, inspect, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from techintel.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class NullValueError(ValueError):
    """
    Raised when an update would write NULL into a NOT NULL column.
    """

    def __init__(self, fields: list[str]) -> None:
        super().__init__(f"fields may not be null: {', '.join(fields)}")
        self.fields = fields


class CrudRepo(Generic[ModelT]):
    model: type[ModelT]

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, row_id: uuid.UUID) -> ModelT | None:
        return await self._session.get(self.model, row_id)

    async def find(
        self,
        *where: ColumnElement[bool],
        order_by: Iterable[Any] = (),
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[ModelT]:
        stmt = select(self.model).where(*where).order_by(*order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)
        return list((await self._session.execute(stmt)).scalars().all())

    async def find_one(self, *where: ColumnElement[bool]) -> ModelT | None:
        stmt = select(self.model).where(*where).limit(1)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def count(self, *where: ColumnElement[bool]) -> int:
        stmt = select(func.count()).select_from(self.model).where(*where)
        return int((await self._session.execute(stmt)).scalar_one())

    async def create(self, **values: Any) -> ModelT:
        row = self.model(**values)
        self._session.add(row)
        await self._session.flush()
        return row

    async def update(self, row: ModelT, values: Mapping[str, Any]) -> ModelT:
        required = self._non_nullable()
        nulls = [key for key, value in values.items() if value is None and key in required]
        if nulls:
            raise NullValueError(nulls)
        for key, value in values.items():
            setattr(row, key, value)
        await self._session.flush()
        return row

    async def delete(self, row: ModelT) -> None:
        await self._session.delete(row)
        await self._session.flush()

    def _non_nullable(self) -> frozenset[str]:
        return frozenset(
            attr.key
            for attr in inspect(self.model).column_attrs
            if not any(col.nullable for col in attr.columns)
        )

    async def increment(self, row_id: uuid.UUID, **deltas: int) -> None:
        # Evaluated in the database so concurrent requests never lose an increment.
        values = {name: getattr(self.model, name) + delta for name, delta in deltas.items()}
        stmt = (
            update(self.model)
            .where(self.model.id == row_id)  # type: ignore[attr-defined]
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        await self._session.execute(stmt)


# --- Module Notes -----------------------------------------------------------
# Domain repositories subclass `CrudRepo` and add the handful of dependent writes
# their routes need (log rows, counters, timestamp touches).
