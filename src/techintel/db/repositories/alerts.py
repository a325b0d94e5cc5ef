from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import func, select

from techintel.db.base import utcnow
from techintel.db.models import (
    Alert,
    AlertState,
    AlertTemplate,
    NotificationPreferences,
    TriggeredEvent,
    WatchedTechnology,
)
from techintel.db.repositories.base import CrudRepo


class AlertRepo(CrudRepo[Alert]):
    model = Alert

    async def record_trigger(self, alert_id: uuid.UUID, *, at: datetime | None = None) -> None:
        # One trigger per event: bump the counter in SQL, then stamp last_triggered.
        await self.increment(alert_id, trigger_count=1)
        alert = await self.get(alert_id)
        if alert is not None:
            await self.update(alert, {"last_triggered": at or utcnow()})

    async def count_by_state(self) -> dict[AlertState, int]:
        stmt = select(Alert.state, func.count()).group_by(Alert.state)
        rows = (await self._session.execute(stmt)).all()
        return {AlertState(state): int(n) for state, n in rows}


class TriggeredEventRepo(CrudRepo[TriggeredEvent]):
    model = TriggeredEvent

    async def count_since(self, start: datetime) -> int:
        return await self.count(TriggeredEvent.triggered_at >= start)


class WatchedTechnologyRepo(CrudRepo[WatchedTechnology]):
    model = WatchedTechnology


class AlertTemplateRepo(CrudRepo[AlertTemplate]):
    model = AlertTemplate


class PreferencesRepo(CrudRepo[NotificationPreferences]):
    model = NotificationPreferences

    async def for_user(self, user_id: str) -> NotificationPreferences | None:
        return await self.find_one(NotificationPreferences.user_id == user_id)

    async def get_or_create(self, user_id: str) -> NotificationPreferences:
        prefs = await self.for_user(user_id)
        if prefs is None:
            prefs = await self.create(user_id=user_id)
        return prefs
