"""
techintel.db.repositories.onboarding

Repositories for onboarding tables.

Responsibilities:
- Get-or-create per-user progress and checklist rows.
- Replace a user's domain selection in one transaction.
- Upsert per-user connector settings and seed the shared catalogs.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from techintel.db.models import (
    ConnectorPreset,
    OnboardingChecklist,
    OnboardingDomain,
    OnboardingProgress,
    UserConnector,
    UserDomain,
    WatchlistItem,
)
from techintel.db.repositories.base import CrudRepo
from techintel.services.onboarding import (
    SEED_CONNECTOR_PRESETS,
    SEED_DOMAINS,
    SEED_WATCHLIST_SUGGESTIONS,
    SUGGESTIONS_USER,
    TOTAL_STEPS,
    default_checklist,
)


class ProgressRepo(CrudRepo[OnboardingProgress]):
    model = OnboardingProgress

    async def get_or_create(self, user_id: str) -> OnboardingProgress:
        progress = await self.find_one(OnboardingProgress.user_id == user_id)
        if progress is None:
            progress = await self.create(user_id=user_id, total_steps=TOTAL_STEPS, completed_steps=[])
        return progress


class ChecklistRepo(CrudRepo[OnboardingChecklist]):
    model = OnboardingChecklist

    async def get_or_create(self, user_id: str) -> OnboardingChecklist:
        checklist = await self.find_one(OnboardingChecklist.user_id == user_id)
        if checklist is None:
            checklist = await self.create(user_id=user_id, items=default_checklist(), progress=0.0)
        return checklist


class DomainRepo(CrudRepo[OnboardingDomain]):
    model = OnboardingDomain

    async def selected_ids(self, user_id: str) -> set[str]:
        stmt = select(UserDomain.domain_id).where(UserDomain.user_id == user_id)
        return set((await self._session.execute(stmt)).scalars().all())

    async def replace_selection(self, user_id: str, domain_ids: Sequence[str]) -> int:
        await self._session.execute(delete(UserDomain).where(UserDomain.user_id == user_id))
        unique = list(dict.fromkeys(domain_ids))
        self._session.add_all(UserDomain(user_id=user_id, domain_id=d) for d in unique)
        await self._session.flush()
        return len(unique)


class ConnectorPresetRepo(CrudRepo[ConnectorPreset]):
    model = ConnectorPreset


class UserConnectorRepo(CrudRepo[UserConnector]):
    model = UserConnector

    async def for_user(self, user_id: str) -> dict[str, UserConnector]:
        rows = await self.find(UserConnector.user_id == user_id)
        return {row.connector_id: row for row in rows}

    async def upsert(self, user_id: str, connector_id: str, **values: Any) -> tuple[UserConnector, bool]:
        existing = await self.find_one(
            UserConnector.user_id == user_id, UserConnector.connector_id == connector_id
        )
        if existing is not None:
            return await self.update(existing, values), False
        return await self.create(user_id=user_id, connector_id=connector_id, **values), True


class WatchlistRepo(CrudRepo[WatchlistItem]):
    model = WatchlistItem

    async def for_user(self, user_id: str) -> list[WatchlistItem]:
        return await self.find(WatchlistItem.user_id == user_id, order_by=[WatchlistItem.added_at.desc()])


async def seed_catalogs(session: AsyncSession) -> dict[str, int] | None:
    """
    Insert the domain, connector and watchlist-suggestion catalogs; None when already seeded.
    """

    domains = DomainRepo(session)
    if await domains.count() > 0:
        return None
    session.add_all(OnboardingDomain(**row) for row in SEED_DOMAINS)
    session.add_all(ConnectorPreset(**row) for row in SEED_CONNECTOR_PRESETS)
    session.add_all(WatchlistItem(user_id=SUGGESTIONS_USER, **row) for row in SEED_WATCHLIST_SUGGESTIONS)
    await session.flush()
    return {
        "domainsCreated": len(SEED_DOMAINS),
        "connectorsCreated": len(SEED_CONNECTOR_PRESETS),
        "watchlistSuggestionsCreated": len(SEED_WATCHLIST_SUGGESTIONS),
    }
