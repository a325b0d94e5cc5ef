"""
techintel.db.repositories.technology

Repositories for technology-detail tables.

Responsibilities:
- Fetch technologies with their TRL history, relationship and source counts.
- Upsert/remove user watches.
- Load comment threads (top-level comments with their replies).
"""

from __future__ import annotations

import uuid

from techintel.db.models import (
    KgEdge,
    KgNode,
    SignalDatapoint,
    Technology,
    TechnologyComment,
    TechnologyRelationship,
    TechnologySource,
    TimelineEvent,
    TrlHistory,
    UserWatch,
)
from techintel.db.repositories.base import CrudRepo


class TechnologyRepo(CrudRepo[Technology]):
    model = Technology

    async def related_count(self, technology_id: uuid.UUID) -> int:
        return await RelationshipRepo(self._session).count(
            TechnologyRelationship.source_technology_id == technology_id
        )


class TrlHistoryRepo(CrudRepo[TrlHistory]):
    model = TrlHistory

    async def for_technology(self, technology_id: uuid.UUID) -> list[TrlHistory]:
        return await self.find(TrlHistory.technology_id == technology_id, order_by=[TrlHistory.date])


class RelationshipRepo(CrudRepo[TechnologyRelationship]):
    model = TechnologyRelationship


class SourceRepo(CrudRepo[TechnologySource]):
    model = TechnologySource


class TimelineRepo(CrudRepo[TimelineEvent]):
    model = TimelineEvent


class WatchRepo(CrudRepo[UserWatch]):
    model = UserWatch

    async def for_user(self, user_id: str, technology_id: uuid.UUID) -> UserWatch | None:
        return await self.find_one(UserWatch.user_id == user_id, UserWatch.technology_id == technology_id)

    async def upsert(self, *, user_id: str, technology_id: uuid.UUID, alert_frequency: str) -> UserWatch:
        existing = await self.for_user(user_id, technology_id)
        if existing is not None:
            return await self.update(existing, {"alert_frequency": alert_frequency})
        return await self.create(
            user_id=user_id, technology_id=technology_id, alert_frequency=alert_frequency
        )


class KgNodeRepo(CrudRepo[KgNode]):
    model = KgNode


class KgEdgeRepo(CrudRepo[KgEdge]):
    model = KgEdge


class SignalRepo(CrudRepo[SignalDatapoint]):
    model = SignalDatapoint

    async def for_technology(self, technology_id: uuid.UUID) -> list[SignalDatapoint]:
        return await self.find(
            SignalDatapoint.technology_id == technology_id, order_by=[SignalDatapoint.date]
        )


class CommentRepo(CrudRepo[TechnologyComment]):
    model = TechnologyComment

    async def threads(
        self, technology_id: uuid.UUID
    ) -> list[tuple[TechnologyComment, list[TechnologyComment]]]:
        # Top-level comments newest first; replies oldest first under their parent.
        top_level = await self.find(
            TechnologyComment.technology_id == technology_id,
            TechnologyComment.parent_comment_id.is_(None),
            order_by=[TechnologyComment.created_at.desc()],
        )
        if not top_level:
            return []
        replies = await self.find(
            TechnologyComment.parent_comment_id.in_([c.id for c in top_level]),
            order_by=[TechnologyComment.created_at],
        )
        by_parent: dict[uuid.UUID, list[TechnologyComment]] = {}
        for reply in replies:
            by_parent.setdefault(reply.parent_comment_id, []).append(reply)  # type: ignore[arg-type]
        return [(c, by_parent.get(c.id, [])) for c in top_level]

    async def owned(self, comment_id: uuid.UUID, user_id: str) -> TechnologyComment | None:
        return await self.find_one(TechnologyComment.id == comment_id, TechnologyComment.user_id == user_id)
