"""
techintel.api.routers.tech_detail.comments

Technology discussion endpoints.

Responsibilities:
- List top-level comments with their replies.
- Create comments and replies; only the author may edit or delete a comment.
"""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session
from techintel.api.envelopes import ApiModel, data
from techintel.api.errors import bad_request, db_errors, not_found
from techintel.api.routers.tech_detail.deps import technology_dep
from techintel.auth.deps import get_principal
from techintel.auth.models import Principal
from techintel.db.models import Technology, TechnologyComment
from techintel.db.repositories.technology import CommentRepo

router = APIRouter()


class CommentCreate(ApiModel):
    content: str | None = None
    parent_comment_id: uuid.UUID | None = None
    attached_source_ids: list[str] = Field(default_factory=list)


class CommentUpdate(ApiModel):
    content: str | None = None
    is_pinned: bool | None = None


async def _own_comment(
    session: AsyncSession, technology_id: uuid.UUID, comment_id: uuid.UUID, user_id: str
) -> TechnologyComment:
    comment = await CommentRepo(session).owned(comment_id, user_id)
    if comment is None or comment.technology_id != technology_id:
        raise not_found("Comment")
    return comment


@router.get("")
async def list_comments(
    technology_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to fetch comments"):
        threads = await CommentRepo(session).threads(technology_id)
    return data(
        [{**c.to_dict(), "replies": [r.to_dict() for r in replies]} for c, replies in threads],
        tech_id=str(technology_id),
    )


@router.post("", status_code=HTTP_201_CREATED)
async def create_comment(
    body: CommentCreate,
    technology: Technology = Depends(technology_dep),
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    content = (body.content or "").strip()
    if not content:
        raise bad_request("Content is required")

    repo = CommentRepo(session)
    with db_errors("Failed to create comment"):
        if body.parent_comment_id is not None:
            parent = await repo.get(body.parent_comment_id)
            if parent is None or parent.technology_id != technology.id:
                raise not_found("Parent comment")
        comment = await repo.create(
            technology_id=technology.id,
            user_id=principal.subject,
            content=content,
            parent_comment_id=body.parent_comment_id,
            attached_source_ids=body.attached_source_ids,
        )
        await session.commit()
    return data(comment.to_dict())


@router.patch("/{comment_id}")
async def update_comment(
    technology_id: uuid.UUID,
    comment_id: uuid.UUID,
    body: CommentUpdate,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    changes = body.changes()
    if "content" in changes:
        changes["content"] = (body.content or "").strip()
        if not changes["content"]:
            raise bad_request("Content is required")

    with db_errors("Failed to update comment"):
        comment = await _own_comment(session, technology_id, comment_id, principal.subject)
        await CommentRepo(session).update(comment, changes)
        await session.commit()
    return data(comment.to_dict())


@router.delete("/{comment_id}")
async def delete_comment(
    technology_id: uuid.UUID,
    comment_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to delete comment"):
        comment = await _own_comment(session, technology_id, comment_id, principal.subject)
        await CommentRepo(session).delete(comment)
        await session.commit()
    return {"message": "Comment deleted successfully"}
