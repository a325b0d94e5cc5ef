"""
techintel.api.routers.ingestion.secrets

API secret endpoints.

Responsibilities:
- Store connector API keys encrypted at rest, with a display mask.
- Never return the encrypted key (see `ApiSecret.to_dict`).
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_500_INTERNAL_SERVER_ERROR

from techintel.api.deps import db_session, settings_dep
from techintel.api.envelopes import ApiModel, data, parse_enum, rows
from techintel.api.errors import ApiError, db_errors, not_found
from techintel.db.models import ApiSecret, SecretStatus
from techintel.db.repositories.ingestion import SecretRepo
from techintel.observability.logging import get_logger
from techintel.services.secrets import EncryptionError, encrypt_secret, mask_key
from techintel.settings import Settings

router = APIRouter()
log = get_logger(__name__)


class SecretCreate(ApiModel):
    name: str = Field(min_length=1, max_length=256)
    service: str = Field(min_length=1, max_length=256)
    key: str = Field(min_length=1, repr=False)
    permissions: list[str] = Field(default_factory=list)
    expires_at: datetime | None = None


class SecretUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=256)
    service: str | None = None
    status: SecretStatus | None = None
    permissions: list[str] | None = None
    last_used: datetime | None = None
    expires_at: datetime | None = None


@router.get("")
async def list_secrets(
    status: str | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    where = []
    if (secret_status := parse_enum(SecretStatus, status, field="status")) is not None:
        where.append(ApiSecret.status == secret_status)

    with db_errors("Failed to fetch secrets"):
        secrets = await SecretRepo(session).find(*where, order_by=[ApiSecret.created_at.desc()])
    return data(rows(secrets))


@router.post("", status_code=HTTP_201_CREATED)
async def create_secret(
    body: SecretCreate,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    try:
        encrypted = encrypt_secret(settings, body.key)
    except EncryptionError as e:
        log.error("secret_encryption_failed", error=str(e))
        raise ApiError(HTTP_500_INTERNAL_SERVER_ERROR, "Failed to create secret", str(e)) from e

    with db_errors("Failed to create secret"):
        secret = await SecretRepo(session).create(
            name=body.name,
            service=body.service,
            encrypted_key=encrypted,
            masked=mask_key(body.key),
            status=SecretStatus.active,
            permissions=body.permissions,
            expires_at=body.expires_at,
        )
        await session.commit()

    log.info("secret_created", secret_id=str(secret.id), service=secret.service)
    return data(secret.to_dict())


@router.patch("/{secret_id}")
async def update_secret(
    secret_id: uuid.UUID,
    body: SecretUpdate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = SecretRepo(session)
    with db_errors("Failed to update secret"):
        secret = await repo.get(secret_id)
        if secret is None:
            raise not_found("Secret")
        await repo.update(secret, body.changes())
        await session.commit()
    return data(secret.to_dict())


@router.delete("/{secret_id}")
async def delete_secret(
    secret_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = SecretRepo(session)
    with db_errors("Failed to delete secret"):
        secret = await repo.get(secret_id)
        if secret is None:
            raise not_found("Secret")
        await repo.delete(secret)
        await session.commit()
    log.info("secret_deleted", secret_id=str(secret_id))
    return {"message": "Secret deleted successfully"}
