from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, Response
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_200_OK, HTTP_201_CREATED, HTTP_500_INTERNAL_SERVER_ERROR

from techintel.api.deps import db_session, settings_dep
from techintel.api.envelopes import ApiModel, data
from techintel.api.errors import ApiError, db_errors, not_found
from techintel.db.models import ConnectorPreset, UserConnector
from techintel.db.repositories.onboarding import ConnectorPresetRepo, UserConnectorRepo
from techintel.observability.logging import get_logger
from techintel.services.secrets import EncryptionError, encrypt_secret
from techintel.settings import Settings

router = APIRouter()
log = get_logger(__name__)


class ConnectorToggle(ApiModel):
    user_id: str | None = None
    connector_id: str = Field(min_length=1)
    enabled: bool = True
    api_key: str | None = Field(default=None, min_length=1)


def connector_view(preset: ConnectorPreset, mine: UserConnector | None) -> dict[str, Any]:
    return {
        "id": preset.id,
        "name": preset.name,
        "provider": preset.provider,
        "description": preset.description,
        "category": preset.category,
        "recommended": preset.recommended,
        "requiresAuth": preset.requires_auth,
        "enabled": bool(mine and mine.enabled),
        # Stored keys are never echoed back.
        "apiKey": "****" if mine is not None and mine.encrypted_api_key else None,
    }


@router.get("")
async def list_connectors(
    user_id: str | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    with db_errors("Failed to fetch connectors"):
        presets = await ConnectorPresetRepo(session).find(
            order_by=[ConnectorPreset.recommended.desc(), ConnectorPreset.id.asc()]
        )
        mine = await UserConnectorRepo(session).for_user(user_id or settings.default_user_id)
    return data([connector_view(p, mine.get(p.id)) for p in presets])


@router.post("")
async def toggle_connector(
    body: ConnectorToggle,
    response: Response,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    user_id = body.user_id or settings.default_user_id
    values: dict[str, Any] = {"enabled": body.enabled}
    if body.api_key is not None:
        try:
            values["encrypted_api_key"] = encrypt_secret(settings, body.api_key)
        except EncryptionError as e:
            log.error("connector_key_encryption_failed", error=str(e))
            raise ApiError(HTTP_500_INTERNAL_SERVER_ERROR, "Failed to update connector", str(e)) from e

    with db_errors("Failed to update connector"):
        preset = await ConnectorPresetRepo(session).get(body.connector_id)
        if preset is None:
            raise not_found("Connector")
        mine, created = await UserConnectorRepo(session).upsert(user_id, body.connector_id, **values)
        await session.commit()

    response.status_code = HTTP_201_CREATED if created else HTTP_200_OK
    log.info("onboarding_connector_updated", user_id=user_id, connector_id=preset.id, enabled=mine.enabled)
    return data(connector_view(preset, mine))
