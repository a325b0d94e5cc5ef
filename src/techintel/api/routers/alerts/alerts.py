"""
techintel.api.routers.alerts.alerts

Alert rule endpoints.

Responsibilities:
- List/create/read/update/delete alert rules.
- Fill rule defaults (dedup, throttle, owner) on create.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session, settings_dep
from techintel.api.envelopes import ApiModel, data, parse_enum, rows
from techintel.api.errors import db_errors, not_found
from techintel.db.models import Alert, AlertFrequency, AlertState, Severity
from techintel.db.models.alerts import default_dedup_rules, default_throttle
from techintel.db.repositories.alerts import AlertRepo
from techintel.observability.logging import get_logger
from techintel.settings import Settings

router = APIRouter()
log = get_logger(__name__)


class AlertCreate(ApiModel):
    name: str = Field(min_length=1, max_length=256)
    description: str | None = None
    severity: Severity = Severity.medium
    trigger_type: str = Field(min_length=1, max_length=64)
    conditions: list[dict[str, Any]] = Field(default_factory=list)
    frequency: AlertFrequency = AlertFrequency.daily
    delivery_channels: list[dict[str, Any]] = Field(default_factory=list)
    dedup_rules: dict[str, Any] = Field(default_factory=default_dedup_rules)
    throttle: dict[str, Any] = Field(default_factory=default_throttle)
    team_subscriptions: list[str] = Field(default_factory=list)
    created_by: str | None = None
    estimated_noise: int = Field(default=15, ge=0, le=100)


class AlertUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=256)
    description: str | None = None
    severity: Severity | None = None
    state: AlertState | None = None
    trigger_type: str | None = None
    conditions: list[dict[str, Any]] | None = None
    frequency: AlertFrequency | None = None
    delivery_channels: list[dict[str, Any]] | None = None
    dedup_rules: dict[str, Any] | None = None
    throttle: dict[str, Any] | None = None
    team_subscriptions: list[str] | None = None
    estimated_noise: int | None = Field(default=None, ge=0, le=100)
    last_triggered: datetime | None = None
    trigger_count: int | None = Field(default=None, ge=0)


@router.get("")
async def list_alerts(
    state: str | None = Query(default=None),
    severity: str | None = Query(default=None),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    where = []
    if (alert_state := parse_enum(AlertState, state, field="state")) is not None:
        where.append(Alert.state == alert_state)
    if (alert_severity := parse_enum(Severity, severity, field="severity")) is not None:
        where.append(Alert.severity == alert_severity)

    with db_errors("Failed to fetch alerts"):
        alerts = await AlertRepo(session).find(*where, order_by=[Alert.created_at.desc()])
    return data(rows(alerts))


@router.post("", status_code=HTTP_201_CREATED)
async def create_alert(
    body: AlertCreate,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    values = body.model_dump()
    values["created_by"] = body.created_by or settings.default_user_id
    with db_errors("Failed to create alert"):
        alert = await AlertRepo(session).create(
            **values, state=AlertState.active, trigger_count=0
        )
        await session.commit()

    log.info("alert_created", alert_id=str(alert.id), severity=str(alert.severity))
    return data(alert.to_dict())


@router.get("/{alert_id}")
async def get_alert(
    alert_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to fetch alert"):
        alert = await AlertRepo(session).get(alert_id)
    if alert is None:
        raise not_found("Alert")
    return data(alert.to_dict())


@router.patch("/{alert_id}")
async def update_alert(
    alert_id: uuid.UUID,
    body: AlertUpdate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = AlertRepo(session)
    with db_errors("Failed to update alert"):
        alert = await repo.get(alert_id)
        if alert is None:
            raise not_found("Alert")
        await repo.update(alert, body.changes())
        await session.commit()
    return data(alert.to_dict())


@router.delete("/{alert_id}")
async def delete_alert(
    alert_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    repo = AlertRepo(session)
    with db_errors("Failed to delete alert"):
        alert = await repo.get(alert_id)
        if alert is None:
            raise not_found("Alert")
        await repo.delete(alert)
        await session.commit()

    log.info("alert_deleted", alert_id=str(alert_id))
    return {"message": "Alert deleted successfully"}
