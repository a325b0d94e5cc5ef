from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session
from techintel.api.envelopes import ApiModel, data, parse_enum, rows
from techintel.api.errors import db_errors, not_found
from techintel.db.base import utcnow
from techintel.db.models import Severity, TriggeredEvent
from techintel.db.repositories.alerts import AlertRepo, TriggeredEventRepo
from techintel.observability.logging import get_logger

router = APIRouter()
log = get_logger(__name__)


class EventCreate(ApiModel):
    alert_id: uuid.UUID
    alert_name: str | None = None
    severity: Severity | None = None
    matched_documents: list[dict[str, Any]] = Field(default_factory=list)
    evidence_snapshot: dict[str, Any] = Field(default_factory=dict)
    actions_performed: list[str] = Field(default_factory=list)
    delivery_status: list[dict[str, Any]] = Field(default_factory=list)


@router.get("")
async def list_events(
    alert_id: uuid.UUID | None = Query(default=None),
    severity: str | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=1000),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    where = []
    if alert_id is not None:
        where.append(TriggeredEvent.alert_id == alert_id)
    if (event_severity := parse_enum(Severity, severity, field="severity")) is not None:
        where.append(TriggeredEvent.severity == event_severity)

    with db_errors("Failed to fetch events"):
        events = await TriggeredEventRepo(session).find(
            *where, order_by=[TriggeredEvent.triggered_at.desc()], limit=limit
        )
    return data(rows(events))


@router.post("", status_code=HTTP_201_CREATED)
async def create_event(
    body: EventCreate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    alerts = AlertRepo(session)
    now = utcnow()
    with db_errors("Failed to create event"):
        alert = await alerts.get(body.alert_id)
        if alert is None:
            raise not_found("Alert")
        values = body.model_dump()
        values["alert_name"] = body.alert_name or alert.name
        values["severity"] = body.severity or alert.severity
        event = await TriggeredEventRepo(session).create(**values, triggered_at=now)
        await alerts.record_trigger(alert.id, at=now)
        await session.commit()

    log.info("alert_triggered", alert_id=str(alert.id), event_id=str(event.id))
    return data(event.to_dict())
