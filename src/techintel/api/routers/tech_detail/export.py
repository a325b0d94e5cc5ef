"""
techintel.api.routers.tech_detail.export

Technology export endpoint.

Responsibilities:
- Gather the requested sections (metadata, sources, timeline, forecast).
- Return JSON inline, sources as a CSV attachment, or an export ticket for document formats.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from techintel.api.deps import db_session
from techintel.api.envelopes import ApiModel, data, rows
from techintel.api.errors import bad_request, db_errors
from techintel.api.routers.tech_detail.deps import technology_dep
from techintel.auth.deps import get_principal
from techintel.auth.models import Principal
from techintel.db.base import utcnow
from techintel.db.models import Technology, TechnologySource, TimelineEvent
from techintel.db.repositories.forecasting import ForecastResultRepo
from techintel.db.repositories.technology import SourceRepo, TimelineRepo
from techintel.observability.logging import get_logger
from techintel.services.exports import EXPORT_FORMATS, export_ticket, rows_to_csv

router = APIRouter()
log = get_logger(__name__)


class ExportRequest(ApiModel):
    format: str | None = None
    include_charts: bool = False
    include_sources: bool = False
    include_timeline: bool = False
    include_forecast: bool = False
    max_sources: int = Field(default=20, ge=1, le=1000)


@router.post("")
async def export_technology(
    body: ExportRequest,
    technology: Technology = Depends(technology_dep),
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> Any:
    fmt = body.format
    if fmt not in EXPORT_FORMATS:
        raise bad_request("Invalid format", f"expected one of: {', '.join(EXPORT_FORMATS)}")

    log.info("technology_export", technology_id=str(technology.id), format=fmt, actor=principal.subject)

    sources_wanted = body.include_sources or fmt == "csv"
    with db_errors("Failed to export technology"):
        sources = (
            await SourceRepo(session).find(
                TechnologySource.technology_id == technology.id,
                order_by=[TechnologySource.date.desc()],
                limit=body.max_sources,
            )
            if sources_wanted
            else []
        )
        if fmt == "csv":
            filename = f"technology-{technology.id}-sources.csv"
            return Response(
                content=rows_to_csv(rows(sources)),
                media_type="text/csv",
                headers={"Content-Disposition": f'attachment; filename="{filename}"'},
            )

        if fmt != "json":
            return data(
                export_ticket(
                    technology_id=technology.id,
                    fmt=fmt,
                    included={
                        "charts": body.include_charts,
                        "sources": body.include_sources,
                        "timeline": body.include_timeline,
                        "forecast": body.include_forecast,
                    },
                )
            )

        payload: dict[str, Any] = {
            "metadata": technology.to_dict(),
            "generatedAt": utcnow().isoformat(),
            "generatedBy": principal.subject,
        }
        if body.include_sources:
            payload["sources"] = rows(sources)
        if body.include_timeline:
            timeline = await TimelineRepo(session).find(
                TimelineEvent.technology_id == technology.id, order_by=[TimelineEvent.date.asc()]
            )
            payload["timeline"] = rows(timeline)
        if body.include_forecast:
            forecast = await ForecastResultRepo(session).latest_for_tech(str(technology.id))
            payload["forecast"] = forecast.to_dict() if forecast is not None else None

    return data(payload)
