"""
techintel.api.routers.dashboard.analytics

Chart series for the dashboard home.

Responsibilities:
- Serve and upsert daily patent filing counts.
- Serve and upsert monthly funding totals.
- Serve, adjust and recompute the TRL distribution across tracked technologies.
"""

from __future__ import annotations

import datetime as dt
from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from techintel.api.deps import db_session
from techintel.api.envelopes import ApiModel, data, rows
from techintel.api.errors import bad_request, db_errors
from techintel.db.base import utcnow
from techintel.db.repositories.dashboard import (
    FundingAnalyticsRepo,
    PatentAnalyticsRepo,
    TrlDistributionRepo,
)
from techintel.observability.logging import get_logger
from techintel.services.analytics import TRL_BANDS, month_number, trl_distribution

router = APIRouter()
log = get_logger(__name__)


class PatentPoint(ApiModel):
    date: dt.date
    filings: int = Field(ge=0)
    citations: int = Field(default=0, ge=0)
    week_number: int | None = Field(default=None, ge=1, le=53)
    year: int | None = None


class FundingPoint(ApiModel):
    month: str = Field(min_length=3, max_length=16)
    year: int | None = None
    amount: float = Field(ge=0)
    deal_count: int = Field(default=0, ge=0)


class TrlLevelUpdate(ApiModel):
    trl_level: str
    value: int = Field(ge=0)
    percentage: float = Field(ge=0, le=100)


class TrlDistributionUpdate(ApiModel):
    distribution: list[TrlLevelUpdate]


@router.get("/patents")
async def list_patents(
    days: int = Query(default=30, ge=1, le=3650),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    start = utcnow().date() - timedelta(days=days)
    with db_errors("Failed to fetch patent analytics"):
        points = await PatentAnalyticsRepo(session).since(start)
    return data(rows(points))


@router.post("/patents", status_code=HTTP_201_CREATED)
async def upsert_patents(
    body: PatentPoint,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    iso_year, iso_week, _ = body.date.isocalendar()
    with db_errors("Failed to save patent analytics"):
        point, _ = await PatentAnalyticsRepo(session).upsert(
            body.date,
            filings=body.filings,
            citations=body.citations,
            week_number=body.week_number or iso_week,
            year=body.year or iso_year,
        )
        await session.commit()
    return data(point.to_dict())


@router.get("/funding")
async def list_funding(
    months: int = Query(default=12, ge=1, le=120),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    with db_errors("Failed to fetch funding analytics"):
        points = await FundingAnalyticsRepo(session).latest(months)
    return data(rows(points))


@router.post("/funding", status_code=HTTP_201_CREATED)
async def upsert_funding(
    body: FundingPoint,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    try:
        number = month_number(body.month)
    except ValueError as e:
        raise bad_request("Invalid month", str(e)) from e
    month = body.month.strip()[:3].title()

    with db_errors("Failed to save funding analytics"):
        point, _ = await FundingAnalyticsRepo(session).upsert(
            month,
            body.year or utcnow().year,
            month_number=number,
            amount=body.amount,
            deal_count=body.deal_count,
        )
        await session.commit()
    return data(point.to_dict())


@router.get("/trl")
async def get_trl_distribution(session: AsyncSession = Depends(db_session)) -> dict[str, Any]:
    with db_errors("Failed to fetch TRL distribution"):
        levels = await TrlDistributionRepo(session).ordered()
    return data(rows(levels))


@router.put("/trl")
async def put_trl_distribution(
    body: TrlDistributionUpdate,
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    bands = {band.level: band for band in TRL_BANDS}
    unknown = sorted({item.trl_level for item in body.distribution} - bands.keys())
    if unknown:
        raise bad_request("Invalid trl_level", f"unknown levels: {', '.join(unknown)}")

    repo = TrlDistributionRepo(session)
    with db_errors("Failed to update TRL distribution"):
        existing = await repo.by_level()
        for item in body.distribution:
            values = {"value": item.value, "percentage": item.percentage}
            row = existing.get(item.trl_level)
            if row is None:
                band = bands[item.trl_level]
                await repo.create(trl_level=band.level, name=band.name, color=band.color, **values)
            else:
                await repo.update(row, values)
        await session.commit()
        levels = await repo.ordered()
    return data(rows(levels))


@router.post("/trl/refresh")
async def refresh_trl_distribution(session: AsyncSession = Depends(db_session)) -> dict[str, Any]:
    repo = TrlDistributionRepo(session)
    with db_errors("Failed to refresh TRL distribution"):
        existing = await repo.by_level()
        computed = trl_distribution(await repo.technology_levels())
        for band in computed:
            row = existing.get(band["trl_level"])
            if row is None:
                await repo.create(**band)
            else:
                await repo.update(row, band)
        await session.commit()
        levels = await repo.ordered()

    log.info("trl_distribution_refreshed", technologies=sum(b["value"] for b in computed))
    return data(rows(levels))
