from __future__ import annotations

import datetime as dt
from typing import Any

from sqlalchemy import case, func, select

from techintel.db.models import (
    ActivityFeedItem,
    DashboardKpi,
    DashboardSignal,
    FundingAnalytics,
    PatentAnalytics,
    SignalDatapoint,
    Technology,
    TrlDistribution,
)
from techintel.db.repositories.base import CrudRepo


class ActivityRepo(CrudRepo[ActivityFeedItem]):
    model = ActivityFeedItem


class KpiRepo(CrudRepo[DashboardKpi]):
    model = DashboardKpi

    async def upsert(self, metric_key: str, **values) -> DashboardKpi:
        existing = await self.find_one(DashboardKpi.metric_key == metric_key)
        if existing is not None:
            return await self.update(existing, values)
        return await self.create(metric_key=metric_key, **values)

    async def snapshot(self) -> tuple[int, int, float]:
        # (technology count, signal datapoint count, mean current TRL)
        tech_count, avg_trl = (
            await self._session.execute(
                select(func.count(Technology.id), func.coalesce(func.avg(Technology.current_trl), 0))
            )
        ).one()
        signal_count = (
            await self._session.execute(select(func.count(SignalDatapoint.id)))
        ).scalar_one()
        return int(tech_count), int(signal_count), float(avg_trl)


class PatentAnalyticsRepo(CrudRepo[PatentAnalytics]):
    model = PatentAnalytics

    async def since(self, start: dt.date) -> list[PatentAnalytics]:
        return await self.find(PatentAnalytics.date >= start, order_by=[PatentAnalytics.date.asc()])

    async def upsert(self, day: dt.date, **values: Any) -> tuple[PatentAnalytics, bool]:
        existing = await self.find_one(PatentAnalytics.date == day)
        if existing is not None:
            return await self.update(existing, values), False
        return await self.create(date=day, **values), True


class FundingAnalyticsRepo(CrudRepo[FundingAnalytics]):
    model = FundingAnalytics

    async def latest(self, months: int) -> list[FundingAnalytics]:
        # Newest `months` rows, returned oldest first for charting.
        newest = await self.find(
            order_by=[FundingAnalytics.year.desc(), FundingAnalytics.month_number.desc()],
            limit=months,
        )
        return list(reversed(newest))

    async def upsert(self, month: str, year: int, **values: Any) -> tuple[FundingAnalytics, bool]:
        existing = await self.find_one(FundingAnalytics.month == month, FundingAnalytics.year == year)
        if existing is not None:
            return await self.update(existing, values), False
        return await self.create(month=month, year=year, **values), True


class TrlDistributionRepo(CrudRepo[TrlDistribution]):
    model = TrlDistribution

    async def ordered(self) -> list[TrlDistribution]:
        return await self.find(order_by=[TrlDistribution.trl_level.asc()])

    async def by_level(self) -> dict[str, TrlDistribution]:
        return {row.trl_level: row for row in await self.ordered()}

    async def technology_levels(self) -> list[int]:
        result = await self._session.execute(select(Technology.current_trl))
        return [int(trl) for trl in result.scalars().all()]


class DashboardSignalRepo(CrudRepo[DashboardSignal]):
    model = DashboardSignal

    async def top(self, *, type_: str | None, importance: str | None, limit: int) -> list[DashboardSignal]:
        where = []
        if type_:
            where.append(DashboardSignal.type == type_)
        if importance:
            where.append(DashboardSignal.importance == importance)
        # Same-day signals: high before medium before low.
        rank = case({"high": 0, "medium": 1, "low": 2}, value=DashboardSignal.importance, else_=3)
        return await self.find(
            *where, order_by=[DashboardSignal.date.desc(), rank.asc()], limit=limit
        )
