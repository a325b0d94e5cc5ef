"""
techintel.db.models.forecasting

Forecasting schema.

Responsibilities:
- Define the model catalog, forecast jobs and their results.
- Define scenario presets and scheduled forecast runs.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, ForeignKey, Index, String, Text
from sqlalchemy import Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column

from techintel.db.base import Base, TimestampMixin, UuidPkMixin, enum_column, utcnow


class ModelType(enum.StrEnum):
    arima = "arima"
    diffusion = "diffusion"
    ensemble = "ensemble"
    llm_trend = "llm-trend"
    hybrid = "hybrid"


class ModelStatus(enum.StrEnum):
    ready = "ready"
    training = "training"
    failed = "failed"
    deprecated = "deprecated"


class JobStatus(enum.StrEnum):
    pending = "pending"
    running = "running"
    completed = "completed"
    failed = "failed"
    cancelled = "cancelled"


class ScenarioType(enum.StrEnum):
    conservative = "conservative"
    baseline = "baseline"
    optimistic = "optimistic"
    custom = "custom"


class ForecastingModel(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "forecasting_models"

    name: Mapped[str] = mapped_column(String(256), nullable=False)
    type: Mapped[ModelType] = mapped_column(enum_column(ModelType), nullable=False, index=True)
    version: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    long_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[ModelStatus] = mapped_column(
        enum_column(ModelStatus), nullable=False, default=ModelStatus.training, index=True
    )
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_by: Mapped[str] = mapped_column(String(256), nullable=False, default="system")
    is_published: Mapped[bool] = mapped_column(nullable=False, default=False)
    last_trained: Mapped[datetime | None] = mapped_column(nullable=True)
    # 0-100
    accuracy: Mapped[float] = mapped_column(nullable=False, default=0.0)
    usage_count: Mapped[int] = mapped_column(nullable=False, default=0)


class ForecastJob(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "forecast_jobs"

    model_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("forecasting_models.id", ondelete="CASCADE"), nullable=False
    )
    model_name: Mapped[str] = mapped_column(String(256), nullable=False)
    status: Mapped[JobStatus] = mapped_column(
        enum_column(JobStatus), nullable=False, default=JobStatus.pending, index=True
    )
    progress: Mapped[int] = mapped_column(nullable=False, default=0)
    tech_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    scenario: Mapped[ScenarioType] = mapped_column(enum_column(ScenarioType), nullable=False)
    parameters: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_by: Mapped[str] = mapped_column(String(256), nullable=False, default="system")
    random_seed: Mapped[int] = mapped_column(nullable=False)
    environment: Mapped[dict[str, str]] = mapped_column(JSON, nullable=False, default=dict)
    # Pipeline state snapshot, checkpointed after every step.
    state: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    started_at: Mapped[datetime | None] = mapped_column(nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)


class ForecastResult(UuidPkMixin, Base):
    __tablename__ = "forecast_results"

    job_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("forecast_jobs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    model_id: Mapped[uuid.UUID] = mapped_column(SAUuid(as_uuid=True), nullable=False, index=True)
    tech_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    tech_name: Mapped[str] = mapped_column(String(256), nullable=False)
    scenario: Mapped[ScenarioType] = mapped_column(enum_column(ScenarioType), nullable=False)
    predictions: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    metrics: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    uncertainty: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    explainability: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    top_influencing_sources: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    compute_time: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    generated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)

    __table_args__ = (Index("ix_forecast_results_tech_generated", "tech_id", "generated_at"),)


class ScenarioPreset(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "scenario_presets"

    name: Mapped[str] = mapped_column(String(256), nullable=False)
    type: Mapped[ScenarioType] = mapped_column(enum_column(ScenarioType), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    parameters: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_by: Mapped[str] = mapped_column(String(256), nullable=False, default="system")
    is_public: Mapped[bool] = mapped_column(nullable=False, default=False)
    usage_count: Mapped[int] = mapped_column(nullable=False, default=0)


class ScheduledRun(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "scheduled_runs"

    name: Mapped[str] = mapped_column(String(256), nullable=False)
    model_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), ForeignKey("forecasting_models.id", ondelete="CASCADE"), nullable=False
    )
    tech_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    scenario: Mapped[ScenarioType] = mapped_column(enum_column(ScenarioType), nullable=False)
    parameters: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    # {"frequency": "weekly", "dayOfWeek": 1, "time": "09:00"}
    schedule: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    notifications: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    is_active: Mapped[bool] = mapped_column(nullable=False, default=True)
    created_by: Mapped[str] = mapped_column(String(256), nullable=False, default="system")
    last_run: Mapped[datetime | None] = mapped_column(nullable=True)
    next_run: Mapped[datetime | None] = mapped_column(nullable=True)
