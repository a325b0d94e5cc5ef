"""
techintel.db.models.ingestion

Admin-ingestion schema.

Responsibilities:
- Define connectors, pipeline runs, ingestion logs, index operations, API secrets,
  connector templates and document uploads.
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


class ConnectorType(enum.StrEnum):
    patent = "patent"
    research = "research"
    funding = "funding"
    news = "news"
    custom = "custom"


class ConnectorStatus(enum.StrEnum):
    active = "active"
    paused = "paused"
    error = "error"
    configuring = "configuring"


class PipelineRunStatus(enum.StrEnum):
    running = "running"
    completed = "completed"
    failed = "failed"
    cancelled = "cancelled"


class LogLevel(enum.StrEnum):
    info = "info"
    warning = "warning"
    error = "error"


class IndexOperationType(enum.StrEnum):
    reindex = "reindex"
    rebuild_embeddings = "rebuild_embeddings"
    purge = "purge"
    optimize = "optimize"


class IndexOperationStatus(enum.StrEnum):
    pending = "pending"
    running = "running"
    completed = "completed"
    failed = "failed"


class SecretStatus(enum.StrEnum):
    active = "active"
    expired = "expired"
    revoked = "revoked"


class UploadStatus(enum.StrEnum):
    uploading = "uploading"
    processing = "processing"
    completed = "completed"
    failed = "failed"


class DataConnector(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "data_connectors"

    name: Mapped[str] = mapped_column(String(256), nullable=False)
    type: Mapped[ConnectorType] = mapped_column(enum_column(ConnectorType), nullable=False, index=True)
    provider: Mapped[str] = mapped_column(String(256), nullable=False)
    status: Mapped[ConnectorStatus] = mapped_column(
        enum_column(ConnectorStatus), nullable=False, default=ConnectorStatus.configuring, index=True
    )
    api_endpoint: Mapped[str] = mapped_column(Text, nullable=False, default="")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    icon: Mapped[str] = mapped_column(String(32), nullable=False, default="📄")
    requires_auth: Mapped[bool] = mapped_column(nullable=False, default=False)
    auth_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    # Minutes between syncs.
    polling_interval: Mapped[int] = mapped_column(nullable=False, default=60)
    last_sync: Mapped[datetime | None] = mapped_column(nullable=True)
    next_sync: Mapped[datetime | None] = mapped_column(nullable=True)
    total_documents: Mapped[int] = mapped_column(nullable=False, default=0)
    documents_today: Mapped[int] = mapped_column(nullable=False, default=0)
    error_count: Mapped[int] = mapped_column(nullable=False, default=0)
    config: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    capabilities: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    health_score: Mapped[int] = mapped_column(nullable=False, default=100)


class IngestionLog(UuidPkMixin, Base):
    __tablename__ = "ingestion_logs"

    timestamp: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, index=True)
    level: Mapped[LogLevel] = mapped_column(enum_column(LogLevel), nullable=False, index=True)
    connector_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True),
        ForeignKey("data_connectors.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    details: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    document_id: Mapped[str | None] = mapped_column(String(256), nullable=True)
    # Retry fields are recorded for operators; nothing in the service acts on them.
    retryable: Mapped[bool] = mapped_column(nullable=False, default=False)
    retry_count: Mapped[int] = mapped_column(nullable=False, default=0)
    max_retries: Mapped[int] = mapped_column(nullable=False, default=3)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)


class PipelineRun(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "pipeline_runs"

    connector_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True),
        ForeignKey("data_connectors.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    connector_name: Mapped[str] = mapped_column(String(256), nullable=False)
    status: Mapped[PipelineRunStatus] = mapped_column(
        enum_column(PipelineRunStatus), nullable=False, default=PipelineRunStatus.running, index=True
    )
    start_time: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    end_time: Mapped[datetime | None] = mapped_column(nullable=True)
    # Seconds.
    duration: Mapped[int | None] = mapped_column(nullable=True)
    documents_processed: Mapped[int] = mapped_column(nullable=False, default=0)
    documents_queued: Mapped[int] = mapped_column(nullable=False, default=0)
    documents_failed: Mapped[int] = mapped_column(nullable=False, default=0)
    error_messages: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    # Documents per second.
    throughput: Mapped[float] = mapped_column(nullable=False, default=0.0)
    memory_usage: Mapped[float | None] = mapped_column(nullable=True)
    cpu_usage: Mapped[float | None] = mapped_column(nullable=True)

    __table_args__ = (Index("ix_pipeline_runs_status_start", "status", "start_time"),)


class IndexOperation(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "index_operations"

    type: Mapped[IndexOperationType] = mapped_column(enum_column(IndexOperationType), nullable=False)
    status: Mapped[IndexOperationStatus] = mapped_column(
        enum_column(IndexOperationStatus), nullable=False, default=IndexOperationStatus.pending
    )
    start_time: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    end_time: Mapped[datetime | None] = mapped_column(nullable=True)
    affected_documents: Mapped[int] = mapped_column(nullable=False, default=0)
    progress: Mapped[int] = mapped_column(nullable=False, default=0)
    estimated_time_remaining: Mapped[int | None] = mapped_column(nullable=True)


class ApiSecret(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "api_secrets"

    name: Mapped[str] = mapped_column(String(256), nullable=False)
    service: Mapped[str] = mapped_column(String(256), nullable=False)
    # Fernet token; never rendered in API responses.
    encrypted_key: Mapped[str] = mapped_column(Text, nullable=False)
    masked: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[SecretStatus] = mapped_column(
        enum_column(SecretStatus), nullable=False, default=SecretStatus.active
    )
    permissions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    last_used: Mapped[datetime | None] = mapped_column(nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(nullable=True)

    def to_dict(self) -> dict[str, Any]:
        row = super().to_dict()
        row.pop("encrypted_key", None)
        return row


class ConnectorTemplate(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "connector_templates"

    name: Mapped[str] = mapped_column(String(256), nullable=False)
    type: Mapped[ConnectorType] = mapped_column(enum_column(ConnectorType), nullable=False)
    provider: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    required_fields: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    optional_fields: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    default_config: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    documentation_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    popular: Mapped[bool] = mapped_column(nullable=False, default=False)


class DocumentUpload(UuidPkMixin, TimestampMixin, Base):
    __tablename__ = "document_uploads"

    file_name: Mapped[str] = mapped_column(String(512), nullable=False)
    file_type: Mapped[str] = mapped_column(String(64), nullable=False)
    file_size: Mapped[int] = mapped_column(nullable=False, default=0)
    upload_date: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    status: Mapped[UploadStatus] = mapped_column(
        enum_column(UploadStatus), nullable=False, default=UploadStatus.uploading
    )
    progress: Mapped[int] = mapped_column(nullable=False, default=0)
    documents_extracted: Mapped[int | None] = mapped_column(nullable=True)
    mapping_template: Mapped[str | None] = mapped_column(String(256), nullable=True)
    errors: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
