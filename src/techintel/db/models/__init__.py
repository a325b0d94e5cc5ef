"""
techintel.db.models

Persistence schema, one module per dashboard area.

Responsibilities:
- Import every table module so `Base.metadata` is complete for `init_db` and Alembic.
- Re-export the ORM classes for convenient `from techintel.db.models import X` imports.
"""

from __future__ import annotations

from techintel.db.models.alerts import (
    Alert,
    AlertFrequency,
    AlertState,
    AlertTemplate,
    NotificationPreferences,
    Severity,
    TriggeredEvent,
    WatchedTechnology,
)
from techintel.db.models.dashboard import (
    ActivityFeedItem,
    DashboardKpi,
    DashboardSignal,
    FundingAnalytics,
    PatentAnalytics,
    TrlDistribution,
)
from techintel.db.models.forecasting import (
    ForecastingModel,
    ForecastJob,
    ForecastResult,
    JobStatus,
    ModelStatus,
    ModelType,
    ScenarioPreset,
    ScenarioType,
    ScheduledRun,
)
from techintel.db.models.ingestion import (
    ApiSecret,
    ConnectorStatus,
    ConnectorTemplate,
    ConnectorType,
    DataConnector,
    DocumentUpload,
    IndexOperation,
    IndexOperationStatus,
    IndexOperationType,
    IngestionLog,
    LogLevel,
    PipelineRun,
    PipelineRunStatus,
    SecretStatus,
    UploadStatus,
)
from techintel.db.models.onboarding import (
    ConnectorPreset,
    OnboardingChecklist,
    OnboardingDomain,
    OnboardingProgress,
    UserConnector,
    UserDomain,
    WatchlistItem,
)
from techintel.db.models.reports import (
    ExportFormat,
    GeneratedReport,
    GenerationStatus,
    Recurrence,
    Report,
    ReportStatus,
    ReportTemplate,
    ScheduledReport,
)
from techintel.db.models.search import SavedSearch, SearchHistory, SearchSuggestion
from techintel.db.models.technology import (
    KgEdge,
    KgNode,
    SignalDatapoint,
    Technology,
    TechnologyComment,
    TechnologyRelationship,
    TechnologySource,
    TimelineEvent,
    TrlHistory,
    UserWatch,
)

__all__ = [
    "ActivityFeedItem",
    "Alert",
    "AlertFrequency",
    "AlertState",
    "AlertTemplate",
    "ApiSecret",
    "ConnectorPreset",
    "ConnectorStatus",
    "ConnectorTemplate",
    "ConnectorType",
    "DashboardKpi",
    "DashboardSignal",
    "DataConnector",
    "DocumentUpload",
    "ExportFormat",
    "ForecastJob",
    "ForecastResult",
    "ForecastingModel",
    "FundingAnalytics",
    "GeneratedReport",
    "GenerationStatus",
    "IndexOperation",
    "IndexOperationStatus",
    "IndexOperationType",
    "IngestionLog",
    "JobStatus",
    "KgEdge",
    "KgNode",
    "LogLevel",
    "ModelStatus",
    "ModelType",
    "NotificationPreferences",
    "OnboardingChecklist",
    "OnboardingDomain",
    "OnboardingProgress",
    "PatentAnalytics",
    "PipelineRun",
    "PipelineRunStatus",
    "Recurrence",
    "Report",
    "ReportStatus",
    "ReportTemplate",
    "SavedSearch",
    "ScenarioPreset",
    "ScenarioType",
    "ScheduledReport",
    "ScheduledRun",
    "SearchHistory",
    "SearchSuggestion",
    "SecretStatus",
    "Severity",
    "SignalDatapoint",
    "Technology",
    "TechnologyComment",
    "TechnologyRelationship",
    "TechnologySource",
    "TimelineEvent",
    "TriggeredEvent",
    "TrlDistribution",
    "TrlHistory",
    "UploadStatus",
    "UserConnector",
    "UserDomain",
    "UserWatch",
    "WatchedTechnology",
    "WatchlistItem",
]
