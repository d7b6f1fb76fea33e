"""
Analytics component - Event ingestion and aggregation.
"""

from ._aggregate import (
    AnalyticsSummaryService,
    SummaryConfig,
    build_totals,
    calculate_ctr,
    create_summary_service,
)
from ._impl import (
    AnalyticsIngestionService,
    DefaultTimePort,
    IngestionConfig,
    InMemoryEventStore,
    create_analytics_ingestion_service,
)
from ._range import resolve_range, to_epoch_ms
from ._useragent import (
    UAConfig,
    classify_browser,
    classify_device,
    classify_os,
    classify_user_agent,
    is_bot,
    parse_device_info,
)
from ._validate import (
    ValidationConfig,
    is_uuid,
    sanitize_referrer,
    strip_url_credentials,
    validate_track_payload,
)
from .component import (
    build_ingestion_config,
    build_summary_config,
    run_links,
    run_summary,
    run_track,
)
from .models import (
    AnalyticsValidationError,
    DeviceInfo,
    Event,
    GeoInfo,
    LinksOutput,
    StoreResult,
    Summary,
    SummaryInput,
    SummaryOutput,
    TimeRange,
    Totals,
    TrackInput,
    TrackOutput,
    TrackPayload,
    UAClassification,
)
from .ports import AnalyticsQueryPort, EventStoreError, EventStorePort, TimePort

__all__ = [
    # Entry points
    "run_links",
    "run_summary",
    "run_track",
    "build_ingestion_config",
    "build_summary_config",
    # Models
    "AnalyticsValidationError",
    "DeviceInfo",
    "Event",
    "GeoInfo",
    "LinksOutput",
    "StoreResult",
    "Summary",
    "SummaryInput",
    "SummaryOutput",
    "TimeRange",
    "Totals",
    "TrackInput",
    "TrackOutput",
    "TrackPayload",
    "UAClassification",
    # Ports
    "AnalyticsQueryPort",
    "EventStoreError",
    "EventStorePort",
    "TimePort",
    # Services
    "AnalyticsIngestionService",
    "AnalyticsSummaryService",
    "DefaultTimePort",
    "IngestionConfig",
    "InMemoryEventStore",
    "SummaryConfig",
    "build_totals",
    "calculate_ctr",
    "create_analytics_ingestion_service",
    "create_summary_service",
    # Range
    "resolve_range",
    "to_epoch_ms",
    # User agent
    "UAConfig",
    "classify_browser",
    "classify_device",
    "classify_os",
    "classify_user_agent",
    "is_bot",
    "parse_device_info",
    # Validation
    "ValidationConfig",
    "is_uuid",
    "sanitize_referrer",
    "strip_url_credentials",
    "validate_track_payload",
]
