"""
Analytics component input/output models.

Events are immutable once built. Server-trusted fields (occurred_at, is_bot,
geolocation, device labels) are never taken from the client payload.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

# --- Enums ---


EventName = Literal["page_view", "link_click"]
RangePreset = Literal["7d", "30d", "custom"]


# --- Validation Error ---


@dataclass(frozen=True)
class AnalyticsValidationError:
    """Analytics validation error."""

    code: str
    message: str
    field_name: str | None = None


# --- Enrichment ---


@dataclass(frozen=True)
class DeviceInfo:
    """Categorical labels derived from a user-agent string."""

    device: str = "Desktop"
    os: str = "Unknown"
    browser: str = "Unknown"


@dataclass(frozen=True)
class UAClassification:
    """Device labels plus the bot determination for one user agent."""

    device_info: DeviceInfo
    is_bot: bool


@dataclass(frozen=True)
class GeoInfo:
    """Geolocation derived from the request's network origin."""

    country: str | None = None
    region: str | None = None
    city: str | None = None
    timezone: str | None = None
    latitude: float | None = None
    longitude: float | None = None


# --- Event Model ---


@dataclass(frozen=True)
class TrackPayload:
    """Client-supplied fields after validation and truncation."""

    event_id: str
    event_name: EventName
    visitor_id: str
    session_id: str
    page_path: str
    link_id: str | None = None
    label: str | None = None
    destination_url: str | None = None
    referrer: str | None = None
    utm_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None
    utm_content: str | None = None
    utm_term: str | None = None


@dataclass(frozen=True)
class Event:
    """A stored analytics event."""

    event_id: str
    event_name: EventName
    occurred_at: int  # epoch milliseconds, server assigned
    visitor_id: str
    session_id: str
    page_path: str
    link_id: str | None = None
    label: str | None = None
    destination_url: str | None = None
    referrer: str | None = None
    utm_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None
    utm_content: str | None = None
    utm_term: str | None = None
    user_agent: str = ""
    is_bot: bool = False
    country: str | None = None
    region: str | None = None
    city: str | None = None
    timezone: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    device: str | None = None
    os: str | None = None
    browser: str | None = None


@dataclass(frozen=True)
class StoreResult:
    """Outcome of an append; deduped means the event_id already existed."""

    deduped: bool = False


@dataclass(frozen=True)
class TimeRange:
    """Resolved reporting window, both bounds inclusive, epoch milliseconds."""

    start_ms: int
    end_ms: int
    preset: RangePreset = "7d"


# --- Input Models ---


@dataclass(frozen=True)
class TrackInput:
    """Input for ingesting one raw event."""

    body: Any
    user_agent: str = ""
    geo: GeoInfo = field(default_factory=GeoInfo)


@dataclass(frozen=True)
class SummaryInput:
    """Input for the dashboard summary and the per-link breakdown."""

    range: str | None = None
    start: str | None = None
    end: str | None = None


# --- Output Models ---


@dataclass(frozen=True)
class TrackOutput:
    """Result of an ingest call."""

    event: Event | None = None
    accepted: bool = False
    deduped: bool = False
    errors: list[AnalyticsValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class Totals:
    pageviews: int = 0
    clicks: int = 0
    uniques: int = 0
    ctr: float = 0.0


@dataclass(frozen=True)
class Summary:
    """Dashboard summary payload; each section is an independent query."""

    time_range: TimeRange
    totals: Totals
    top_links: list[dict[str, Any]] = field(default_factory=list)
    top_referrers: list[dict[str, Any]] = field(default_factory=list)
    top_countries: list[dict[str, Any]] = field(default_factory=list)
    locations: list[dict[str, Any]] = field(default_factory=list)
    devices: list[dict[str, Any]] = field(default_factory=list)
    operating_systems: list[dict[str, Any]] = field(default_factory=list)
    browsers: list[dict[str, Any]] = field(default_factory=list)
    timeseries: list[dict[str, Any]] = field(default_factory=list)
    peak_hours: list[dict[str, Any]] = field(default_factory=list)
    utm_campaigns: list[dict[str, Any]] = field(default_factory=list)
    recent_activity: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class SummaryOutput:
    summary: Summary | None = None
    errors: list[AnalyticsValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class LinksOutput:
    time_range: TimeRange | None = None
    links: list[dict[str, Any]] = field(default_factory=list)
    errors: list[AnalyticsValidationError] = field(default_factory=list)
    success: bool = True
