"""
Analytics component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from .models import Event, StoreResult


class EventStorePort(Protocol):
    """Append-only event store."""

    def append(self, event: Event) -> StoreResult:
        """
        Persist one event atomically.

        A duplicate event_id is not an error: returns StoreResult(deduped=True)
        and leaves the existing row untouched.
        """
        ...


class AnalyticsQueryPort(Protocol):
    """Read-only grouped queries over stored events, bounds inclusive."""

    def get_totals(self, start_ms: int, end_ms: int) -> dict[str, int]:
        """Returns dict with pageviews, clicks, uniques."""
        ...

    def get_top_links(self, start_ms: int, end_ms: int, limit: int | None) -> list[dict[str, Any]]:
        ...

    def get_top_referrers(self, start_ms: int, end_ms: int, limit: int) -> list[dict[str, Any]]:
        ...

    def get_top_countries(self, start_ms: int, end_ms: int, limit: int) -> list[dict[str, Any]]:
        ...

    def get_locations(self, start_ms: int, end_ms: int, limit: int) -> list[dict[str, Any]]:
        ...

    def get_breakdown(self, dimension: str, start_ms: int, end_ms: int) -> list[dict[str, Any]]:
        """Pageviews/uniques grouped by device, os or browser."""
        ...

    def get_timeseries(self, start_ms: int, end_ms: int) -> list[dict[str, Any]]:
        ...

    def get_peak_hours(self, start_ms: int, end_ms: int) -> list[dict[str, Any]]:
        ...

    def get_utm_campaigns(self, start_ms: int, end_ms: int, limit: int) -> list[dict[str, Any]]:
        ...

    def get_recent_activity(self, start_ms: int, end_ms: int, limit: int) -> list[dict[str, Any]]:
        ...


class TimePort(Protocol):
    """Time provider interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...


class EventStoreError(Exception):
    """Raised by a store for any failure other than a duplicate event_id."""
