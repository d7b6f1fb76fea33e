"""
SQLite adapters for the analytics event store.

The write path appends one row per event; the primary key on event_id is the
only concurrency control. The read path runs grouped aggregate queries with
inclusive BETWEEN bounds on occurred_at (epoch milliseconds).
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any

from src.components.analytics.models import Event, StoreResult
from src.components.analytics.ports import EventStoreError

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def is_duplicate_key(error: sqlite3.IntegrityError) -> bool:
    return "UNIQUE" in str(error) or "PRIMARY KEY" in str(error)


# Shared SELECT fragments; every count excludes bot traffic
PAGEVIEWS = "SUM(CASE WHEN event_name = 'page_view' AND is_bot = 0 THEN 1 ELSE 0 END)"
CLICKS = "SUM(CASE WHEN event_name = 'link_click' AND is_bot = 0 THEN 1 ELSE 0 END)"
UNIQUES = "COUNT(DISTINCT CASE WHEN is_bot = 0 THEN visitor_id END)"
EVENT_DATETIME = "datetime(occurred_at / 1000, 'unixepoch')"

BREAKDOWN_COLUMNS = {"device": "device", "os": "os", "browser": "browser"}


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(
        self,
        db_path: str,
        connection: sqlite3.Connection | None = None,
        timeout_seconds: float = 5.0,
    ):
        self.db_path = db_path
        self._external_conn = connection
        self._timeout = timeout_seconds

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn

        conn = sqlite3.connect(self.db_path, timeout=self._timeout)
        conn.row_factory = dict_factory
        return conn

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None


# -----------------------------------------------------------------------------
# Event Store (write path)
# -----------------------------------------------------------------------------


class SQLiteEventStore(SQLiteRepoBase):
    """SQLite implementation of EventStorePort."""

    def append(self, event: Event) -> StoreResult:
        conn = self._get_conn()
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO events (
                        event_id, event_name, occurred_at, visitor_id, session_id, page_path,
                        link_id, label, destination_url, referrer,
                        utm_source, utm_medium, utm_campaign, utm_content, utm_term,
                        user_agent, is_bot, country, region, city, timezone,
                        latitude, longitude, device, os, browser
                    ) VALUES (
                        ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?,
                        ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?
                    )
                    """,
                    (
                        event.event_id,
                        event.event_name,
                        event.occurred_at,
                        event.visitor_id,
                        event.session_id,
                        event.page_path,
                        event.link_id,
                        event.label,
                        event.destination_url,
                        event.referrer,
                        event.utm_source,
                        event.utm_medium,
                        event.utm_campaign,
                        event.utm_content,
                        event.utm_term,
                        event.user_agent,
                        1 if event.is_bot else 0,
                        event.country,
                        event.region,
                        event.city,
                        event.timezone,
                        event.latitude,
                        event.longitude,
                        event.device,
                        event.os,
                        event.browser,
                    ),
                )
            return StoreResult(deduped=False)
        except sqlite3.IntegrityError as e:
            if is_duplicate_key(e):
                return StoreResult(deduped=True)
            logger.error("Event insert rejected: %s", e)
            raise EventStoreError(str(e)) from e
        except sqlite3.Error as e:
            logger.error("Event insert failed: %s", e)
            raise EventStoreError(str(e)) from e
        finally:
            if self._should_close():
                conn.close()

    def get_by_id(self, event_id: str) -> dict[str, Any] | None:
        conn = self._get_conn()
        try:
            row: dict[str, Any] | None = conn.execute(
                "SELECT * FROM events WHERE event_id = ?", (event_id,)
            ).fetchone()
            return row
        finally:
            if self._should_close():
                conn.close()

    def count(self) -> int:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT COUNT(*) AS n FROM events").fetchone()
            return int(row["n"])
        finally:
            if self._should_close():
                conn.close()


# -----------------------------------------------------------------------------
# Aggregation Queries (read path)
# -----------------------------------------------------------------------------


class SQLiteAnalyticsQueryRepo(SQLiteRepoBase):
    """SQLite implementation of AnalyticsQueryPort."""

    def _all(self, sql: str, params: tuple[Any, ...]) -> list[dict[str, Any]]:
        conn = self._get_conn()
        try:
            return list(conn.execute(sql, params).fetchall())
        finally:
            if self._should_close():
                conn.close()

    def get_totals(self, start_ms: int, end_ms: int) -> dict[str, int]:
        rows = self._all(
            f"""
            SELECT {PAGEVIEWS} AS pageviews, {CLICKS} AS clicks, {UNIQUES} AS uniques
            FROM events
            WHERE occurred_at BETWEEN ? AND ?
            """,
            (start_ms, end_ms),
        )
        row = rows[0] if rows else {}
        return {
            "pageviews": row.get("pageviews") or 0,
            "clicks": row.get("clicks") or 0,
            "uniques": row.get("uniques") or 0,
        }

    def get_top_links(
        self, start_ms: int, end_ms: int, limit: int | None
    ) -> list[dict[str, Any]]:
        sql = f"""
            SELECT link_id, label, {CLICKS} AS clicks, {UNIQUES} AS uniques
            FROM events
            WHERE occurred_at BETWEEN ? AND ? AND link_id IS NOT NULL
            GROUP BY link_id, label
            ORDER BY clicks DESC
        """
        if limit is None:
            return self._all(sql, (start_ms, end_ms))
        return self._all(sql + " LIMIT ?", (start_ms, end_ms, limit))

    def get_top_referrers(self, start_ms: int, end_ms: int, limit: int) -> list[dict[str, Any]]:
        return self._all(
            f"""
            SELECT referrer, {PAGEVIEWS} AS pageviews
            FROM events
            WHERE occurred_at BETWEEN ? AND ? AND referrer IS NOT NULL AND referrer <> ''
            GROUP BY referrer
            ORDER BY pageviews DESC
            LIMIT ?
            """,
            (start_ms, end_ms, limit),
        )

    def get_top_countries(self, start_ms: int, end_ms: int, limit: int) -> list[dict[str, Any]]:
        return self._all(
            f"""
            SELECT country, {PAGEVIEWS} AS pageviews, {CLICKS} AS clicks, {UNIQUES} AS uniques
            FROM events
            WHERE occurred_at BETWEEN ? AND ? AND country IS NOT NULL
            GROUP BY country
            ORDER BY pageviews DESC
            LIMIT ?
            """,
            (start_ms, end_ms, limit),
        )

    def get_locations(self, start_ms: int, end_ms: int, limit: int) -> list[dict[str, Any]]:
        return self._all(
            f"""
            SELECT latitude, longitude, city, country,
                   {PAGEVIEWS} AS pageviews, {UNIQUES} AS uniques
            FROM events
            WHERE occurred_at BETWEEN ? AND ?
              AND latitude IS NOT NULL
              AND longitude IS NOT NULL
            GROUP BY latitude, longitude, city, country
            ORDER BY pageviews DESC
            LIMIT ?
            """,
            (start_ms, end_ms, limit),
        )

    def get_breakdown(self, dimension: str, start_ms: int, end_ms: int) -> list[dict[str, Any]]:
        column = BREAKDOWN_COLUMNS.get(dimension)
        if column is None:
            raise ValueError(f"Unknown breakdown dimension: {dimension}")

        return self._all(
            f"""
            SELECT {column}, {PAGEVIEWS} AS pageviews, {UNIQUES} AS uniques
            FROM events
            WHERE occurred_at BETWEEN ? AND ? AND {column} IS NOT NULL
            GROUP BY {column}
            ORDER BY pageviews DESC
            """,
            (start_ms, end_ms),
        )

    def get_timeseries(self, start_ms: int, end_ms: int) -> list[dict[str, Any]]:
        return self._all(
            f"""
            SELECT strftime('%Y-%m-%d', {EVENT_DATETIME}) AS day,
                   {PAGEVIEWS} AS pageviews, {CLICKS} AS clicks
            FROM events
            WHERE occurred_at BETWEEN ? AND ?
            GROUP BY day
            ORDER BY day ASC
            """,
            (start_ms, end_ms),
        )

    def get_peak_hours(self, start_ms: int, end_ms: int) -> list[dict[str, Any]]:
        # day_of_week follows strftime('%w'): 0 is Sunday
        return self._all(
            f"""
            SELECT CAST(strftime('%H', {EVENT_DATETIME}) AS INTEGER) AS hour,
                   CAST(strftime('%w', {EVENT_DATETIME}) AS INTEGER) AS day_of_week,
                   {PAGEVIEWS} AS pageviews, {CLICKS} AS clicks
            FROM events
            WHERE occurred_at BETWEEN ? AND ? AND is_bot = 0
            GROUP BY hour, day_of_week
            ORDER BY hour, day_of_week
            """,
            (start_ms, end_ms),
        )

    def get_utm_campaigns(self, start_ms: int, end_ms: int, limit: int) -> list[dict[str, Any]]:
        return self._all(
            f"""
            SELECT utm_source, utm_medium, utm_campaign,
                   {PAGEVIEWS} AS pageviews, {CLICKS} AS clicks, {UNIQUES} AS uniques
            FROM events
            WHERE occurred_at BETWEEN ? AND ?
              AND is_bot = 0
              AND (utm_source IS NOT NULL OR utm_medium IS NOT NULL OR utm_campaign IS NOT NULL)
            GROUP BY utm_source, utm_medium, utm_campaign
            ORDER BY pageviews DESC
            LIMIT ?
            """,
            (start_ms, end_ms, limit),
        )

    def get_recent_activity(self, start_ms: int, end_ms: int, limit: int) -> list[dict[str, Any]]:
        return self._all(
            """
            SELECT event_name, occurred_at, page_path, link_id, label,
                   country, city, device, browser, referrer
            FROM events
            WHERE occurred_at BETWEEN ? AND ? AND is_bot = 0
            ORDER BY occurred_at DESC
            LIMIT ?
            """,
            (start_ms, end_ms, limit),
        )
