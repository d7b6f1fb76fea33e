"""
SQLite aggregation queries behind the dashboard summary.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from src.adapters.sqlite_db import SQLiteAnalyticsQueryRepo, SQLiteEventStore
from src.components.analytics import AnalyticsSummaryService, Event, TimeRange, to_epoch_ms

# Tuesday 2024-03-05 10:00 UTC
BASE = datetime(2024, 3, 5, 10, 0, tzinfo=UTC)
BASE_MS = to_epoch_ms(BASE)
DAY_MS = 86_400_000

VISITOR_A = str(uuid4())
VISITOR_B = str(uuid4())
VISITOR_BOT = str(uuid4())


def make_event(offset_seconds: int = 0, **overrides) -> Event:
    event = Event(
        event_id=str(uuid4()),
        event_name="page_view",
        occurred_at=BASE_MS + offset_seconds * 1000,
        visitor_id=VISITOR_A,
        session_id=str(uuid4()),
        page_path="/",
        device="Desktop",
        os="Windows 10/11",
        browser="Chrome",
    )
    return replace(event, **overrides)


@pytest.fixture
def window() -> TimeRange:
    return TimeRange(start_ms=BASE_MS - DAY_MS, end_ms=BASE_MS + DAY_MS)


@pytest.fixture
def seeded(event_store: SQLiteEventStore, query_repo: SQLiteAnalyticsQueryRepo):
    events = [
        make_event(
            1,
            referrer="https://google.com/",
            country="US",
            city="Austin",
            latitude=30.27,
            longitude=-97.74,
            utm_source="newsletter",
        ),
        make_event(
            2,
            visitor_id=VISITOR_B,
            referrer="https://google.com/",
            country="US",
            device="iPhone",
            os="iOS 17",
            browser="Safari",
        ),
        make_event(3, country="DE"),
        make_event(4, event_name="link_click", link_id="gh", label="GitHub", country="US"),
        make_event(
            5,
            event_name="link_click",
            visitor_id=VISITOR_B,
            link_id="gh",
            label="GitHub",
            country="US",
        ),
        make_event(
            6, event_name="link_click", visitor_id=VISITOR_B, link_id="li", label="LinkedIn"
        ),
        make_event(7, visitor_id=VISITOR_BOT, is_bot=True, country="US", referrer="https://bot/"),
        # Outside the window
        make_event(-30 * 86_400, country="FR"),
    ]
    for event in events:
        event_store.append(event)
    return query_repo


class TestTotals:
    def test_counts_exclude_bots(self, seeded, window):
        totals = seeded.get_totals(window.start_ms, window.end_ms)
        assert totals == {"pageviews": 3, "clicks": 3, "uniques": 2}

    def test_empty_window_is_zero(self, query_repo, window):
        assert query_repo.get_totals(window.start_ms, window.end_ms) == {
            "pageviews": 0,
            "clicks": 0,
            "uniques": 0,
        }

    def test_bounds_inclusive(self, event_store, query_repo):
        event_store.append(make_event(0))
        assert query_repo.get_totals(BASE_MS, BASE_MS)["pageviews"] == 1
        assert query_repo.get_totals(BASE_MS + 1, BASE_MS + 10)["pageviews"] == 0


class TestSections:
    def test_top_links(self, seeded, window):
        rows = seeded.get_top_links(window.start_ms, window.end_ms, 10)
        assert [(r["link_id"], r["clicks"], r["uniques"]) for r in rows] == [
            ("gh", 2, 2),
            ("li", 1, 1),
        ]

    def test_top_links_limit(self, seeded, window):
        assert len(seeded.get_top_links(window.start_ms, window.end_ms, 1)) == 1
        assert len(seeded.get_top_links(window.start_ms, window.end_ms, None)) == 2

    def test_top_referrers(self, seeded, window):
        rows = seeded.get_top_referrers(window.start_ms, window.end_ms, 10)
        assert rows[0] == {"referrer": "https://google.com/", "pageviews": 2}

    def test_top_countries(self, seeded, window):
        rows = seeded.get_top_countries(window.start_ms, window.end_ms, 15)
        assert [r["country"] for r in rows] == ["US", "DE"]
        us = rows[0]
        assert (us["pageviews"], us["clicks"], us["uniques"]) == (2, 2, 2)
        assert "FR" not in [r["country"] for r in rows]

    def test_locations_need_both_coordinates(self, seeded, window):
        rows = seeded.get_locations(window.start_ms, window.end_ms, 100)
        assert len(rows) == 1
        assert rows[0]["city"] == "Austin"
        assert rows[0]["pageviews"] == 1

    def test_device_breakdown(self, seeded, window):
        rows = seeded.get_breakdown("device", window.start_ms, window.end_ms)
        assert [(r["device"], r["pageviews"]) for r in rows] == [("Desktop", 2), ("iPhone", 1)]

    def test_browser_breakdown(self, seeded, window):
        rows = seeded.get_breakdown("browser", window.start_ms, window.end_ms)
        assert rows[0]["browser"] == "Chrome"

    def test_unknown_breakdown_rejected(self, seeded, window):
        with pytest.raises(ValueError):
            seeded.get_breakdown("event_id; DROP TABLE events", window.start_ms, window.end_ms)

    def test_timeseries_by_utc_day(self, seeded, window):
        rows = seeded.get_timeseries(window.start_ms, window.end_ms)
        assert rows == [{"day": "2024-03-05", "pageviews": 3, "clicks": 3}]

    def test_peak_hours(self, seeded, window):
        rows = seeded.get_peak_hours(window.start_ms, window.end_ms)
        assert rows == [{"hour": 10, "day_of_week": 2, "pageviews": 3, "clicks": 3}]

    def test_utm_campaigns(self, seeded, window):
        rows = seeded.get_utm_campaigns(window.start_ms, window.end_ms, 20)
        assert len(rows) == 1
        assert rows[0]["utm_source"] == "newsletter"
        assert rows[0]["pageviews"] == 1

    def test_recent_activity_newest_first_without_bots(self, seeded, window):
        rows = seeded.get_recent_activity(window.start_ms, window.end_ms, 50)
        assert len(rows) == 6
        assert rows[0]["link_id"] == "li"
        assert [r["occurred_at"] for r in rows] == sorted(
            (r["occurred_at"] for r in rows), reverse=True
        )
        assert all(r["referrer"] != "https://bot/" for r in rows)


class TestSummaryService:
    def test_summary_over_sqlite(self, seeded, window):
        summary = AnalyticsSummaryService(repo=seeded).get_summary(window)
        assert summary.totals.pageviews == 3
        assert summary.totals.ctr == 1.0
        assert summary.top_links[0]["link_id"] == "gh"
        assert len(summary.recent_activity) == 6

    def test_window_excludes_older_events(self, seeded):
        month_ago = BASE - timedelta(days=30)
        narrow = TimeRange(
            start_ms=to_epoch_ms(month_ago - timedelta(hours=1)),
            end_ms=to_epoch_ms(month_ago + timedelta(hours=1)),
        )
        summary = AnalyticsSummaryService(repo=seeded).get_summary(narrow)
        assert summary.totals.pageviews == 1
        assert summary.top_countries[0]["country"] == "FR"
