"""
AnalyticsSummaryService - Dashboard aggregation.

Builds the summary payload from independent grouped queries over a resolved
window. Bot traffic is excluded from every count and from the recent
activity feed.

Key behaviors:
- All sections share the same inclusive [start_ms, end_ms] bounds
- CTR is clicks / pageviews, and exactly 0.0 when there are no pageviews
- A failing section fails the whole summary (no partial payloads)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .models import Summary, TimeRange, Totals
from .ports import AnalyticsQueryPort

# --- Configuration ---


@dataclass(frozen=True)
class SummaryConfig:
    """Row limits per summary section."""

    top_links: int = 10
    top_referrers: int = 10
    top_countries: int = 15
    locations: int = 100
    utm_campaigns: int = 20
    recent_activity: int = 50


DEFAULT_CONFIG = SummaryConfig()


def calculate_ctr(clicks: int, pageviews: int) -> float:
    """Click-through rate, guarded against a zero denominator."""
    if not pageviews:
        return 0.0
    return clicks / pageviews


def build_totals(row: dict[str, Any] | None) -> Totals:
    row = row or {}
    pageviews = int(row.get("pageviews") or 0)
    clicks = int(row.get("clicks") or 0)
    uniques = int(row.get("uniques") or 0)
    return Totals(
        pageviews=pageviews,
        clicks=clicks,
        uniques=uniques,
        ctr=calculate_ctr(clicks, pageviews),
    )


class AnalyticsSummaryService:
    """Runs the dashboard queries against an AnalyticsQueryPort."""

    def __init__(
        self,
        repo: AnalyticsQueryPort,
        config: SummaryConfig | None = None,
    ) -> None:
        self._repo = repo
        self._config = config or DEFAULT_CONFIG

    def get_totals(self, time_range: TimeRange) -> Totals:
        return build_totals(self._repo.get_totals(time_range.start_ms, time_range.end_ms))

    def get_summary(self, time_range: TimeRange) -> Summary:
        start, end = time_range.start_ms, time_range.end_ms
        cfg = self._config

        return Summary(
            time_range=time_range,
            totals=self.get_totals(time_range),
            top_links=self._repo.get_top_links(start, end, cfg.top_links),
            top_referrers=self._repo.get_top_referrers(start, end, cfg.top_referrers),
            top_countries=self._repo.get_top_countries(start, end, cfg.top_countries),
            locations=self._repo.get_locations(start, end, cfg.locations),
            devices=self._repo.get_breakdown("device", start, end),
            operating_systems=self._repo.get_breakdown("os", start, end),
            browsers=self._repo.get_breakdown("browser", start, end),
            timeseries=self._repo.get_timeseries(start, end),
            peak_hours=self._repo.get_peak_hours(start, end),
            utm_campaigns=self._repo.get_utm_campaigns(start, end, cfg.utm_campaigns),
            recent_activity=self._repo.get_recent_activity(start, end, cfg.recent_activity),
        )

    def get_links(self, time_range: TimeRange) -> list[dict[str, Any]]:
        """Per-link clicks and uniques, no row limit and no per-link CTR."""
        return self._repo.get_top_links(time_range.start_ms, time_range.end_ms, None)


def create_summary_service(
    repo: AnalyticsQueryPort,
    config: SummaryConfig | None = None,
) -> AnalyticsSummaryService:
    return AnalyticsSummaryService(repo=repo, config=config)
