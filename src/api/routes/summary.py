"""
Dashboard query routes: the summary payload and the per-link breakdown.

Both are gated by the admin bearer token before any query runs.
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query

from src.adapters.clock import SystemClock
from src.adapters.sqlite_db import SQLiteAnalyticsQueryRepo
from src.api.deps import get_clock, get_query_repo, get_rules, require_admin
from src.api.errors import error
from src.api.schemas import LinksResponse, SummaryResponse, TotalsModel
from src.components.analytics import (
    AnalyticsValidationError,
    SummaryInput,
    run_links,
    run_summary,
)
from src.rules.models import Rules

router = APIRouter(dependencies=[Depends(require_admin)])


def _range_error(errors: list[AnalyticsValidationError]) -> Exception:
    code = errors[0].code if errors else "invalid_range"
    return error(400, code)


@router.get("/summary", response_model=SummaryResponse)
def get_summary(
    range_: str | None = Query(None, alias="range"),
    start: str | None = None,
    end: str | None = None,
    repo: SQLiteAnalyticsQueryRepo = Depends(get_query_repo),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> SummaryResponse:
    """Full aggregation payload for the requested range."""
    out = run_summary(
        SummaryInput(range=range_, start=start, end=end),
        repo=repo,
        time_port=clock,
        rules=rules,
    )
    if not out.success or out.summary is None:
        raise _range_error(out.errors)

    summary = out.summary
    return SummaryResponse(
        range=summary.time_range.preset,
        start_ms=summary.time_range.start_ms,
        end_ms=summary.time_range.end_ms,
        totals=TotalsModel(**asdict(summary.totals)),
        top_links=summary.top_links,
        top_referrers=summary.top_referrers,
        top_countries=summary.top_countries,
        locations=summary.locations,
        devices=summary.devices,
        operating_systems=summary.operating_systems,
        browsers=summary.browsers,
        timeseries=summary.timeseries,
        peak_hours=summary.peak_hours,
        utm_campaigns=summary.utm_campaigns,
        recent_activity=summary.recent_activity,
    )


@router.get("/links", response_model=LinksResponse)
def get_links(
    range_: str | None = Query(None, alias="range"),
    start: str | None = None,
    end: str | None = None,
    repo: SQLiteAnalyticsQueryRepo = Depends(get_query_repo),
    clock: SystemClock = Depends(get_clock),
) -> LinksResponse:
    """Per-link clicks and uniques, no row limit."""
    out = run_links(
        SummaryInput(range=range_, start=start, end=end),
        repo=repo,
        time_port=clock,
    )
    if not out.success or out.time_range is None:
        raise _range_error(out.errors)

    return LinksResponse(
        range=out.time_range.preset,
        start_ms=out.time_range.start_ms,
        end_ms=out.time_range.end_ms,
        links=out.links,
    )
