"""
Event ingestion route.

Public and unauthenticated; abuse is bounded by the per-IP rate limiter and
bot traffic is stored flagged rather than rejected.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from src.adapters.clock import SystemClock
from src.adapters.sqlite_db import SQLiteEventStore
from src.api.deps import (
    get_clock,
    get_client_ip,
    get_event_store,
    get_geo,
    get_rate_limiter,
    get_rules,
)
from src.api.errors import error
from src.api.schemas import TrackResponse
from src.app_shell.rate_limit import RateLimiter
from src.components.analytics import EventStoreError, GeoInfo, TrackInput, run_track
from src.rules.models import Rules

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/track", response_model=TrackResponse, response_model_exclude_none=True)
async def track(
    request: Request,
    client_ip: str = Depends(get_client_ip),
    geo: GeoInfo = Depends(get_geo),
    limiter: RateLimiter = Depends(get_rate_limiter),
    event_store: SQLiteEventStore = Depends(get_event_store),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> TrackResponse:
    """Ingest one page_view or link_click event."""
    if not limiter.check_ingest(client_ip):
        logger.debug("Ingest rate limit hit for %s", client_ip)
        raise error(429, "rate_limited")

    try:
        body = await request.json()
    except ValueError:
        raise error(400, "invalid_json") from None

    inp = TrackInput(
        body=body,
        user_agent=request.headers.get("User-Agent", ""),
        geo=geo,
    )
    try:
        result = await run_in_threadpool(
            run_track, inp, event_store=event_store, time_port=clock, rules=rules
        )
    except EventStoreError as e:
        raise error(500, "db_error", detail=str(e)) from e

    if not result.success:
        first = result.errors[0]
        if first.field_name:
            raise error(400, first.code, field=first.field_name)
        raise error(400, first.code)

    if result.deduped:
        return TrackResponse(ok=True, deduped=True)
    return TrackResponse(ok=True)
