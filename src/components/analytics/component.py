"""
Analytics component - Event ingestion and dashboard aggregation.

Invariants:
- occurred_at, is_bot, geolocation and device labels are server-derived
- A duplicate event_id is success with deduped=True, never an overwrite
- Invalid payloads never reach the store
- Summary sections share one inclusive window and exclude bot traffic
- CTR is 0 when there are no pageviews
"""

from __future__ import annotations

from src.rules.models import Rules

from ._aggregate import SummaryConfig, create_summary_service
from ._impl import AnalyticsIngestionService, IngestionConfig
from ._range import resolve_range
from ._useragent import UAConfig
from ._validate import ValidationConfig
from .models import (
    LinksOutput,
    SummaryInput,
    SummaryOutput,
    TrackInput,
    TrackOutput,
)
from .ports import AnalyticsQueryPort, EventStorePort, TimePort


def build_ingestion_config(rules: Rules | None) -> IngestionConfig:
    """Build ingestion config from the rules file."""
    if rules is None:
        return IngestionConfig()

    lengths = rules.ingest.max_lengths
    return IngestionConfig(
        validation=ValidationConfig(
            allowed_events=frozenset(rules.ingest.allowed_events),
            max_identifier_length=lengths.identifier,
            max_path_length=lengths.path,
            max_url_length=lengths.url,
        ),
        user_agent=UAConfig(
            bot_tokens=tuple(rules.bots.user_agent_tokens),
            treat_empty_as_bot=rules.bots.treat_empty_user_agent_as_bot,
        ),
    )


def build_summary_config(rules: Rules | None) -> SummaryConfig:
    """Build summary row limits from the rules file."""
    if rules is None:
        return SummaryConfig()

    limits = rules.summary.limits
    return SummaryConfig(
        top_links=limits.top_links,
        top_referrers=limits.top_referrers,
        top_countries=limits.top_countries,
        locations=limits.locations,
        utm_campaigns=limits.utm_campaigns,
        recent_activity=limits.recent_activity,
    )


# --- Component Entry Points ---


def run_track(
    inp: TrackInput,
    *,
    event_store: EventStorePort,
    time_port: TimePort | None = None,
    rules: Rules | None = None,
) -> TrackOutput:
    """
    Ingest one tracked event.

    Args:
        inp: Raw body plus the request's user agent and geolocation.
        event_store: Event store port.
        time_port: Optional time port.
        rules: Optional rules for limits and bot tokens.

    Returns:
        TrackOutput with the stored event, the deduped flag, or errors.
    """
    service = AnalyticsIngestionService(
        event_store=event_store,
        time_port=time_port,
        config=build_ingestion_config(rules),
    )
    return service.ingest(inp.body, user_agent=inp.user_agent, geo=inp.geo)


def run_summary(
    inp: SummaryInput,
    *,
    repo: AnalyticsQueryPort,
    time_port: TimePort,
    rules: Rules | None = None,
) -> SummaryOutput:
    """
    Compute the dashboard summary for a range.

    The window is resolved first; an invalid range returns errors without
    running any query.
    """
    time_range, errors = resolve_range(inp.range, time_port.now_utc(), inp.start, inp.end)
    if time_range is None:
        return SummaryOutput(errors=errors, success=False)

    service = create_summary_service(repo, build_summary_config(rules))
    return SummaryOutput(summary=service.get_summary(time_range))


def run_links(
    inp: SummaryInput,
    *,
    repo: AnalyticsQueryPort,
    time_port: TimePort,
) -> LinksOutput:
    """Per-link click and unique counts for a range."""
    time_range, errors = resolve_range(inp.range, time_port.now_utc(), inp.start, inp.end)
    if time_range is None:
        return LinksOutput(errors=errors, success=False)

    service = create_summary_service(repo)
    return LinksOutput(time_range=time_range, links=service.get_links(time_range))
