"""
AnalyticsIngestionService - Event ingestion with validation and enrichment.

Key behaviors:
- Payload validated and sanitized before anything touches the store
- occurred_at, is_bot, geolocation and device labels are server-derived
- Duplicate event_id is a successful no-op flagged as deduped
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from ._range import to_epoch_ms
from ._useragent import UAConfig, classify_user_agent
from ._validate import ValidationConfig, validate_track_payload
from .models import (
    AnalyticsValidationError,
    Event,
    GeoInfo,
    StoreResult,
    TrackOutput,
)
from .ports import EventStorePort, TimePort

logger = logging.getLogger(__name__)


# --- Configuration ---


@dataclass(frozen=True)
class IngestionConfig:
    """Analytics ingestion configuration."""

    validation: ValidationConfig = field(default_factory=ValidationConfig)
    user_agent: UAConfig = field(default_factory=UAConfig)


DEFAULT_CONFIG = IngestionConfig()


# --- Default Implementations ---


class InMemoryEventStore:
    """In-memory event store for testing/dev."""

    def __init__(self) -> None:
        self._events: dict[str, Event] = {}

    def append(self, event: Event) -> StoreResult:
        if event.event_id in self._events:
            return StoreResult(deduped=True)
        self._events[event.event_id] = event
        return StoreResult(deduped=False)

    def get_all(self) -> list[Event]:
        """Get all stored events (for testing)."""
        return list(self._events.values())


class DefaultTimePort:
    """Default time provider."""

    def now_utc(self) -> datetime:
        return datetime.now(UTC)


# --- Analytics Ingestion Service ---


class AnalyticsIngestionService:
    """
    Analytics ingestion service.

    Validates, enriches and appends one event per call.
    """

    def __init__(
        self,
        event_store: EventStorePort,
        time_port: TimePort | None = None,
        config: IngestionConfig | None = None,
    ) -> None:
        self._event_store = event_store
        self._time = time_port or DefaultTimePort()
        self._config = config or DEFAULT_CONFIG

    def build_event(
        self,
        data: Any,
        user_agent: str,
        geo: GeoInfo,
    ) -> tuple[Event | None, list[AnalyticsValidationError]]:
        """Validate the client body and attach the server-trusted fields."""
        payload, errors = validate_track_payload(data, self._config.validation)
        if payload is None:
            return None, errors

        classification = classify_user_agent(user_agent, self._config.user_agent)
        info = classification.device_info

        event = Event(
            event_id=payload.event_id,
            event_name=payload.event_name,
            occurred_at=to_epoch_ms(self._time.now_utc()),
            visitor_id=payload.visitor_id,
            session_id=payload.session_id,
            page_path=payload.page_path,
            link_id=payload.link_id,
            label=payload.label,
            destination_url=payload.destination_url,
            referrer=payload.referrer,
            utm_source=payload.utm_source,
            utm_medium=payload.utm_medium,
            utm_campaign=payload.utm_campaign,
            utm_content=payload.utm_content,
            utm_term=payload.utm_term,
            user_agent=(user_agent or "")[: self._config.validation.max_path_length],
            is_bot=classification.is_bot,
            country=geo.country,
            region=geo.region,
            city=geo.city,
            timezone=geo.timezone,
            latitude=geo.latitude,
            longitude=geo.longitude,
            device=info.device,
            os=info.os,
            browser=info.browser,
        )
        return event, []

    def ingest(
        self,
        data: Any,
        user_agent: str = "",
        geo: GeoInfo | None = None,
    ) -> TrackOutput:
        """
        Ingest one event.

        Store failures other than a duplicate key propagate to the caller.
        """
        event, errors = self.build_event(data, user_agent, geo or GeoInfo())
        if event is None:
            return TrackOutput(errors=errors, success=False)

        result = self._event_store.append(event)
        if result.deduped:
            logger.debug("Duplicate event_id %s ignored", event.event_id)

        return TrackOutput(event=event, accepted=True, deduped=result.deduped)


# --- Factory ---


def create_analytics_ingestion_service(
    event_store: EventStorePort,
    time_port: TimePort | None = None,
    config: IngestionConfig | None = None,
) -> AnalyticsIngestionService:
    """Create an AnalyticsIngestionService."""
    return AnalyticsIngestionService(
        event_store=event_store,
        time_port=time_port,
        config=config,
    )
