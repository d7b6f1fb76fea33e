"""
Track payload validation and sanitization.

Key behaviors:
- Body must be a JSON object, else invalid_json
- event_name must be an allowed value, else invalid_event
- Required identifiers must be non-empty strings, else missing_field
- event_id/visitor_id/session_id must be canonical UUID text, else invalid_id_format
- Optional strings are truncated to a per-field cap, never rejected for length
- Credentials are stripped from a parseable referrer URL before truncation
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, cast
from urllib.parse import urlsplit, urlunsplit

from .models import AnalyticsValidationError, EventName, TrackPayload

# --- Configuration ---


@dataclass(frozen=True)
class ValidationConfig:
    """Payload validation configuration."""

    allowed_events: frozenset[str] = field(
        default_factory=lambda: frozenset({"page_view", "link_click"}),
    )
    required_fields: tuple[str, ...] = ("event_id", "visitor_id", "session_id", "page_path")
    uuid_fields: tuple[str, ...] = ("event_id", "visitor_id", "session_id")

    max_identifier_length: int = 200
    max_path_length: int = 500
    max_url_length: int = 1000


DEFAULT_CONFIG = ValidationConfig()

UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)

IDENTIFIER_FIELDS = (
    "link_id",
    "label",
    "utm_source",
    "utm_medium",
    "utm_campaign",
    "utm_content",
    "utm_term",
)


# --- Helpers ---


def truncate(value: Any, max_length: int) -> str | None:
    """Return value capped at max_length, or None for empty/non-string input."""
    if not isinstance(value, str) or not value:
        return None
    return value[:max_length]


def is_uuid(value: str) -> bool:
    return UUID_PATTERN.fullmatch(value) is not None


def strip_url_credentials(url: str) -> str:
    """
    Remove username/password from an absolute URL.

    Strings that do not parse as an absolute URL are returned unchanged.
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return url

    if not parts.scheme or not parts.netloc:
        return url

    if "@" not in parts.netloc:
        return url

    host = parts.netloc.rpartition("@")[2]
    return urlunsplit((parts.scheme, host, parts.path, parts.query, parts.fragment))


def sanitize_referrer(value: Any, max_length: int) -> str | None:
    if not isinstance(value, str) or not value:
        return None
    return strip_url_credentials(value)[:max_length]


# --- Validation ---


def validate_track_payload(
    data: Any,
    config: ValidationConfig = DEFAULT_CONFIG,
) -> tuple[TrackPayload | None, list[AnalyticsValidationError]]:
    """
    Validate a raw track body.

    Fails fast: at most one error is returned, so the caller can surface a
    single kind and field hint.
    """
    if not isinstance(data, dict):
        return None, [
            AnalyticsValidationError(
                code="invalid_json",
                message="Request body must be a JSON object",
            )
        ]

    event_name = data.get("event_name")
    if not isinstance(event_name, str) or event_name not in config.allowed_events:
        return None, [
            AnalyticsValidationError(
                code="invalid_event",
                message=f"event_name must be one of: {', '.join(sorted(config.allowed_events))}",
                field_name="event_name",
            )
        ]

    for name in config.required_fields:
        value = data.get(name)
        if not isinstance(value, str) or not value:
            return None, [
                AnalyticsValidationError(
                    code="missing_field",
                    message=f"Field '{name}' is required",
                    field_name=name,
                )
            ]

    for name in config.uuid_fields:
        if not is_uuid(data[name]):
            return None, [
                AnalyticsValidationError(
                    code="invalid_id_format",
                    message=f"Field '{name}' must be a UUID",
                    field_name=name,
                )
            ]

    optional = {
        name: truncate(data.get(name), config.max_identifier_length)
        for name in IDENTIFIER_FIELDS
    }

    payload = TrackPayload(
        event_id=data["event_id"],
        event_name=cast(EventName, event_name),
        visitor_id=data["visitor_id"],
        session_id=data["session_id"],
        page_path=data["page_path"][: config.max_path_length],
        destination_url=truncate(data.get("destination_url"), config.max_url_length),
        referrer=sanitize_referrer(data.get("referrer"), config.max_url_length),
        **optional,
    )
    return payload, []
