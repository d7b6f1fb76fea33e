"""
Reporting window resolution.

Translates a range selector into absolute epoch-millisecond bounds used as an
inclusive BETWEEN downstream.

- 7d/30d: end is the first instant of the day after the current UTC date,
  start is end minus 7 or 30 days
- custom: start date at 00:00:00.000 UTC through end date at 23:59:59.999 UTC
"""

from __future__ import annotations

import re
from datetime import UTC, date, datetime, time, timedelta
from typing import cast

from .models import AnalyticsValidationError, RangePreset, TimeRange

PRESET_DAYS: dict[str, int] = {"7d": 7, "30d": 30}
DEFAULT_RANGE = "7d"

_END_OF_DAY = time(23, 59, 59, 999000)
_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

# YYYY-MM-DD only
_DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def to_epoch_ms(dt: datetime) -> int:
    return (dt - _EPOCH) // timedelta(milliseconds=1)


def _parse_date(value: str) -> date | None:
    if _DATE_PATTERN.fullmatch(value) is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def resolve_range(
    range_value: str | None,
    now: datetime,
    start: str | None = None,
    end: str | None = None,
) -> tuple[TimeRange | None, list[AnalyticsValidationError]]:
    """Resolve a range selector relative to now (UTC)."""
    selector = range_value or DEFAULT_RANGE

    if selector in PRESET_DAYS:
        today = now.astimezone(UTC).date()
        end_dt = datetime.combine(today + timedelta(days=1), time.min, tzinfo=UTC)
        start_dt = end_dt - timedelta(days=PRESET_DAYS[selector])
        return (
            TimeRange(
                start_ms=to_epoch_ms(start_dt),
                end_ms=to_epoch_ms(end_dt),
                preset=cast(RangePreset, selector),
            ),
            [],
        )

    if selector != "custom":
        return None, [
            AnalyticsValidationError(
                code="invalid_range",
                message="range must be one of: 7d, 30d, custom",
                field_name="range",
            )
        ]

    if not start or not end:
        return None, [
            AnalyticsValidationError(
                code="invalid_custom_range",
                message="custom range requires start and end dates",
                field_name="start" if not start else "end",
            )
        ]

    start_date = _parse_date(start)
    end_date = _parse_date(end)
    if start_date is None or end_date is None or start_date > end_date:
        return None, [
            AnalyticsValidationError(
                code="invalid_custom_range",
                message="start and end must be ISO dates with start on or before end",
            )
        ]

    start_dt = datetime.combine(start_date, time.min, tzinfo=UTC)
    end_dt = datetime.combine(end_date, _END_OF_DAY, tzinfo=UTC)
    time_range = TimeRange(
        start_ms=to_epoch_ms(start_dt),
        end_ms=to_epoch_ms(end_dt),
        preset="custom",
    )
    return time_range, []
