from datetime import UTC, datetime


class SystemClock:
    """Wall clock in UTC; serves both the analytics and rate-limit time ports."""

    def now(self) -> datetime:
        return datetime.now(UTC)

    def now_utc(self) -> datetime:
        return datetime.now(UTC)
