"""
Per-IP fixed-window rate limiting.

A window opens on the first request for a key and counts every request until
the window length has elapsed, then restarts at the current request. Bursts
straddling a window boundary can admit up to twice the nominal rate.

State is process-local. Expired windows are swept whenever the number of
tracked keys exceeds the configured bound, so memory stays bounded for a
long-running process.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from threading import Lock
from typing import Protocol

from src.rules.models import RateLimitRules

logger = logging.getLogger(__name__)


class TimePort(Protocol):
    """Protocol for time operations (enables testing with deterministic time)."""

    def now(self) -> datetime:
        """Return current UTC time."""
        ...


class SystemTimeAdapter:
    """Production time adapter using system clock."""

    def now(self) -> datetime:
        return datetime.now(UTC)


@dataclass
class _Window:
    started_at: datetime
    count: int


class RateLimiter:
    def __init__(
        self,
        rules: RateLimitRules,
        time_port: TimePort | None = None,
    ):
        self.rules = rules
        self._time = time_port if time_port is not None else SystemTimeAdapter()
        self._windows: dict[str, _Window] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        return len(self._windows)

    def _evict(self, now: datetime) -> None:
        longest = max(self.rules.ingest.window_seconds, self.rules.auth.window_seconds)
        cutoff = now - timedelta(seconds=longest)
        stale = [k for k, w in self._windows.items() if w.started_at < cutoff]
        for key in stale:
            del self._windows[key]

        overflow = len(self._windows) + 1 - self.rules.max_tracked_keys
        if overflow > 0:
            # Still full: drop the oldest windows to make room for one more
            oldest = sorted(self._windows, key=lambda k: self._windows[k].started_at)
            for key in oldest[:overflow]:
                del self._windows[key]
            logger.warning("Rate limiter over capacity, evicted %d active windows", overflow)

    def allow_request(self, key: str, window: int, limit: int) -> bool:
        """
        Count a request against key's window.
        Returns False once the window holds more than limit requests.
        """
        if limit <= 0:
            return False

        with self._lock:
            now = self._time.now()
            current = self._windows.get(key)

            if current is None or now - current.started_at > timedelta(seconds=window):
                if current is None and len(self._windows) >= self.rules.max_tracked_keys:
                    self._evict(now)
                current = _Window(started_at=now, count=0)
                self._windows[key] = current

            current.count += 1
            allowed = current.count <= limit

        if not allowed:
            logger.debug("Rate limit exceeded for %s", key)
        return allowed

    def check_ingest(self, ip: str) -> bool:
        cfg = self.rules.ingest
        limit = cfg.max_requests if cfg.max_requests is not None else 15

        return self.allow_request(f"ingest:{ip}", cfg.window_seconds, limit)

    def check_auth(self, ip: str) -> bool:
        cfg = self.rules.auth
        limit = cfg.max_attempts if cfg.max_attempts is not None else 5

        return self.allow_request(f"auth:{ip}", cfg.window_seconds, limit)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
