import logging
import math
import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends, Request

from src.adapters.auth.crypto import (
    Argon2PasswordVerifier,
    DisabledPasswordVerifier,
    PlainPasswordVerifier,
)
from src.adapters.clock import SystemClock
from src.adapters.sqlite_db import SQLiteAnalyticsQueryRepo, SQLiteEventStore
from src.api.errors import auth_error, error
from src.app_shell.rate_limit import RateLimiter
from src.components.analytics import GeoInfo
from src.components.auth import (
    AuthConfig,
    OriginCheckInput,
    PasswordVerifierPort,
    VerifyTokenInput,
    run_check_origin,
    run_verify_token,
)
from src.rules.models import Rules

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_IP = "0.0.0.0"

# Country codes the edge proxy uses for "unknown" and "Tor"
UNKNOWN_COUNTRIES = frozenset({"XX", "T1"})


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        data_dir = os.environ.get("ANALYTICS_DATA_DIR", "./data")
        self.db_path = os.environ.get("ANALYTICS_DB_PATH", f"{data_dir}/analytics.db")
        self.migrations_dir = os.environ.get(
            "ANALYTICS_MIGRATIONS_DIR", str(self.base_dir / "migrations")
        )
        self.rules_path = Path(
            os.environ.get("ANALYTICS_RULES_PATH", str(self.base_dir / "rules.yaml"))
        )
        origins = os.environ.get("ANALYTICS_ALLOWED_ORIGINS", "")
        self.allowed_origins = frozenset(o.strip() for o in origins.split(",") if o.strip())
        self.admin_token = os.environ.get("ADMIN_TOKEN") or None
        self.admin_password = os.environ.get("ADMIN_PASSWORD") or None
        self.admin_password_hash = os.environ.get("ADMIN_PASSWORD_HASH") or None
        self.trusted_ip_header = os.environ.get("ANALYTICS_TRUSTED_IP_HEADER", "CF-Connecting-IP")
        self.db_timeout_seconds = float(os.environ.get("ANALYTICS_DB_TIMEOUT_SECONDS", "5"))
        self.log_level = os.environ.get("ANALYTICS_LOG_LEVEL", "INFO").upper()


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- App-scoped singletons (set by create_app) ---
def get_app_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def get_rules(request: Request) -> Rules:
    rules: Rules = request.app.state.rules
    return rules


def get_clock(request: Request) -> SystemClock:
    clock: SystemClock = request.app.state.clock
    return clock


def get_rate_limiter(request: Request) -> RateLimiter:
    limiter: RateLimiter = request.app.state.rate_limiter
    return limiter


# --- Repos ---
def get_event_store(settings: Settings = Depends(get_app_settings)) -> SQLiteEventStore:
    return SQLiteEventStore(settings.db_path, timeout_seconds=settings.db_timeout_seconds)


def get_query_repo(settings: Settings = Depends(get_app_settings)) -> SQLiteAnalyticsQueryRepo:
    return SQLiteAnalyticsQueryRepo(settings.db_path, timeout_seconds=settings.db_timeout_seconds)


# --- Auth ---
def get_auth_config(settings: Settings = Depends(get_app_settings)) -> AuthConfig:
    return AuthConfig(
        admin_token=settings.admin_token,
        allowed_origins=settings.allowed_origins,
    )


def get_password_verifier(settings: Settings = Depends(get_app_settings)) -> PasswordVerifierPort:
    if settings.admin_password_hash:
        return Argon2PasswordVerifier(settings.admin_password_hash)
    if settings.admin_password:
        return PlainPasswordVerifier(settings.admin_password)
    return DisabledPasswordVerifier()


def require_admin(request: Request, config: AuthConfig = Depends(get_auth_config)) -> None:
    """Bearer gate for admin endpoints; runs before any handler work."""
    out = run_verify_token(VerifyTokenInput(request.headers.get("Authorization")), config)
    if not out.success:
        raise error(401, "unauthorized")


def require_trusted_origin(
    request: Request, config: AuthConfig = Depends(get_auth_config)
) -> None:
    """CSRF gate for state-changing auth endpoints."""
    out = run_check_origin(OriginCheckInput(request.headers.get("Origin")), config)
    if not out.success:
        logger.warning("Rejected %s %s: invalid origin", request.method, request.url.path)
        raise auth_error(403, out.error or "Invalid origin")


# --- Request context ---
def get_client_ip(request: Request, settings: Settings = Depends(get_app_settings)) -> str:
    forwarded = request.headers.get(settings.trusted_ip_header)
    if forwarded:
        return forwarded.split(",")[0].strip() or DEFAULT_CLIENT_IP
    return DEFAULT_CLIENT_IP


def _header(request: Request, name: str) -> str | None:
    value = request.headers.get(name)
    return value.strip() if value and value.strip() else None


def _coordinate(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        parsed = float(value)
    except ValueError:
        return None
    return parsed if math.isfinite(parsed) else None


def get_geo(request: Request) -> GeoInfo:
    """Geolocation from the edge proxy's visitor-location headers, never the body."""
    country = _header(request, "CF-IPCountry")
    if country and country.upper() in UNKNOWN_COUNTRIES:
        country = None

    return GeoInfo(
        country=country,
        region=_header(request, "CF-Region"),
        city=_header(request, "CF-IPCity"),
        timezone=_header(request, "CF-Timezone"),
        latitude=_coordinate(_header(request, "CF-IPLatitude")),
        longitude=_coordinate(_header(request, "CF-IPLongitude")),
    )
