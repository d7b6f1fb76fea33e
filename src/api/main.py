"""
Application factory.

Serve with: uvicorn --factory src.api.main:create_app
"""

import logging
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.adapters.clock import SystemClock
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.api.deps import Settings, get_settings
from src.api.errors import ApiError, api_error_handler
from src.api.middleware import (
    AllowListCORSMiddleware,
    SecureHeadersMiddleware,
    StripTrailingSlashMiddleware,
    UnhandledErrorMiddleware,
)
from src.api.routes import auth, summary, track
from src.app_shell.rate_limit import RateLimiter
from src.rules.loader import load_rules
from src.rules.models import Rules

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def init_database(settings: Settings) -> None:
    """Create the database directory and apply pending migrations."""
    Path(settings.db_path).parent.mkdir(parents=True, exist_ok=True)
    applied = SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()
    if applied:
        logger.info("Applied migrations: %s", ", ".join(applied))


async def http_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, StarletteHTTPException)
    # Routing is by path and method together; a wrong method is an unknown route
    if exc.status_code in (404, 405):
        return JSONResponse({"error": "Not found"}, status_code=404)
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code)


async def request_validation_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse({"error": "invalid_request"}, status_code=400)


def create_app(
    settings: Settings | None = None,
    rules: Rules | None = None,
    clock: SystemClock | None = None,
    rate_limiter: RateLimiter | None = None,
) -> FastAPI:
    """Build the API. Rules load and migrations run here so a bad deploy fails fast."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    if rules is None:
        rules = load_rules(settings.rules_path)
        logger.info("Rules loaded from %s", settings.rules_path)

    init_database(settings)

    app = FastAPI(
        title="Analytics API",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.rules = rules
    app.state.clock = clock or SystemClock()
    app.state.rate_limiter = rate_limiter or RateLimiter(rules.rate_limits)

    # --- Routers ---
    app.include_router(auth.router, prefix="/auth", tags=["Auth"])
    app.include_router(track.router, tags=["Ingest"])
    app.include_router(summary.router, tags=["Dashboard"])

    @app.get("/health")
    def health_check() -> dict[str, Any]:
        """Health check endpoint."""
        return {"ok": True}

    # --- Error handlers ---
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # --- Middleware (last added runs first) ---
    app.add_middleware(StripTrailingSlashMiddleware)
    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(
        AllowListCORSMiddleware,
        allow_origins=sorted(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=rules.security.cors_max_age_seconds,
    )
    app.add_middleware(SecureHeadersMiddleware, rules=rules.security)

    return app
