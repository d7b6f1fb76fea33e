"""HTTP middleware: path normalisation, CORS, security headers, last-resort errors."""

from __future__ import annotations

import logging

from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp, Receive, Scope, Send

from src.rules.models import SecurityRules

logger = logging.getLogger(__name__)


class StripTrailingSlashMiddleware:
    """Route "/track/" like "/track" without a redirect (beacons do not follow them)."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            path: str = scope["path"]
            if len(path) > 1 and path.endswith("/"):
                scope = dict(scope)
                scope["path"] = path.rstrip("/") or "/"
        await self.app(scope, receive, send)


class AllowListCORSMiddleware(CORSMiddleware):
    """
    CORS where every OPTIONS request is answered 200 with the preflight headers.

    Only Access-Control-Allow-Origin depends on the allow-list; an unlisted or
    missing Origin still gets the preflight, just without that header.
    """

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["method"] == "OPTIONS":
            origin = Headers(scope=scope).get("origin")
            await self.answer_preflight(origin)(scope, receive, send)
            return
        await super().__call__(scope, receive, send)

    def answer_preflight(self, origin: str | None) -> Response:
        headers = dict(self.preflight_headers)
        if origin and self.is_allowed_origin(origin=origin):
            headers["Access-Control-Allow-Origin"] = origin
        return Response(status_code=200, headers=headers)


class SecureHeadersMiddleware(BaseHTTPMiddleware):
    """Apply a baseline of security headers for every response."""

    def __init__(self, app: ASGIApp, rules: SecurityRules) -> None:
        super().__init__(app)
        self.rules = rules

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)

        response.headers.setdefault("Content-Security-Policy", self.rules.content_security_policy)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        response.headers.setdefault(
            "Strict-Transport-Security",
            f"max-age={self.rules.hsts_max_age_seconds}; includeSubDomains",
        )
        return response


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Turn any uncaught exception into a generic 500 so one request never takes the process."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            return JSONResponse({"error": "Server error", "detail": str(e)}, status_code=500)
