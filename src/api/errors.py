"""
API error type and JSON error bodies.

Bodies follow two shapes: {"error": <kind>} for the ingest/query surface and
{"ok": false, "error": <message>} for the auth surface.
"""

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class ApiError(Exception):
    def __init__(self, status_code: int, body: dict[str, Any]):
        super().__init__(body.get("error"))
        self.status_code = status_code
        self.body = body


def error(status_code: int, kind: str, **extra: Any) -> ApiError:
    return ApiError(status_code, {"error": kind, **extra})


def auth_error(status_code: int, message: str) -> ApiError:
    return ApiError(status_code, {"ok": False, "error": message})


async def api_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, ApiError)
    return JSONResponse(exc.body, status_code=exc.status_code)
