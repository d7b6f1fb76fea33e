"""
Admin auth routes: password login, token verification, logout.

Login and logout are origin-checked; the token handed out is the static
admin bearer token, so logout has nothing to revoke.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from src.api.deps import (
    get_auth_config,
    get_client_ip,
    get_password_verifier,
    get_rate_limiter,
    require_trusted_origin,
)
from src.api.errors import auth_error
from src.api.schemas import LoginResponse, OkResponse, VerifyResponse
from src.app_shell.rate_limit import RateLimiter
from src.components.auth import (
    AuthConfig,
    LoginInput,
    PasswordVerifierPort,
    VerifyTokenInput,
    run_login,
    run_logout,
    run_verify_token,
)

logger = logging.getLogger(__name__)

router = APIRouter()

TOO_MANY_ATTEMPTS = "Too many attempts, try again later"


@router.post(
    "/login",
    response_model=LoginResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_trusted_origin)],
)
async def login(
    request: Request,
    client_ip: str = Depends(get_client_ip),
    limiter: RateLimiter = Depends(get_rate_limiter),
    verifier: PasswordVerifierPort = Depends(get_password_verifier),
    config: AuthConfig = Depends(get_auth_config),
) -> LoginResponse:
    """Exchange the admin password for the admin bearer token."""
    if not limiter.check_auth(client_ip):
        logger.warning("Login rate limit hit for %s", client_ip)
        raise auth_error(429, TOO_MANY_ATTEMPTS)

    try:
        payload = await request.json()
    except ValueError:
        raise auth_error(400, "Invalid JSON") from None

    password = payload.get("password") if isinstance(payload, dict) else None
    if not isinstance(password, str):
        password = ""

    # argon2 verification is CPU-bound
    out = await run_in_threadpool(run_login, LoginInput(password=password), verifier, config)
    if not out.success:
        logger.warning("Failed admin login from %s", client_ip)
        raise auth_error(401, out.error or "Invalid credentials")

    logger.info("Admin login from %s", client_ip)
    return LoginResponse(ok=True, token=out.token)


@router.get("/verify", response_model=VerifyResponse)
def verify(
    request: Request,
    config: AuthConfig = Depends(get_auth_config),
) -> VerifyResponse | JSONResponse:
    """Report whether the bearer token on this request is valid."""
    out = run_verify_token(VerifyTokenInput(request.headers.get("Authorization")), config)
    if not out.success:
        return JSONResponse({"authenticated": False}, status_code=401)
    return VerifyResponse(authenticated=True)


@router.post(
    "/logout",
    response_model=OkResponse,
    dependencies=[Depends(require_trusted_origin)],
)
def logout() -> OkResponse:
    """Stateless logout acknowledgement."""
    run_logout()
    return OkResponse(ok=True)
