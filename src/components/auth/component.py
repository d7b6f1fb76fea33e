"""
Auth component - Admin bearer gate and CSRF origin gate.

Both gates answer with generic errors: a caller never learns whether the
token was missing or wrong, or why a password was refused.
"""

import secrets

from .models import AuthConfig, AuthOutput, LoginInput, OriginCheckInput, VerifyTokenInput
from .ports import PasswordVerifierPort

GENERIC_UNAUTHORIZED = "unauthorized"
GENERIC_BAD_CREDENTIALS = "Invalid credentials"
INVALID_ORIGIN = "Invalid origin"


def extract_bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        return ""
    return authorization[len("Bearer ") :]


def tokens_match(provided: str, expected: str | None) -> bool:
    """Constant-time compare; an unset admin token never matches."""
    if not expected or not provided:
        return False
    return secrets.compare_digest(provided.encode(), expected.encode())


def run_verify_token(inp: VerifyTokenInput, config: AuthConfig) -> AuthOutput:
    token = extract_bearer_token(inp.authorization)
    if not tokens_match(token, config.admin_token):
        return AuthOutput(success=False, error=GENERIC_UNAUTHORIZED)
    return AuthOutput(success=True)


def run_check_origin(inp: OriginCheckInput, config: AuthConfig) -> AuthOutput:
    # A missing Origin on a state-changing request is treated as CSRF
    if not inp.origin or inp.origin not in config.allowed_origins:
        return AuthOutput(success=False, error=INVALID_ORIGIN)
    return AuthOutput(success=True)


def run_login(
    inp: LoginInput,
    verifier: PasswordVerifierPort,
    config: AuthConfig,
) -> AuthOutput:
    if not inp.password or not config.admin_token:
        return AuthOutput(success=False, error=GENERIC_BAD_CREDENTIALS)

    if not verifier.verify(inp.password):
        return AuthOutput(success=False, error=GENERIC_BAD_CREDENTIALS)

    return AuthOutput(success=True, token=config.admin_token)


def run_logout() -> AuthOutput:
    # Tokens are stateless; there is nothing to revoke server-side
    return AuthOutput(success=True)
