"""
Auth component - Admin authentication and CSRF origin checks.
"""

from .component import (
    GENERIC_BAD_CREDENTIALS,
    GENERIC_UNAUTHORIZED,
    INVALID_ORIGIN,
    extract_bearer_token,
    run_check_origin,
    run_login,
    run_logout,
    run_verify_token,
    tokens_match,
)
from .models import (
    AuthConfig,
    AuthOutput,
    LoginInput,
    OriginCheckInput,
    VerifyTokenInput,
)
from .ports import PasswordVerifierPort

__all__ = [
    # Entry points
    "run_check_origin",
    "run_login",
    "run_logout",
    "run_verify_token",
    "extract_bearer_token",
    "tokens_match",
    "GENERIC_BAD_CREDENTIALS",
    "GENERIC_UNAUTHORIZED",
    "INVALID_ORIGIN",
    # Models
    "AuthConfig",
    "AuthOutput",
    "LoginInput",
    "OriginCheckInput",
    "VerifyTokenInput",
    # Ports
    "PasswordVerifierPort",
]
