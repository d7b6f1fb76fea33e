from dataclasses import dataclass, field


@dataclass
class LoginInput:
    password: str


@dataclass
class VerifyTokenInput:
    authorization: str | None


@dataclass
class OriginCheckInput:
    origin: str | None


@dataclass
class AuthConfig:
    admin_token: str | None = None
    allowed_origins: frozenset[str] = field(default_factory=frozenset)


@dataclass
class AuthOutput:
    success: bool
    token: str | None = None
    error: str | None = None
