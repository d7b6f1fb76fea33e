from pydantic import BaseModel, Field, field_validator


class RateLimitWindow(BaseModel):
    window_seconds: int = Field(gt=0)
    max_attempts: int | None = None
    max_requests: int | None = None


class RateLimitRules(BaseModel):
    ingest: RateLimitWindow
    auth: RateLimitWindow
    max_tracked_keys: int = Field(default=10000, gt=0)


class MaxLengthRules(BaseModel):
    identifier: int = Field(default=200, gt=0)
    path: int = Field(default=500, gt=0)
    url: int = Field(default=1000, gt=0)


class IngestRules(BaseModel):
    allowed_events: list[str]
    max_lengths: MaxLengthRules = MaxLengthRules()


class BotRules(BaseModel):
    treat_empty_user_agent_as_bot: bool = False
    user_agent_tokens: list[str]

    @field_validator("user_agent_tokens")
    @classmethod
    def lowercase_tokens(cls, v: list[str]) -> list[str]:
        # Matching is case-insensitive against the lowered user agent
        return [token.lower() for token in v if token.strip()]


class SummaryLimits(BaseModel):
    top_links: int = 10
    top_referrers: int = 10
    top_countries: int = 15
    locations: int = 100
    utm_campaigns: int = 20
    recent_activity: int = 50


class SummaryRules(BaseModel):
    limits: SummaryLimits = SummaryLimits()


class SecurityRules(BaseModel):
    content_security_policy: str
    hsts_max_age_seconds: int = 31536000
    cors_max_age_seconds: int = 86400


class Rules(BaseModel):
    rules_version: str
    rate_limits: RateLimitRules
    ingest: IngestRules
    bots: BotRules
    summary: SummaryRules = SummaryRules()
    security: SecurityRules
