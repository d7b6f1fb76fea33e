from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite_db import SQLiteAnalyticsQueryRepo, SQLiteEventStore
from src.api.deps import Settings
from src.api.main import create_app
from src.app_shell.rate_limit import RateLimiter
from src.rules.loader import load_rules
from src.rules.models import Rules

PROJECT_ROOT = Path(__file__).parent.parent

ADMIN_TOKEN = "test-admin-token"
ADMIN_PASSWORD = "correct horse battery staple"
DASHBOARD_ORIGIN = "https://dashboard.example.com"


class FixedClock:
    """Deterministic clock for both the analytics and rate-limit time ports."""

    def __init__(self, current: datetime) -> None:
        self.current = current

    def now(self) -> datetime:
        return self.current

    def now_utc(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current = self.current + timedelta(**kwargs)


@pytest.fixture
def rules() -> Rules:
    """The real rules file from the project root."""
    return load_rules(PROJECT_ROOT / "rules.yaml")


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 3, 10, 12, 0, tzinfo=UTC))


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """A freshly migrated SQLite database."""
    path = str(tmp_path / "analytics.db")
    SQLiteMigrator(path, str(PROJECT_ROOT / "migrations")).run_migrations()
    return path


@pytest.fixture
def event_store(db_path: str) -> SQLiteEventStore:
    return SQLiteEventStore(db_path)


@pytest.fixture
def query_repo(db_path: str) -> SQLiteAnalyticsQueryRepo:
    return SQLiteAnalyticsQueryRepo(db_path)


@pytest.fixture
def settings(db_path: str) -> Settings:
    settings = Settings()
    settings.db_path = db_path
    settings.migrations_dir = str(PROJECT_ROOT / "migrations")
    settings.rules_path = PROJECT_ROOT / "rules.yaml"
    settings.allowed_origins = frozenset({DASHBOARD_ORIGIN})
    settings.admin_token = ADMIN_TOKEN
    settings.admin_password = ADMIN_PASSWORD
    settings.admin_password_hash = None
    settings.trusted_ip_header = "CF-Connecting-IP"
    return settings


@pytest.fixture
def app(settings: Settings, rules: Rules, clock: FixedClock) -> FastAPI:
    return create_app(
        settings=settings,
        rules=rules,
        clock=clock,  # type: ignore[arg-type]
        rate_limiter=RateLimiter(rules.rate_limits, time_port=clock),
    )


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def admin_password() -> str:
    return ADMIN_PASSWORD


@pytest.fixture
def origin_headers() -> dict[str, str]:
    return {"Origin": DASHBOARD_ORIGIN}
