"""
Admin auth endpoints: login, verify, logout.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.adapters.auth.crypto import hash_password
from src.api.deps import Settings
from src.api.main import create_app
from src.rules.models import Rules


class TestLogin:
    def test_correct_password_returns_token(
        self,
        client: TestClient,
        admin_password: str,
        origin_headers: dict[str, str],
        admin_headers: dict[str, str],
    ) -> None:
        response = client.post(
            "/auth/login", json={"password": admin_password}, headers=origin_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert f"Bearer {data['token']}" == admin_headers["Authorization"]

    def test_wrong_password_generic_error(
        self, client: TestClient, origin_headers: dict[str, str]
    ) -> None:
        response = client.post("/auth/login", json={"password": "guess"}, headers=origin_headers)

        assert response.status_code == 401
        assert response.json() == {"ok": False, "error": "Invalid credentials"}

    def test_empty_password_rejected(
        self, client: TestClient, origin_headers: dict[str, str]
    ) -> None:
        response = client.post("/auth/login", json={}, headers=origin_headers)
        assert response.status_code == 401
        assert response.json() == {"ok": False, "error": "Invalid credentials"}

    def test_malformed_json(self, client: TestClient, origin_headers: dict[str, str]) -> None:
        response = client.post(
            "/auth/login",
            content=b"password=x",
            headers={**origin_headers, "Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json() == {"ok": False, "error": "Invalid JSON"}

    def test_missing_origin_is_csrf(self, client: TestClient, admin_password: str) -> None:
        response = client.post("/auth/login", json={"password": admin_password})
        assert response.status_code == 403
        assert response.json() == {"ok": False, "error": "Invalid origin"}

    def test_foreign_origin_is_csrf(self, client: TestClient, admin_password: str) -> None:
        response = client.post(
            "/auth/login",
            json={"password": admin_password},
            headers={"Origin": "https://evil.example"},
        )
        assert response.status_code == 403

    def test_attempts_rate_limited(
        self, client: TestClient, admin_password: str, origin_headers: dict[str, str]
    ) -> None:
        headers = {**origin_headers, "CF-Connecting-IP": "192.0.2.10"}
        for _ in range(5):
            client.post("/auth/login", json={"password": "wrong"}, headers=headers)

        # Even the right password is refused once the window is spent
        response = client.post("/auth/login", json={"password": admin_password}, headers=headers)
        assert response.status_code == 429
        assert response.json() == {"ok": False, "error": "Too many attempts, try again later"}


class TestLoginWithHash:
    def test_argon2_hash(
        self, settings: Settings, rules: Rules, origin_headers: dict[str, str]
    ) -> None:
        settings.admin_password = None
        settings.admin_password_hash = hash_password("s3cret-pass")
        client = TestClient(create_app(settings=settings, rules=rules))

        ok = client.post("/auth/login", json={"password": "s3cret-pass"}, headers=origin_headers)
        bad = client.post("/auth/login", json={"password": "s3cret"}, headers=origin_headers)

        assert ok.status_code == 200
        assert bad.status_code == 401

    def test_no_credentials_configured_fails_closed(
        self, settings: Settings, rules: Rules, origin_headers: dict[str, str]
    ) -> None:
        settings.admin_password = None
        settings.admin_password_hash = None
        client = TestClient(create_app(settings=settings, rules=rules))

        response = client.post("/auth/login", json={"password": ""}, headers=origin_headers)
        assert response.status_code == 401

    def test_no_admin_token_fails_closed(
        self, settings: Settings, rules: Rules, admin_password: str, origin_headers: dict[str, str]
    ) -> None:
        settings.admin_token = None
        app: FastAPI = create_app(settings=settings, rules=rules)
        client = TestClient(app)

        response = client.post(
            "/auth/login", json={"password": admin_password}, headers=origin_headers
        )
        assert response.status_code == 401
        assert client.get("/summary", headers={"Authorization": "Bearer "}).status_code == 401


class TestVerify:
    def test_valid_token(self, client: TestClient, admin_headers: dict[str, str]) -> None:
        response = client.get("/auth/verify", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"authenticated": True}

    def test_invalid_token(self, client: TestClient) -> None:
        response = client.get("/auth/verify", headers={"Authorization": "Bearer wrong"})
        assert response.status_code == 401
        assert response.json() == {"authenticated": False}

    def test_missing_token(self, client: TestClient) -> None:
        response = client.get("/auth/verify")
        assert response.status_code == 401
        assert response.json() == {"authenticated": False}


class TestLogout:
    def test_logout_acknowledged(self, client: TestClient, origin_headers: dict[str, str]) -> None:
        response = client.post("/auth/logout", headers=origin_headers)
        assert response.status_code == 200
        assert response.json() == {"ok": True}

    def test_logout_requires_origin(self, client: TestClient) -> None:
        assert client.post("/auth/logout").status_code == 403
