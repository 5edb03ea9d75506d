# tests/test_auth.py
"""Tests for login, token verification and the auth endpoints."""

from datetime import timedelta

import jwt
import pytest
from httpx import AsyncClient

from blog_api.auth import (
    AdminCredentials,
    AuthService,
    AuthUser,
    ConfiguredAdminProvider,
)
from blog_api.config import settings
from blog_api.errors import InvalidCredentials, InvalidToken, MissingFields


@pytest.fixture
def provider() -> ConfiguredAdminProvider:
    return ConfiguredAdminProvider(
        AdminCredentials(
            id="admin_001",
            name="Admin",
            email="admin@example.com",
            password="s3cret-pass",
        )
    )


class TestAuthService:
    def test_login_issues_token_with_identity_claims(self, provider):
        user, token = AuthService.login(provider, "admin@example.com", "s3cret-pass")

        assert user == AuthUser(
            id="admin_001", email="admin@example.com", name="Admin", role="admin"
        )
        payload = jwt.decode(
            token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
        )
        assert payload["id"] == "admin_001"
        assert payload["email"] == "admin@example.com"
        assert payload["name"] == "Admin"
        assert payload["role"] == "admin"
        assert "password" not in payload
        assert payload["exp"] - payload["iat"] == 7 * 24 * 60 * 60

    @pytest.mark.parametrize(
        "email, password",
        [
            ("admin@example.com", "wrong"),
            ("other@example.com", "s3cret-pass"),
            ("ADMIN@example.com", "s3cret-pass"),
        ],
    )
    def test_login_rejects_anything_but_exact_match(self, provider, email, password):
        with pytest.raises(InvalidCredentials):
            AuthService.login(provider, email, password)

    @pytest.mark.parametrize(
        "email, password",
        [(None, "s3cret-pass"), ("admin@example.com", None), ("", "")],
    )
    def test_login_requires_both_fields(self, provider, email, password):
        with pytest.raises(MissingFields):
            AuthService.login(provider, email, password)

    def test_verify_token_round_trips_identity(self, provider):
        user, token = AuthService.login(provider, "admin@example.com", "s3cret-pass")
        assert AuthService.verify_token(token) == user

    def test_verify_token_rejects_expired(self, provider):
        user = provider.lookup("admin_001")
        token = AuthService.create_access_token(user, expires_delta=timedelta(seconds=-1))
        with pytest.raises(InvalidToken):
            AuthService.verify_token(token)

    def test_verify_token_rejects_foreign_signature(self):
        token = jwt.encode(
            {"id": "admin_001", "email": "a@b.c", "name": "A", "type": "access"},
            "another-secret",
            algorithm="HS256",
        )
        with pytest.raises(InvalidToken):
            AuthService.verify_token(token)

    def test_verify_token_rejects_missing_claims(self):
        token = jwt.encode(
            {"id": "admin_001", "type": "access"},
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
        )
        with pytest.raises(InvalidToken):
            AuthService.verify_token(token)

    def test_lookup_unknown_id(self, provider):
        assert provider.lookup("someone-else") is None


class TestAuthRoutes:
    async def test_login_success(self, client: AsyncClient):
        response = await client.post(
            "/api/auth/login",
            json={"email": "admin@example.com", "password": "s3cret-pass"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Login successful"
        assert body["data"]["user"]["email"] == "admin@example.com"
        assert "password" not in body["data"]["user"]
        assert AuthService.verify_token(body["data"]["token"]).id == "admin_001"

    async def test_login_wrong_password(self, client: AsyncClient):
        response = await client.post(
            "/api/auth/login",
            json={"email": "admin@example.com", "password": "nope"},
        )

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "error": "Invalid email or password",
        }

    async def test_login_missing_fields(self, client: AsyncClient):
        response = await client.post("/api/auth/login", json={"email": "admin@example.com"})

        assert response.status_code == 400
        assert response.json()["error"] == "Email and password are required"

    async def test_verify_without_token(self, client: AsyncClient):
        response = await client.get("/api/auth/verify")

        assert response.status_code == 401
        assert response.json()["error"] == "Access token required"

    async def test_verify_with_garbage_token(self, client: AsyncClient):
        response = await client.get(
            "/api/auth/verify", headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == 403
        assert response.json()["error"] == "Invalid or expired token"

    async def test_verify_with_valid_token(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/auth/verify", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Token is valid"
        assert body["user"]["id"] == "admin_001"

    async def test_me(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/auth/me", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["data"]["user"]["role"] == "admin"

    async def test_logout(self, client: AsyncClient):
        response = await client.post("/api/auth/logout")

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Logged out successfully"}
