"""
Tests for JWT authentication middleware.
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock

from api import app
from api.dependencies import get_auth_service, get_profile_store
from modules.auth.service import AuthService
from modules.profiles.models import Profile


@pytest.fixture
def profiles():
    store = MagicMock()
    store.get_profile = AsyncMock(return_value=None)
    return store


@pytest.fixture
def client(profiles, jwt_secret):
    app.dependency_overrides[get_auth_service] = lambda: AuthService(jwt_secret=jwt_secret)
    app.dependency_overrides[get_profile_store] = lambda: profiles
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestProtectedRoutes:

    def test_missing_token(self, client):
        """Requests without a bearer token are rejected."""
        response = client.get("/api/users/me")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_invalid_token(self, client):
        response = client.get("/api/users/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_expired_token(self, client, make_token):
        token = make_token(expired=True)
        response = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert "expired" in response.json()["detail"].lower()

    def test_wrong_secret(self, client, make_token):
        token = make_token(secret="some-other-secret")
        response = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


class TestCurrentUser:

    def test_me_without_profile(self, client, auth_headers, test_user_id, profiles):
        response = client.get("/api/users/me", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == test_user_id
        assert data["email"] == "test@example.com"
        assert data["email_verified"] is True
        assert data["first_name"] is None
        profiles.get_profile.assert_awaited_once_with(test_user_id)

    def test_me_with_profile(self, client, auth_headers, test_user_id, profiles):
        profiles.get_profile.return_value = Profile(
            id=test_user_id,
            email="test@example.com",
            first_name="Ada",
            last_name="Lovelace",
            date_of_birth="1990-01-31",
        )

        data = client.get("/api/users/me", headers=auth_headers).json()

        assert data["display_name"] == "Ada Lovelace"
        assert data["date_of_birth"] == "1990-01-31"

    def test_unverified_email(self, client, make_token):
        token = make_token(email_verified=False)
        data = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"}).json()
        assert data["email_verified"] is False
