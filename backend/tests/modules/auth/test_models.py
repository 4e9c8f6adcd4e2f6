import pytest
from datetime import datetime, timezone

from modules.auth.models import (
    AuthFlowState,
    AuthMode,
    AuthPhase,
    ChallengePurpose,
    Credentials,
    JWTPayload,
    SignUpProfile,
    VerificationChallenge,
)


class TestJWTPayload:
    def test_parse_jwt_payload(self):
        """Should parse JWT payload from dict."""
        payload = JWTPayload(
            sub="user-123",
            email="test@example.com",
            exp=1704067200,
            iat=1704063600,
        )
        assert payload.sub == "user-123"
        assert payload.aud == "authenticated"
        assert payload.role == "authenticated"
        assert payload.email_confirmed_at is None

    def test_jwt_with_metadata(self):
        """JWTPayload should parse custom metadata."""
        payload = JWTPayload(
            sub="user-123",
            exp=1704067200,
            iat=1704063600,
            user_metadata={"first_name": "Ada"},
        )
        assert payload.user_metadata == {"first_name": "Ada"}


class TestCredentials:
    def test_password_hidden_from_repr(self):
        credentials = Credentials(email="a@b.co", password="Secret123")
        assert "Secret123" not in repr(credentials)
        assert "a@b.co" in repr(credentials)


class TestSignUpProfile:
    def test_profile_fields(self):
        profile = SignUpProfile(
            email="a@b.co",
            first_name="Ada",
            last_name="Lovelace",
            date_of_birth="1815-12-10",
        )
        assert profile.to_profile_fields() == {
            "email": "a@b.co",
            "first_name": "Ada",
            "last_name": "Lovelace",
            "date_of_birth": "1815-12-10",
        }


class TestVerificationChallenge:
    def test_attempts_cannot_be_negative(self):
        now = datetime.now(timezone.utc)
        with pytest.raises(Exception):
            VerificationChallenge(
                id="c1",
                target_email="a@b.co",
                purpose=ChallengePurpose.SIGN_IN,
                issued_at=now,
                expires_at=now,
                attempts=-1,
            )


class TestAuthFlowState:
    def test_defaults(self):
        state = AuthFlowState()
        assert state.phase == AuthPhase.IDLE
        assert state.mode == AuthMode.SIGN_IN
        assert state.challenge is None
        assert state.is_loading is False
        assert state.is_authenticated is False

    def test_authenticated_only_when_session_established(self):
        assert AuthFlowState(phase=AuthPhase.SESSION_ESTABLISHED).is_authenticated is True
        assert AuthFlowState(phase=AuthPhase.PASSWORD_UPDATE_PENDING).is_authenticated is False
