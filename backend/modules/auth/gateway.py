"""
Supabase implementation of the identity gateway.

Translates Supabase Auth responses and errors into the auth module's
vocabulary: rejections become CredentialError / ChallengeError subclasses,
unreachable-service failures become TransportError.
"""

import logging
from typing import Any, Callable, Optional

import httpx
from supabase import AsyncClient, AuthApiError, AuthError, AuthRetryableError

from shared.config import get_settings
from shared.exceptions import TransportError
from shared.models import AuthSession

from .exceptions import (
    AccountExistsError,
    CredentialError,
    InvalidChallengeCodeError,
    InvalidCredentialsError,
)
from .interfaces import IIdentityGateway, SessionChangeCallback
from .models import ChallengePurpose

logger = logging.getLogger(__name__)

SERVICE_NAME = "supabase-auth"

# Supabase OTP types for each challenge purpose
OTP_TYPES: dict[ChallengePurpose, str] = {
    ChallengePurpose.SIGN_UP: "signup",
    ChallengePurpose.SIGN_IN: "email",
    ChallengePurpose.PASSWORD_RESET: "recovery",
}


def to_auth_session(session: Any) -> Optional[AuthSession]:
    """Map a Supabase Session object to AuthSession."""
    if session is None or not getattr(session, "access_token", None):
        return None
    user = getattr(session, "user", None)
    return AuthSession(
        user_id=str(user.id) if user is not None else "",
        email=getattr(user, "email", None),
        access_token=session.access_token,
        refresh_token=getattr(session, "refresh_token", None),
        expires_at=getattr(session, "expires_at", None),
    )


class SupabaseIdentityGateway(IIdentityGateway):
    """
    Identity gateway backed by Supabase Auth.

    Holds one async client; the session stored in that client is the
    session of the user driving the flow.
    """

    def __init__(self, client: AsyncClient, password_reset_redirect: Optional[str] = None):
        self._client = client
        self._reset_redirect = password_reset_redirect or get_settings().password_reset_redirect_url

    @property
    def _auth(self):
        return self._client.auth

    async def sign_in_with_password(self, email: str, password: str) -> None:
        try:
            await self._auth.sign_in_with_password({"email": email, "password": password})
        except AuthRetryableError as e:
            raise TransportError(SERVICE_NAME, e.message)
        except AuthApiError as e:
            logger.debug(f"Password sign-in rejected for {email}: {e.message}")
            raise InvalidCredentialsError()
        except httpx.HTTPError as e:
            raise TransportError(SERVICE_NAME, str(e))

    async def send_otp(self, email: str, purpose: ChallengePurpose) -> None:
        try:
            if purpose == ChallengePurpose.SIGN_IN:
                await self._auth.sign_in_with_otp({
                    "email": email,
                    "options": {"should_create_user": False},
                })
            elif purpose == ChallengePurpose.PASSWORD_RESET:
                await self._auth.reset_password_for_email(
                    email,
                    {"redirect_to": self._reset_redirect},
                )
            else:
                await self._auth.resend({"type": OTP_TYPES[purpose], "email": email})
        except AuthRetryableError as e:
            raise TransportError(SERVICE_NAME, e.message)
        except AuthError as e:
            raise CredentialError(e.message, code="OTP_NOT_SENT")
        except httpx.HTTPError as e:
            raise TransportError(SERVICE_NAME, str(e))

    async def verify_otp(self, email: str, code: str, purpose: ChallengePurpose) -> bool:
        try:
            response = await self._auth.verify_otp({
                "email": email,
                "token": code,
                "type": OTP_TYPES[purpose],
            })
        except AuthRetryableError as e:
            raise TransportError(SERVICE_NAME, e.message)
        except AuthApiError as e:
            raise InvalidChallengeCodeError(message=e.message or "Invalid verification code")
        except httpx.HTTPError as e:
            raise TransportError(SERVICE_NAME, str(e))
        return response.session is not None

    async def sign_up(
        self,
        email: str,
        password: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> str:
        try:
            response = await self._auth.sign_up({
                "email": email,
                "password": password,
                "options": {"data": metadata or {}},
            })
        except AuthRetryableError as e:
            raise TransportError(SERVICE_NAME, e.message)
        except AuthApiError as e:
            if "already registered" in (e.message or ""):
                raise AccountExistsError(email)
            raise CredentialError(e.message)
        except httpx.HTTPError as e:
            raise TransportError(SERVICE_NAME, str(e))

        user = response.user
        # Supabase answers a sign-up for a confirmed address with a user that
        # has no identities instead of an error
        if user is None or user.identities == []:
            raise AccountExistsError(email)
        return str(user.id)

    async def update_password(self, new_password: str) -> None:
        try:
            await self._auth.update_user({"password": new_password})
        except AuthRetryableError as e:
            raise TransportError(SERVICE_NAME, e.message)
        except AuthError as e:
            raise CredentialError(e.message, code="PASSWORD_NOT_UPDATED")
        except httpx.HTTPError as e:
            raise TransportError(SERVICE_NAME, str(e))

    async def sign_in_with_oauth(self, provider: str, redirect_to: str) -> str:
        try:
            response = await self._auth.sign_in_with_oauth({
                "provider": provider,
                "options": {"redirect_to": redirect_to},
            })
        except AuthRetryableError as e:
            raise TransportError(SERVICE_NAME, e.message)
        except AuthError as e:
            raise CredentialError(e.message, code="OAUTH_FAILED")
        except httpx.HTTPError as e:
            raise TransportError(SERVICE_NAME, str(e))
        return response.url

    async def sign_out(self) -> None:
        try:
            await self._auth.sign_out()
        except AuthRetryableError as e:
            raise TransportError(SERVICE_NAME, e.message)
        except AuthError as e:
            raise CredentialError(e.message, code="SIGN_OUT_FAILED")
        except httpx.HTTPError as e:
            raise TransportError(SERVICE_NAME, str(e))

    async def get_session(self) -> Optional[AuthSession]:
        try:
            session = await self._auth.get_session()
        except AuthRetryableError as e:
            raise TransportError(SERVICE_NAME, e.message)
        except AuthError as e:
            logger.debug(f"No usable session: {e.message}")
            return None
        except httpx.HTTPError as e:
            raise TransportError(SERVICE_NAME, str(e))
        return to_auth_session(session)

    def on_session_change(self, callback: SessionChangeCallback) -> Callable[[], None]:
        def _listener(event: str, session: Any) -> None:
            callback(str(event), to_auth_session(session))

        subscription = self._auth.on_auth_state_change(_listener)
        return subscription.unsubscribe
