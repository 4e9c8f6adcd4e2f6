"""
Authentication module interfaces.

The auth flow depends on IIdentityGateway, not on Supabase directly.
This enables testing with fakes and swapping the identity provider.
IAuthService is what the API layer uses to turn bearer tokens into users.
"""

from typing import Any, Callable, Optional, Protocol, runtime_checkable

from shared.models import AuthenticatedUser, AuthSession

from .models import ChallengePurpose


SessionChangeCallback = Callable[[str, Optional[AuthSession]], None]


@runtime_checkable
class IIdentityGateway(Protocol):
    """
    Interface for the hosted identity provider.

    Implementations raise CredentialError subclasses when the provider
    rejects an operation and TransportError when it cannot be reached.
    """

    async def sign_in_with_password(self, email: str, password: str) -> None:
        """
        Check an email/password pair.

        Note that a successful check leaves a live session behind on most
        providers; callers that only check the password must call sign_out().

        Raises:
            InvalidCredentialsError: If the pair is wrong
        """
        ...

    async def send_otp(self, email: str, purpose: ChallengePurpose) -> None:
        """Email a one-time code for the given purpose."""
        ...

    async def verify_otp(self, email: str, code: str, purpose: ChallengePurpose) -> bool:
        """
        Verify a one-time code.

        Returns:
            True if the provider established a session as a result

        Raises:
            InvalidChallengeCodeError: If the code is wrong or rejected
        """
        ...

    async def sign_up(
        self,
        email: str,
        password: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> str:
        """
        Create an identity and send its confirmation code.

        Returns:
            The new identity ID

        Raises:
            AccountExistsError: If the email is already registered
        """
        ...

    async def update_password(self, new_password: str) -> None:
        """Change the password of the identity holding the current session."""
        ...

    async def sign_in_with_oauth(self, provider: str, redirect_to: str) -> str:
        """
        Start an OAuth sign-in.

        Returns:
            URL the UI must redirect the browser to
        """
        ...

    async def sign_out(self) -> None:
        """End the current session, if any."""
        ...

    async def get_session(self) -> Optional[AuthSession]:
        """Return the current session, or None."""
        ...

    def on_session_change(self, callback: SessionChangeCallback) -> Callable[[], None]:
        """
        Subscribe to session changes.

        Returns:
            A function that removes the subscription
        """
        ...


@runtime_checkable
class IAuthService(Protocol):
    """Interface for server-side token validation."""

    async def validate_token(self, token: str) -> AuthenticatedUser:
        """
        Validate a JWT token and return the authenticated user.

        Args:
            token: JWT access token from Supabase Auth

        Returns:
            AuthenticatedUser with user ID and basic info

        Raises:
            AuthenticationError: If token is invalid or expired
        """
        ...
