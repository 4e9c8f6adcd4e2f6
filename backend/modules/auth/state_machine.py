"""
Auth flow state machine.

Drives a user from credentials to an established session:

    idle -> credentials_entered -> challenge_issued -> session_established
    idle -> password_reset_requested -> challenge_issued(reset)
         -> password_update_pending -> session_established

Every gateway call is awaited inside a transition. While a transition is
in flight the same transition cannot be submitted again, but cancel() is
always available. A failed transition leaves the phase it started from
untouched; a transition whose flow was cancelled (or whose challenge was
superseded) while it was in flight has its result discarded.
"""

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncIterator, Awaitable, Iterable, Optional, TypeVar

from shared.config import get_settings
from shared.exceptions import MiraError, TransportError
from shared.models import AuthSession
from modules.profiles.interfaces import IProfileStore

from .exceptions import (
    AccountExistsError,
    ChallengeExpiredError,
    CredentialError,
    FieldValidationError,
    InvalidChallengeCodeError,
    InvalidTransitionError,
    NoActiveChallengeError,
    ResendCooldownError,
    SessionNotEstablishedError,
    TransitionInProgressError,
)
from .interfaces import IIdentityGateway
from .models import (
    AuthFlowState,
    AuthMode,
    AuthPhase,
    ChallengePurpose,
    Credentials,
    SignUpDetails,
    SignUpProfile,
    VerificationChallenge,
)
from .pending import PendingProfileStore
from .timer import ChallengeTimer
from .validators import (
    check_email,
    check_new_password,
    check_sign_in_credentials,
    check_sign_up,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

GATEWAY_SERVICE = "identity-gateway"
TERMINAL_PHASES = frozenset({AuthPhase.SESSION_ESTABLISHED})


class _StaleResult(Exception):
    """The flow moved on while a call was in flight."""


class _TransitionCall:
    """Runs gateway calls for one transition with a timeout and a staleness check."""

    def __init__(self, machine: "AuthStateMachine", generation: int):
        self._machine = machine
        self._generation = generation

    @property
    def is_current(self) -> bool:
        return self._generation == self._machine._generation

    def ensure_current(self) -> None:
        if not self.is_current:
            raise _StaleResult()

    async def __call__(self, awaitable: Awaitable[T], check_stale: bool = True) -> T:
        try:
            result = await asyncio.wait_for(awaitable, timeout=self._machine._timeout)
        except asyncio.TimeoutError:
            raise TransportError(
                GATEWAY_SERVICE,
                "The request timed out. Please check your connection and try again.",
            )
        if check_stale:
            self.ensure_current()
        return result


class AuthStateMachine:
    """
    One auth flow for one UI session.

    Owns the live challenge, its timer and the pending sign-up profiles.
    Callers read `state` (a copy) after each operation; errors are both
    raised and mirrored in `state.error`.
    """

    def __init__(
        self,
        gateway: IIdentityGateway,
        profiles: IProfileStore,
        pending: Optional[PendingProfileStore] = None,
        timer: Optional[ChallengeTimer] = None,
        timeout_seconds: Optional[float] = None,
    ):
        settings = get_settings()
        self._gateway = gateway
        self._profiles = profiles
        self._pending = (
            pending if pending is not None
            else PendingProfileStore(settings.pending_profile_ttl_seconds)
        )
        self._timer = (
            timer if timer is not None
            else ChallengeTimer(
                settings.otp_validity_seconds,
                settings.otp_resend_cooldown_seconds,
            )
        )
        self._timeout = (
            timeout_seconds if timeout_seconds is not None
            else settings.gateway_timeout_seconds
        )
        self._oauth_redirect = settings.oauth_redirect_url

        self._state = AuthFlowState()
        self._generation = 0
        self._challenge_epoch = 0
        self._in_flight: set[str] = set()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def state(self) -> AuthFlowState:
        return self._state.model_copy(deep=True)

    @property
    def phase(self) -> AuthPhase:
        return self._state.phase

    @property
    def pending_profiles(self) -> PendingProfileStore:
        return self._pending

    def expires_in(self) -> int:
        """Seconds until the live code stops being accepted."""
        return self._timer.expires_in()

    def resend_in(self) -> int:
        """Seconds until a new code may be requested."""
        return self._timer.resend_in()

    def is_challenge_expired(self) -> bool:
        return self._state.challenge is not None and self._timer.is_expired()

    async def current_session(self) -> Optional[AuthSession]:
        """The session the gateway currently holds, if any."""
        return await self._gateway.get_session()

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def start(self, mode: AuthMode = AuthMode.SIGN_IN) -> AuthFlowState:
        """Begin a fresh flow, superseding anything in progress."""
        self._abandon()
        self._state = AuthFlowState(mode=mode)
        return self.state

    async def submit_credentials(
        self,
        mode: AuthMode,
        credentials: Credentials,
        details: Optional[SignUpDetails] = None,
    ) -> AuthFlowState:
        """
        Submit the sign-in or sign-up form.

        Sign-in checks the password, then issues a second-factor code. The
        session created by the password check is always ended, so nothing
        is signed in until the code is verified.

        Sign-up refuses emails that already have a profile, creates the
        identity and parks the profile fields until the code is verified.
        """
        async with self._transition(
            "submit_credentials",
            allowed=(AuthPhase.IDLE,),
            in_flight_phase=AuthPhase.CREDENTIALS_ENTERED,
        ) as call:
            self._state.mode = mode
            if mode == AuthMode.SIGN_IN:
                await self._sign_in(call, credentials)
            else:
                await self._sign_up(call, credentials, details or SignUpDetails())
        return self.state

    async def request_password_reset(self, email: str) -> AuthFlowState:
        """
        Send a password reset code.

        The response is the same whether or not the address has an account.
        """
        async with self._transition(
            "request_password_reset",
            allowed=(AuthPhase.IDLE,),
            in_flight_phase=AuthPhase.PASSWORD_RESET_REQUESTED,
        ) as call:
            email = check_email(email)
            try:
                await call(self._gateway.send_otp(email, ChallengePurpose.PASSWORD_RESET))
            except CredentialError as e:
                logger.info(f"Password reset not sent ({e.code}), answering as if it was")
            self._issue_challenge(email, ChallengePurpose.PASSWORD_RESET)
        return self.state

    async def verify_challenge(self, code: str) -> AuthFlowState:
        """
        Verify the code of the live challenge.

        Expired codes fail without contacting the gateway. Wrong codes keep
        the challenge (and its timer) alive for another try.
        """
        async with self._transition(
            "verify_challenge",
            allowed=(AuthPhase.CHALLENGE_ISSUED,),
        ) as call:
            challenge = self._require_challenge()
            code = (code or "").strip()
            if not code:
                raise FieldValidationError("code", "Please enter the verification code")
            if self._timer.is_expired():
                raise ChallengeExpiredError(challenge.id)

            epoch = self._challenge_epoch
            try:
                established = await call(
                    self._gateway.verify_otp(challenge.target_email, code, challenge.purpose),
                    check_stale=False,
                )
            except InvalidChallengeCodeError as e:
                call.ensure_current()
                self._ensure_epoch(epoch)
                challenge.attempts += 1
                raise InvalidChallengeCodeError(challenge.attempts, e.message) from e

            try:
                call.ensure_current()
                self._ensure_epoch(epoch)
                if challenge.purpose == ChallengePurpose.PASSWORD_RESET:
                    self._clear_challenge()
                    self._state.phase = AuthPhase.PASSWORD_UPDATE_PENDING
                elif not established:
                    raise SessionNotEstablishedError()
                elif challenge.purpose == ChallengePurpose.SIGN_UP:
                    await self._complete_sign_up(call, challenge.target_email)
                else:
                    self._clear_challenge()
                    self._state.phase = AuthPhase.SESSION_ESTABLISHED
                    logger.info("Session established via sign_in verification")
            except _StaleResult:
                if established:
                    # The flow was abandoned; the session the code created must not survive it
                    logger.info("Ending the session of a verification that outlived its flow")
                    await call(self._gateway.sign_out(), check_stale=False)
                raise
        return self.state

    async def save_pending_profile(self) -> AuthFlowState:
        """
        Retry storing the sign-up profile.

        Only needed when verification succeeded but the profile could not be
        saved; the session is already established at that point.
        """
        async with self._transition(
            "save_pending_profile",
            allowed=(AuthPhase.SESSION_ESTABLISHED,),
        ) as call:
            if self._state.pending_identity_id is not None:
                await self._persist_pending_profile(call, self._state.pending_email or "")
        return self.state

    async def resend_challenge(self) -> AuthFlowState:
        """Issue a new code, superseding the live one. Only after the cooldown."""
        async with self._transition(
            "resend_challenge",
            allowed=(AuthPhase.CHALLENGE_ISSUED,),
        ) as call:
            if not self._timer.can_resend():
                raise ResendCooldownError(self._timer.resend_in())
            challenge = self._require_challenge()
            # Verifications still in flight answer for the old code
            self._challenge_epoch += 1
            await call(self._gateway.send_otp(challenge.target_email, challenge.purpose))
            self._issue_challenge(challenge.target_email, challenge.purpose)
        return self.state

    async def update_password(self, new_password: str) -> AuthFlowState:
        """Set the new password after a verified reset and sign the user in."""
        async with self._transition(
            "update_password",
            allowed=(AuthPhase.PASSWORD_UPDATE_PENDING,),
        ) as call:
            new_password = check_new_password(new_password)
            await call(self._gateway.update_password(new_password))
            session = await call(self._gateway.get_session())
            if session is None:
                logger.info("Password updated without a live session, signing in explicitly")
                email = self._state.pending_email or ""
                await call(self._gateway.sign_in_with_password(email, new_password))
            self._state.phase = AuthPhase.SESSION_ESTABLISHED
        return self.state

    async def sign_in_with_oauth(
        self,
        provider: str = "google",
        redirect_to: Optional[str] = None,
    ) -> Optional[str]:
        """Start an OAuth sign-in. Returns the URL to redirect the browser to."""
        url: Optional[str] = None
        async with self._transition("sign_in_with_oauth", allowed=(AuthPhase.IDLE,)) as call:
            url = await call(
                self._gateway.sign_in_with_oauth(provider, redirect_to or self._oauth_redirect)
            )
        return url

    async def sign_out(self) -> AuthFlowState:
        """End an established session and return to idle."""
        async with self._transition(
            "sign_out",
            allowed=(AuthPhase.SESSION_ESTABLISHED,),
        ) as call:
            await call(self._gateway.sign_out())
            mode = self._state.mode
            self._abandon()
            self._state = AuthFlowState(mode=mode)
        return self.state

    def cancel(self) -> AuthFlowState:
        """
        Go back to idle from any non-terminal phase.

        Drops the live challenge and any pending profile. Calls still in
        flight complete in the background and their results are ignored.
        """
        if self._state.phase in TERMINAL_PHASES:
            raise InvalidTransitionError("cancel", self._state.phase.value)
        mode = self._state.mode
        self._abandon()
        self._state = AuthFlowState(mode=mode)
        return self.state

    back = cancel

    # -------------------------------------------------------------------------
    # Flow steps
    # -------------------------------------------------------------------------

    async def _sign_in(self, call: _TransitionCall, credentials: Credentials) -> None:
        credentials = check_sign_in_credentials(credentials)
        await call(
            self._gateway.sign_in_with_password(credentials.email, credentials.password),
            check_stale=False,
        )
        try:
            call.ensure_current()
            await call(self._gateway.send_otp(credentials.email, ChallengePurpose.SIGN_IN))
        finally:
            # The password check signed the user in; that session must not
            # outlive the password check
            await call(self._gateway.sign_out(), check_stale=False)
        self._issue_challenge(credentials.email, ChallengePurpose.SIGN_IN)

    async def _sign_up(
        self,
        call: _TransitionCall,
        credentials: Credentials,
        details: SignUpDetails,
    ) -> None:
        credentials = check_sign_up(credentials, details)
        existing = await call(self._profiles.find_profile_by_email(credentials.email))
        if existing is not None:
            raise AccountExistsError(credentials.email)

        profile = SignUpProfile(
            email=credentials.email,
            first_name=details.first_name.strip(),
            last_name=details.last_name.strip(),
            date_of_birth=details.date_of_birth,
        )
        identity_id = await call(
            self._gateway.sign_up(
                credentials.email,
                credentials.password,
                metadata=profile.model_dump(exclude={"email"}),
            )
        )
        self._pending.put(identity_id, profile)
        self._state.pending_identity_id = identity_id
        self._issue_challenge(credentials.email, ChallengePurpose.SIGN_UP)

    async def _complete_sign_up(self, call: _TransitionCall, email: str) -> None:
        try:
            await self._persist_pending_profile(call, email)
        except SessionNotEstablishedError:
            raise
        except MiraError:
            call.ensure_current()
            # The code is spent and the identity is signed in; the pending
            # profile is kept for save_pending_profile()
            self._clear_challenge()
            self._state.phase = AuthPhase.SESSION_ESTABLISHED
            raise
        self._clear_challenge()
        self._state.phase = AuthPhase.SESSION_ESTABLISHED
        logger.info("Session established via sign_up verification")

    async def _persist_pending_profile(self, call: _TransitionCall, email: str) -> None:
        identity_id = self._state.pending_identity_id
        if identity_id is None:
            session = await call(self._gateway.get_session())
            if session is None:
                raise SessionNotEstablishedError()
            identity_id = session.user_id

        profile = self._pending.get(identity_id)
        fields: dict[str, Any]
        if profile is None:
            logger.warning(f"No pending profile for {identity_id}, storing email only")
            fields = {"email": email}
        else:
            fields = profile.to_profile_fields()

        await call(self._profiles.upsert_profile(identity_id, fields))
        self._pending.discard(identity_id)
        self._state.pending_identity_id = None

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @asynccontextmanager
    async def _transition(
        self,
        operation: str,
        allowed: Iterable[AuthPhase],
        in_flight_phase: Optional[AuthPhase] = None,
    ) -> AsyncIterator[_TransitionCall]:
        in_flight = self._in_flight
        if operation in in_flight:
            raise TransitionInProgressError(operation)
        if self._state.phase not in allowed:
            raise InvalidTransitionError(operation, self._state.phase.value)

        generation = self._generation
        previous_phase = self._state.phase
        in_flight.add(operation)
        self._state.is_loading = True
        self._state.error = None
        if in_flight_phase is not None:
            self._state.phase = in_flight_phase

        succeeded = False
        try:
            yield _TransitionCall(self, generation)
            succeeded = True
        except _StaleResult:
            logger.debug(f"Discarding result of {operation}: flow moved on")
        except MiraError as e:
            if generation == self._generation:
                self._state.error = e.message
            raise
        finally:
            in_flight.discard(operation)
            if generation == self._generation:
                if not succeeded and self._state.phase == in_flight_phase:
                    self._state.phase = previous_phase
                self._state.is_loading = bool(self._in_flight)

    def _require_challenge(self) -> VerificationChallenge:
        challenge = self._state.challenge
        if challenge is None:
            raise NoActiveChallengeError()
        return challenge

    def _ensure_epoch(self, epoch: int) -> None:
        if epoch != self._challenge_epoch:
            raise _StaleResult()

    def _issue_challenge(self, email: str, purpose: ChallengePurpose) -> None:
        self._timer.start()
        self._challenge_epoch += 1
        issued_at = datetime.now(timezone.utc)
        self._state.challenge = VerificationChallenge(
            id=uuid.uuid4().hex,
            target_email=email,
            purpose=purpose,
            issued_at=issued_at,
            expires_at=issued_at + timedelta(seconds=self._timer.validity_seconds),
        )
        self._state.purpose = purpose
        self._state.pending_email = email
        self._state.phase = AuthPhase.CHALLENGE_ISSUED
        logger.debug(f"Issued {purpose.value} challenge {self._state.challenge.id}")

    def _clear_challenge(self) -> None:
        self._timer.reset()
        self._challenge_epoch += 1
        self._state.challenge = None

    def _abandon(self) -> None:
        self._generation += 1
        self._challenge_epoch += 1
        self._in_flight = set()
        self._timer.reset()
        if self._state.pending_identity_id:
            self._pending.discard(self._state.pending_identity_id)
