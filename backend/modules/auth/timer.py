"""
Verification countdowns.

Remaining time is recomputed from an absolute deadline on the monotonic
clock at every query, so it stays correct no matter how irregularly the
UI polls it (suspended tabs, throttled timers).
"""

import math
import time
from typing import Callable, Optional

Clock = Callable[[], float]


class Countdown:
    """
    A one-shot countdown.

    Once it reaches zero it stays expired until reset() or a new start().
    """

    def __init__(self, clock: Clock = time.monotonic):
        self._clock = clock
        self._deadline: Optional[float] = None
        self._duration = 0

    @property
    def duration(self) -> int:
        return self._duration

    @property
    def is_started(self) -> bool:
        return self._deadline is not None

    @property
    def is_running(self) -> bool:
        return self.remaining() > 0

    def start(self, duration_seconds: int) -> None:
        """Arm the countdown for duration_seconds from now."""
        if duration_seconds <= 0:
            raise ValueError(f"Countdown duration must be positive, got {duration_seconds}")
        self._duration = duration_seconds
        self._deadline = self._clock() + duration_seconds

    def remaining(self) -> int:
        """Whole seconds left, rounded up. 0 when not started or expired."""
        if self._deadline is None:
            return 0
        return max(0, math.ceil(self._deadline - self._clock()))

    def is_expired(self) -> bool:
        return self._deadline is not None and self.remaining() == 0

    def reset(self) -> None:
        self._deadline = None
        self._duration = 0


class ChallengeTimer:
    """
    Validity window and resend cooldown of one OTP challenge.

    Both start together when a code is issued but are configured and
    queried independently: the UI shows "expires in" and "resend in"
    side by side.
    """

    def __init__(
        self,
        validity_seconds: int = 300,
        resend_cooldown_seconds: int = 300,
        clock: Clock = time.monotonic,
    ):
        self.validity_seconds = validity_seconds
        self.resend_cooldown_seconds = resend_cooldown_seconds
        self._validity = Countdown(clock)
        self._cooldown = Countdown(clock)

    @property
    def is_started(self) -> bool:
        return self._validity.is_started

    def start(self) -> None:
        self._validity.start(self.validity_seconds)
        self._cooldown.start(self.resend_cooldown_seconds)

    def expires_in(self) -> int:
        return self._validity.remaining()

    def resend_in(self) -> int:
        return self._cooldown.remaining()

    def is_expired(self) -> bool:
        return self._validity.is_expired()

    def can_resend(self) -> bool:
        return self._cooldown.remaining() == 0

    def reset(self) -> None:
        self._validity.reset()
        self._cooldown.reset()
