"""
Local credential checks.

The validate_* functions are total: any input yields a bool, nothing raises.
The check_* helpers raise FieldValidationError and are run before any
gateway call, so locally-invalid input never costs a network request.
"""

import re
from typing import Any, Optional

from .exceptions import FieldValidationError
from .models import Credentials, SignUpDetails

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8


def validate_email(value: Any) -> bool:
    """True if value has the local@domain.tld shape."""
    if not isinstance(value, str):
        return False
    return EMAIL_PATTERN.fullmatch(value) is not None


def validate_password(value: Any) -> bool:
    """True if value has 8+ chars with a lowercase, an uppercase and a digit."""
    if not isinstance(value, str) or len(value) < MIN_PASSWORD_LENGTH:
        return False
    return (
        any(c.islower() for c in value)
        and any(c.isupper() for c in value)
        and any(c.isdigit() for c in value)
    )


def check_email(email: Optional[str]) -> str:
    """Return the trimmed email or raise a field error."""
    email = (email or "").strip().lower()
    if not email:
        raise FieldValidationError("email", "Please enter your email address")
    if not validate_email(email):
        raise FieldValidationError("email", "Please enter a valid email address")
    return email


def check_new_password(password: Optional[str]) -> str:
    if not validate_password(password):
        raise FieldValidationError(
            "password",
            "Password must be at least 8 characters and include "
            "an uppercase letter, a lowercase letter and a number",
        )
    return password  # type: ignore[return-value]


def check_sign_in_credentials(credentials: Credentials) -> Credentials:
    """
    Validate sign-in input.

    Only the shape of the email and the presence of a password are checked;
    strength rules apply when a password is chosen, not when it is used.
    """
    email = check_email(credentials.email)
    if not credentials.password:
        raise FieldValidationError("password", "Please enter your password")
    return Credentials(email=email, password=credentials.password)


def check_sign_up(credentials: Credentials, details: Optional[SignUpDetails]) -> Credentials:
    """Validate sign-up input, terms checkbox included."""
    email = check_email(credentials.email)
    check_new_password(credentials.password)
    details = details or SignUpDetails()
    if not details.terms_accepted:
        raise FieldValidationError("terms", "Please accept the Terms of Service")
    if not details.first_name.strip():
        raise FieldValidationError("first_name", "Please enter your first name")
    if not details.last_name.strip():
        raise FieldValidationError("last_name", "Please enter your last name")
    return Credentials(email=email, password=credentials.password)
