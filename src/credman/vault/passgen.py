"""Random password generation for login credentials."""

import secrets
import string
from typing import Optional

from .exceptions import InvalidPasswordLength

ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits + "!@#$%^&*()"
DEFAULT_LENGTH = 16
MAX_LENGTH = 255


def validate_length(length: Optional[int]) -> int:
    """Resolve ``length`` to a usable value, defaulting to 16.

    Raises:
        InvalidPasswordLength: length is below 1 or above 255.
    """
    if length is None:
        return DEFAULT_LENGTH
    if length > MAX_LENGTH:
        raise InvalidPasswordLength(
            f"Password length {length} exceeds the maximum of {MAX_LENGTH}"
        )
    if length < 1:
        raise InvalidPasswordLength("Password length must be at least 1")
    return length


def generate_password(length: Optional[int] = None) -> str:
    """Return a cryptographically random password drawn from ALPHABET."""
    length = validate_length(length)
    return "".join(secrets.choice(ALPHABET) for _ in range(length))
