"""
Domain: Password policy.

Rules, checked in this order (the first failing rule is reported):
1. At least 8 characters
2. At least one uppercase letter (A-Z)
3. At least one lowercase letter (a-z)
4. At least one digit (0-9)
5. At least one special character from !@#$%&*

Generated passwords contain one character of each class, are padded with
draws from all classes, then shuffled. Randomness comes from `secrets`.
"""

from __future__ import annotations

import secrets
import string
from typing import List, Optional

UPPERCASE: str = string.ascii_uppercase
LOWERCASE: str = string.ascii_lowercase
DIGITS: str = string.digits
SPECIAL_CHARACTERS: str = "!@#$%&*"

MIN_PASSWORD_LENGTH: int = 8
DEFAULT_GENERATED_LENGTH: int = 12

ERROR_TOO_SHORT = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
ERROR_NO_UPPERCASE = "Password must contain at least 1 uppercase letter"
ERROR_NO_LOWERCASE = "Password must contain at least 1 lowercase letter"
ERROR_NO_DIGIT = "Password must contain at least 1 digit"
ERROR_NO_SPECIAL = f"Password must contain at least 1 special character ({SPECIAL_CHARACTERS})"

_REQUIRED_CLASSES = (UPPERCASE, LOWERCASE, DIGITS, SPECIAL_CHARACTERS)
_ALL_CHARACTERS = "".join(_REQUIRED_CLASSES)

_random = secrets.SystemRandom()


def generate_password(length: int = DEFAULT_GENERATED_LENGTH) -> str:
    """
    Generate a random password that satisfies every policy rule.

    Raises:
        ValueError: If `length` cannot hold one character per required class
    """

    if length < len(_REQUIRED_CLASSES):
        raise ValueError(f"length must be >= {len(_REQUIRED_CLASSES)}")

    chars: List[str] = [secrets.choice(pool) for pool in _REQUIRED_CLASSES]
    chars.extend(secrets.choice(_ALL_CHARACTERS) for _ in range(length - len(chars)))
    _random.shuffle(chars)
    return "".join(chars)


def validate_password(password: str) -> Optional[str]:
    """Return the message of the first rule `password` breaks, or None if it passes."""

    if len(password) < MIN_PASSWORD_LENGTH:
        return ERROR_TOO_SHORT
    if not any(ch in UPPERCASE for ch in password):
        return ERROR_NO_UPPERCASE
    if not any(ch in LOWERCASE for ch in password):
        return ERROR_NO_LOWERCASE
    if not any(ch in DIGITS for ch in password):
        return ERROR_NO_DIGIT
    if not any(ch in SPECIAL_CHARACTERS for ch in password):
        return ERROR_NO_SPECIAL
    return None


__all__ = [
    "DEFAULT_GENERATED_LENGTH",
    "ERROR_NO_DIGIT",
    "ERROR_NO_LOWERCASE",
    "ERROR_NO_SPECIAL",
    "ERROR_NO_UPPERCASE",
    "ERROR_TOO_SHORT",
    "MIN_PASSWORD_LENGTH",
    "SPECIAL_CHARACTERS",
    "generate_password",
    "validate_password",
]
