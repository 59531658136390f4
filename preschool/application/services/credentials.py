"""Credential generation: temporary passwords and invitation codes."""

from __future__ import annotations

import secrets
import string

TEMP_PASSWORD_SYMBOLS = "!@#$%^&*"
TEMP_PASSWORD_ALPHABET = string.ascii_letters + string.digits + TEMP_PASSWORD_SYMBOLS
TEMP_PASSWORD_MIN_LENGTH = 12

# 32 symbols without 0/O and 1/I; 12 characters give 60 bits.
INVITATION_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
INVITATION_CODE_LENGTH = 12


def generate_temp_password(length: int = TEMP_PASSWORD_MIN_LENGTH) -> str:
    """Generate a temporary password with guaranteed complexity.

    At least one lowercase, one uppercase, one digit and one symbol from
    TEMP_PASSWORD_SYMBOLS; remaining positions are drawn uniformly from the
    combined alphabet, then the whole string is shuffled.
    """
    if length < TEMP_PASSWORD_MIN_LENGTH:
        raise ValueError(f"Temporary passwords are at least {TEMP_PASSWORD_MIN_LENGTH} characters")
    rng = secrets.SystemRandom()
    chars = [
        rng.choice(string.ascii_lowercase),
        rng.choice(string.ascii_uppercase),
        rng.choice(string.digits),
        rng.choice(TEMP_PASSWORD_SYMBOLS),
    ]
    chars.extend(rng.choice(TEMP_PASSWORD_ALPHABET) for _ in range(length - len(chars)))
    rng.shuffle(chars)
    return "".join(chars)


def generate_invitation_code(length: int = INVITATION_CODE_LENGTH) -> str:
    """Generate an opaque, unambiguous uppercase invitation code."""
    return "".join(secrets.choice(INVITATION_CODE_ALPHABET) for _ in range(length))
