"""Anti-CSRF state tokens for the authorization redirect."""

from __future__ import annotations

import re
import secrets

STATE_LENGTH = 128

# Alphabet produced by secrets.token_urlsafe
STATE_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


def generate_state(length: int = STATE_LENGTH) -> str:
    """Return a cryptographically random, URL-safe state token.

    Args:
        length: Number of characters; at least 128 by default.
    """
    if length < 1:
        raise ValueError("state length must be positive")
    # token_urlsafe(n) yields ~1.33 * n characters
    return secrets.token_urlsafe(length)[:length]


def is_valid_state(value: str, length: int = STATE_LENGTH) -> bool:
    """Check a value against the state length and alphabet policy."""
    return len(value) == length and bool(STATE_PATTERN.match(value))
