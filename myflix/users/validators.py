"""Field rules for user records."""

from __future__ import annotations

import re

from myflix.api.errors import validation_failed

USERNAME_MIN_LENGTH = 5
_EMAIL_RE = re.compile(r"[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}")


def normalize_username(value: str | None) -> str:
    """Return the username as given or raise a 422 API error.

    Surrounding whitespace is not trimmed; it fails the alphanumeric rule.
    """
    username = value or ""
    if len(username) < USERNAME_MIN_LENGTH:
        raise validation_failed(
            f"Username must be at least {USERNAME_MIN_LENGTH} characters long"
        )
    if not username.isascii() or not username.isalnum():
        raise validation_failed(
            "Username contains non alphanumeric characters - not allowed"
        )
    return username


def normalize_email(value: str | None) -> str:
    email = (value or "").strip()
    if not _EMAIL_RE.fullmatch(email):
        raise validation_failed("Email does not appear to be valid")
    return email


def require_password(value: str | None) -> str:
    if not value:
        raise validation_failed("Password is required")
    return value
