"""Password hashing and signed identity tokens."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import os
import re
import time
from typing import Any

HASH_ALGORITHM = "pbkdf2_sha256"
HASH_ROUNDS = 120_000
SALT_BYTES = 16
_B64URL_SEGMENT = re.compile(r"[A-Za-z0-9_-]+")


class InvalidPasswordError(ValueError):
    """Raised when a password to hash is empty or not a string."""


class MalformedHashError(ValueError):
    """Raised when a stored hash was not produced by ``hash_password``."""


def _b64url_encode(raw: bytes) -> str:
    """Return URL-safe base64 string without padding."""
    return base64.urlsafe_b64encode(raw).decode("utf-8").rstrip("=")


def _b64url_decode(value: str) -> bytes:
    """Decode URL-safe base64 string with optional missing padding."""
    padding = "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode((value + padding).encode("utf-8"))


def _derive(password: str, salt: bytes, rounds: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, rounds)


def hash_password(password: str) -> str:
    """Hash password using PBKDF2-HMAC-SHA256 with a random salt.

    The output format is ``pbkdf2_sha256$<rounds>$<salt>$<digest>``, so two
    calls with the same password yield different strings.
    """
    if not isinstance(password, str) or not password:
        raise InvalidPasswordError("Password must be a non-empty string")
    salt = os.urandom(SALT_BYTES)
    derived = _derive(password, salt, HASH_ROUNDS)
    return f"{HASH_ALGORITHM}${HASH_ROUNDS}${_b64url_encode(salt)}${_b64url_encode(derived)}"


def _parse_hash(stored_hash: str) -> tuple[int, bytes, bytes]:
    if not isinstance(stored_hash, str):
        raise MalformedHashError("Stored hash must be a string")
    parts = stored_hash.split("$")
    if len(parts) != 4 or parts[0] != HASH_ALGORITHM:
        raise MalformedHashError("Unsupported hash format")
    _, rounds_raw, salt_b64, digest_b64 = parts
    try:
        rounds = int(rounds_raw)
        salt = _b64url_decode(salt_b64)
        digest = _b64url_decode(digest_b64)
    except (ValueError, binascii.Error) as exc:
        raise MalformedHashError("Corrupted hash fields") from exc
    if rounds <= 0 or not salt or not digest:
        raise MalformedHashError("Corrupted hash fields")
    return rounds, salt, digest


def verify_password(password: str, stored_hash: str) -> bool:
    """Check ``password`` against a hash from ``hash_password``.

    A wrong password returns ``False``; only a structurally invalid
    ``stored_hash`` raises ``MalformedHashError``.
    """
    rounds, salt, expected = _parse_hash(stored_hash)
    if not isinstance(password, str):
        return False
    derived = _derive(password, salt, rounds)
    return hmac.compare_digest(derived, expected)


def _sign(signing_input: bytes, secret_key: str) -> bytes:
    return hmac.new(secret_key.encode("utf-8"), signing_input, hashlib.sha256).digest()


def build_signed_token(payload: dict[str, Any], secret_key: str) -> str:
    """Create compact signed token using JWT-like 3-part structure."""
    header = {"alg": "HS256", "typ": "JWT"}
    header_part = _b64url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_part = _b64url_encode(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_part}.{payload_part}".encode("utf-8")
    signature_part = _b64url_encode(_sign(signing_input, secret_key))
    return f"{header_part}.{payload_part}.{signature_part}"


def decode_signed_token(
    token: str, secret_key: str, *, now: float | None = None
) -> dict[str, Any]:
    """Decode and verify compact signed token, raising ``ValueError`` on failure.

    Tokens without an ``exp`` claim are rejected.
    """
    parts = (token or "").split(".")
    if len(parts) != 3 or not all(_B64URL_SEGMENT.fullmatch(part) for part in parts):
        raise ValueError("Malformed token")
    header_part, payload_part, signature_part = parts

    signing_input = f"{header_part}.{payload_part}".encode("utf-8")
    try:
        got_sig = _b64url_decode(signature_part)
    except (ValueError, binascii.Error) as exc:
        raise ValueError("Malformed token") from exc
    if not hmac.compare_digest(_sign(signing_input, secret_key), got_sig):
        raise ValueError("Invalid token signature")

    try:
        payload = json.loads(_b64url_decode(payload_part).decode("utf-8"))
    except (ValueError, binascii.Error) as exc:
        raise ValueError("Invalid token payload") from exc
    if not isinstance(payload, dict):
        raise ValueError("Invalid token payload")

    try:
        exp = int(payload.get("exp") or 0)
    except (TypeError, ValueError) as exc:
        raise ValueError("Invalid token expiration") from exc
    if exp <= 0:
        raise ValueError("Token has no expiration")
    current = time.time() if now is None else now
    if exp < int(current):
        raise ValueError("Token expired")

    return payload
