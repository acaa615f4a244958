from __future__ import annotations

import pytest

from myflix.core.security import (
    InvalidPasswordError,
    MalformedHashError,
    build_signed_token,
    decode_signed_token,
    hash_password,
    verify_password,
)


def test_hash_password_verifies_same_password_and_rejects_other() -> None:
    stored = hash_password("s3cret-pass")

    assert stored != "s3cret-pass"
    assert stored.startswith("pbkdf2_sha256$")
    assert verify_password("s3cret-pass", stored) is True
    assert verify_password("s3cret-pasS", stored) is False
    assert verify_password("", stored) is False


def test_hash_password_is_salted() -> None:
    assert hash_password("same-password") != hash_password("same-password")


@pytest.mark.parametrize("bad", ["", None])
def test_hash_password_rejects_empty_input(bad) -> None:
    with pytest.raises(InvalidPasswordError):
        hash_password(bad)


@pytest.mark.parametrize(
    "stored",
    [
        "plaintext",
        "bcrypt$10$abc$def",
        "pbkdf2_sha256$notanumber$c2FsdA$ZGlnZXN0",
        "pbkdf2_sha256$120000$$",
        "pbkdf2_sha256$120000$c2FsdA",
    ],
)
def test_verify_password_raises_on_malformed_hash(stored: str) -> None:
    with pytest.raises(MalformedHashError):
        verify_password("whatever", stored)


def test_signed_token_roundtrip_and_expiry() -> None:
    token = build_signed_token({"sub": "u1", "exp": 2_000}, "secret")

    assert decode_signed_token(token, "secret", now=1_000)["sub"] == "u1"
    with pytest.raises(ValueError, match="expired"):
        decode_signed_token(token, "secret", now=2_001)


def test_signed_token_rejects_wrong_secret_and_tampering() -> None:
    token = build_signed_token({"sub": "u1", "exp": 2_000}, "secret")
    header, _, signature = token.split(".")
    forged = build_signed_token({"sub": "admin", "exp": 2_000}, "other")

    with pytest.raises(ValueError, match="signature"):
        decode_signed_token(token, "other", now=1_000)
    with pytest.raises(ValueError, match="signature"):
        decode_signed_token(
            f"{header}.{forged.split('.')[1]}.{signature}", "secret", now=1_000
        )


@pytest.mark.parametrize("token", ["", "abc", "a.b", "a.b.c.d"])
def test_signed_token_rejects_malformed_tokens(token: str) -> None:
    with pytest.raises(ValueError):
        decode_signed_token(token, "secret", now=1_000)


@pytest.mark.parametrize("suffix", ["$$$$", "=", "==", "!"])
def test_signed_token_rejects_non_base64url_characters(suffix: str) -> None:
    token = build_signed_token({"sub": "u1", "exp": 2_000}, "secret")

    with pytest.raises(ValueError, match="Malformed"):
        decode_signed_token(token + suffix, "secret", now=1_000)
    header, payload, signature = token.split(".")
    with pytest.raises(ValueError, match="Malformed"):
        decode_signed_token(f"{header}.{payload}{suffix}.{signature}", "secret", now=1_000)


def test_signed_token_without_expiration_is_rejected() -> None:
    token = build_signed_token({"sub": "u1"}, "secret")

    with pytest.raises(ValueError, match="expiration"):
        decode_signed_token(token, "secret", now=1_000)
