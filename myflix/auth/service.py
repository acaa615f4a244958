"""Token issuance at login and per-request token validation."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Callable, Protocol

from myflix.api.contracts import UserResponse
from myflix.api.errors import ApiError, ApiErrorCode
from myflix.auth.models import AuthSession
from myflix.core.config import AuthConfig
from myflix.core.security import (
    MalformedHashError,
    build_signed_token,
    decode_signed_token,
    verify_password,
)
from myflix.users.models import Identity, UserRecord

LOGGER = logging.getLogger(__name__)

TOKEN_TYPE = "access"


class CredentialLookup(Protocol):
    def get_user(self, username: str) -> UserRecord | None:
        """Return user by username, or ``None`` when it does not exist."""


def _invalid_credentials() -> ApiError:
    return ApiError(
        status_code=401,
        error_code=ApiErrorCode.AUTH_INVALID_CREDENTIALS,
        message="Incorrect username or password",
    )


def _invalid_token(message: str) -> ApiError:
    return ApiError(
        status_code=401,
        error_code=ApiErrorCode.AUTH_TOKEN_INVALID,
        message=message,
    )


class AuthService:
    """Issues signed, expiring tokens and validates them.

    Validation is stateless: a token is trusted on signature, issuer, type
    and expiry alone, without checking the user still exists.
    """

    def __init__(
        self,
        repo: CredentialLookup,
        config: AuthConfig,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._repo = repo
        self._config = config
        self._clock = clock

    def login(self, username: str, password: str) -> AuthSession:
        """Verify credentials and issue a token."""
        user = self._repo.get_user(username)
        if user is None:
            LOGGER.info("login_failed", extra={"username": username})
            raise _invalid_credentials()
        try:
            valid = verify_password(password, user.password_hash)
        except MalformedHashError:
            LOGGER.error("stored_password_hash_malformed", extra={"username": username})
            raise _invalid_credentials() from None
        if not valid:
            LOGGER.info("login_failed", extra={"username": username})
            raise _invalid_credentials()
        return self.issue_token(user)

    def issue_token(self, user: UserRecord) -> AuthSession:
        now_ts = int(self._clock())
        payload = {
            "iss": self._config.issuer,
            "sub": user.user_id,
            "username": user.username,
            "type": TOKEN_TYPE,
            "iat": now_ts,
            "exp": now_ts + self._config.token_ttl_seconds,
            "jti": uuid.uuid4().hex,
        }
        token = build_signed_token(payload, self._config.secret_key)
        LOGGER.info("token_issued", extra={"username": user.username})
        return AuthSession(
            token=token,
            token_type="bearer",
            expires_in=self._config.token_ttl_seconds,
            user=UserResponse.from_record(user),
        )

    def authenticate(self, token: str) -> Identity:
        """Validate a raw token and return the identity it carries."""
        if not token:
            raise ApiError(
                status_code=401,
                error_code=ApiErrorCode.AUTH_MISSING_TOKEN,
                message="Missing bearer token",
            )
        payload = self._decode(token)
        user_id = str(payload.get("sub") or "")
        username = str(payload.get("username") or "")
        if not user_id or not username:
            raise _invalid_token("Token carries no identity")
        return Identity(user_id=user_id, username=username)

    def _decode(self, token: str) -> dict[str, Any]:
        try:
            payload = decode_signed_token(
                token, self._config.secret_key, now=self._clock()
            )
        except ValueError as exc:
            raise _invalid_token(str(exc)) from exc

        if str(payload.get("iss") or "") != self._config.issuer:
            raise _invalid_token("Invalid token issuer")
        if str(payload.get("type") or "") != TOKEN_TYPE:
            raise _invalid_token("Invalid token type")
        return payload
