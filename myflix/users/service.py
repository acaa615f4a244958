"""Credential store: user registration, lookup, profile and password changes."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Protocol

from myflix.api.errors import user_not_found, username_taken, validation_failed
from myflix.core.security import InvalidPasswordError, hash_password
from myflix.users.models import ProfileUpdateRequest, RegisterRequest, UserRecord
from myflix.users.repository import DuplicateUsernameError
from myflix.users.validators import normalize_email, normalize_username, require_password

LOGGER = logging.getLogger(__name__)


class UserRepositoryProtocol(Protocol):
    """Protocol describing repository methods used by user services."""

    def get_user(self, username: str) -> UserRecord | None:
        """Return user by username, or ``None`` when it does not exist."""

    def list_users(self) -> list[UserRecord]:
        """Return every stored user."""

    def insert_user(self, user: UserRecord) -> None:
        """Insert user, raising ``DuplicateUsernameError`` on a taken name."""

    def update_fields(self, username: str, fields: dict[str, Any]) -> UserRecord | None:
        """Apply a partial update atomically."""

    def add_favorite(self, username: str, movie_id: str) -> UserRecord | None:
        """Add a movie id to the favorites set."""

    def remove_favorite(self, username: str, movie_id: str) -> UserRecord | None:
        """Remove a movie id from the favorites set."""

    def delete_user(self, username: str) -> bool:
        """Delete user and return success flag."""


def _hash_or_reject(password: str) -> str:
    try:
        return hash_password(require_password(password))
    except InvalidPasswordError as exc:
        raise validation_failed(str(exc)) from exc


class CredentialStore:
    """Owns user record persistence; all lookups are by username."""

    def __init__(self, repo: UserRepositoryProtocol) -> None:
        self._repo = repo

    def find_by_username(self, username: str) -> UserRecord:
        user = self._repo.get_user(username)
        if user is None:
            raise user_not_found(username)
        return user

    def list_users(self) -> list[UserRecord]:
        return self._repo.list_users()

    def create(self, req: RegisterRequest) -> UserRecord:
        """Register a new user.

        The availability check only produces a friendly early error; the
        repository insert is what actually enforces uniqueness, so a
        concurrent registration that slips past the check still fails with
        the same 400.
        """
        username = normalize_username(req.username)
        email = normalize_email(req.email)
        require_password(req.password)

        if self._repo.get_user(username) is not None:
            raise username_taken(username)

        user = UserRecord(
            user_id=uuid.uuid4().hex,
            username=username,
            password_hash=_hash_or_reject(req.password),
            email=email,
            birthday=req.birthday,
            favorites=[],
        )
        try:
            self._repo.insert_user(user)
        except DuplicateUsernameError as exc:
            raise username_taken(username) from exc

        LOGGER.info("user_registered", extra={"username": username})
        return user

    def update_profile(self, username: str, req: ProfileUpdateRequest) -> UserRecord:
        """Apply a partial profile update; the password hash is never touched."""
        fields: dict[str, Any] = {}
        provided = req.model_fields_set
        if "username" in provided and req.username is not None:
            fields["username"] = normalize_username(req.username)
        if "email" in provided and req.email is not None:
            fields["email"] = normalize_email(req.email)
        if "birthday" in provided:
            fields["birthday"] = req.birthday.isoformat() if req.birthday else None

        if not fields:
            return self.find_by_username(username)

        new_username = fields.get("username")
        if (
            new_username
            and new_username != username
            and self._repo.get_user(new_username) is not None
        ):
            raise username_taken(new_username)

        try:
            updated = self._repo.update_fields(username, fields)
        except DuplicateUsernameError as exc:
            raise username_taken(str(new_username)) from exc
        if updated is None:
            raise user_not_found(username)

        LOGGER.info("user_profile_updated", extra={"username": updated.username})
        return updated

    def update_password(self, username: str, new_password: str) -> UserRecord:
        updated = self._repo.update_fields(
            username, {"password_hash": _hash_or_reject(new_password)}
        )
        if updated is None:
            raise user_not_found(username)
        LOGGER.info("user_password_updated", extra={"username": username})
        return updated

    def delete(self, username: str) -> None:
        if not self._repo.delete_user(username):
            raise user_not_found(username)
        LOGGER.info("user_deleted", extra={"username": username})
