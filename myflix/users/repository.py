"""Repository for user records: MongoDB primary, JSON file-store fallback."""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from threading import Lock
from typing import Any, Iterator

from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from myflix.api.errors import StoreError
from myflix.core.mongo import USERS_COLLECTION
from myflix.users.models import UserRecord

LOGGER = logging.getLogger(__name__)


class DuplicateUsernameError(Exception):
    """Raised when a write would give two records the same username."""


@contextmanager
def _mongo_errors() -> Iterator[None]:
    try:
        yield
    except DuplicateKeyError as exc:
        raise DuplicateUsernameError(str(exc)) from exc
    except PyMongoError as exc:
        raise StoreError("User store operation failed") from exc


class UserRepository:
    """User persistence keyed by unique ``username``.

    With a MongoDB database every mutation is a single-document atomic
    operation and uniqueness is enforced by the ``username`` unique index.
    Without one, records live in ``runtime/store/users.json`` and every
    read-modify-write runs under one lock, which gives the same guarantees
    within a process.
    """

    def __init__(self, app_root: Path, database: Database | None = None) -> None:
        self._users = database[USERS_COLLECTION] if database is not None else None
        self._lock = Lock()
        self._users_file = app_root / "runtime" / "store" / "users.json"
        if self._users is None:
            self._users_file.parent.mkdir(parents=True, exist_ok=True)

    @property
    def uses_mongo(self) -> bool:
        return self._users is not None

    def _read_rows(self, *, for_write: bool = False) -> list[dict[str, Any]]:
        """Read the user list; an unreadable file reads as empty.

        Writers get ``StoreError`` instead so a corrupted file is never
        overwritten with a partial list.
        """
        if not self._users_file.exists():
            return []
        try:
            payload = json.loads(self._users_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            if for_write:
                raise StoreError("User store file is unreadable") from exc
            LOGGER.warning("user_store_file_unreadable", exc_info=True)
            return []
        if not isinstance(payload, list):
            if for_write:
                raise StoreError("User store file is not a list")
            return []
        return payload

    def _write_rows(self, rows: list[dict[str, Any]]) -> None:
        tmp_path = self._users_file.with_suffix(".json.tmp")
        try:
            tmp_path.write_text(
                json.dumps(rows, ensure_ascii=False, indent=2), encoding="utf-8"
            )
            tmp_path.replace(self._users_file)
        except OSError as exc:
            raise StoreError("User store write failed") from exc

    @staticmethod
    def _find_row(rows: list[dict[str, Any]], username: str) -> dict[str, Any] | None:
        for row in rows:
            if row.get("username") == username:
                return row
        return None

    def get_user(self, username: str) -> UserRecord | None:
        """Get user by exact username."""
        if self._users is not None:
            with _mongo_errors():
                doc = self._users.find_one({"username": username}, {"_id": 0})
            return UserRecord.model_validate(doc) if doc else None

        with self._lock:
            row = self._find_row(self._read_rows(), username)
        return UserRecord.model_validate(row) if row else None

    def list_users(self) -> list[UserRecord]:
        if self._users is not None:
            with _mongo_errors():
                docs = list(self._users.find({}, {"_id": 0}))
            return [UserRecord.model_validate(doc) for doc in docs]

        with self._lock:
            rows = self._read_rows()
        return [UserRecord.model_validate(row) for row in rows]

    def insert_user(self, user: UserRecord) -> None:
        """Insert a new user; raise ``DuplicateUsernameError`` if the name exists."""
        doc = user.to_document()
        if self._users is not None:
            with _mongo_errors():
                self._users.insert_one(dict(doc))
            return

        with self._lock:
            rows = self._read_rows(for_write=True)
            if self._find_row(rows, user.username) is not None:
                raise DuplicateUsernameError(user.username)
            rows.append(doc)
            self._write_rows(rows)

    def update_fields(self, username: str, fields: dict[str, Any]) -> UserRecord | None:
        """Set the given top-level fields and return the updated record."""
        if self._users is not None:
            with _mongo_errors():
                doc = self._users.find_one_and_update(
                    {"username": username},
                    {"$set": fields},
                    projection={"_id": 0},
                    return_document=ReturnDocument.AFTER,
                )
            return UserRecord.model_validate(doc) if doc else None

        with self._lock:
            rows = self._read_rows(for_write=True)
            row = self._find_row(rows, username)
            if row is None:
                return None
            new_username = fields.get("username")
            if (
                new_username
                and new_username != username
                and self._find_row(rows, new_username) is not None
            ):
                raise DuplicateUsernameError(new_username)
            row.update(fields)
            self._write_rows(rows)
        return UserRecord.model_validate(row)

    def add_favorite(self, username: str, movie_id: str) -> UserRecord | None:
        """Add ``movie_id`` to favorites unless already present."""
        if self._users is not None:
            with _mongo_errors():
                doc = self._users.find_one_and_update(
                    {"username": username},
                    {"$addToSet": {"favorites": movie_id}},
                    projection={"_id": 0},
                    return_document=ReturnDocument.AFTER,
                )
            return UserRecord.model_validate(doc) if doc else None

        with self._lock:
            rows = self._read_rows(for_write=True)
            row = self._find_row(rows, username)
            if row is None:
                return None
            favorites = list(row.get("favorites") or [])
            if movie_id not in favorites:
                favorites.append(movie_id)
                row["favorites"] = favorites
                self._write_rows(rows)
        return UserRecord.model_validate(row)

    def remove_favorite(self, username: str, movie_id: str) -> UserRecord | None:
        """Remove every occurrence of ``movie_id`` from favorites."""
        if self._users is not None:
            with _mongo_errors():
                doc = self._users.find_one_and_update(
                    {"username": username},
                    {"$pull": {"favorites": movie_id}},
                    projection={"_id": 0},
                    return_document=ReturnDocument.AFTER,
                )
            return UserRecord.model_validate(doc) if doc else None

        with self._lock:
            rows = self._read_rows(for_write=True)
            row = self._find_row(rows, username)
            if row is None:
                return None
            favorites = list(row.get("favorites") or [])
            if movie_id in favorites:
                row["favorites"] = [item for item in favorites if item != movie_id]
                self._write_rows(rows)
        return UserRecord.model_validate(row)

    def delete_user(self, username: str) -> bool:
        """Delete user and report whether a record was removed."""
        if self._users is not None:
            with _mongo_errors():
                result = self._users.delete_one({"username": username})
            return result.deleted_count > 0

        with self._lock:
            rows = self._read_rows(for_write=True)
            remaining = [row for row in rows if row.get("username") != username]
            if len(remaining) == len(rows):
                return False
            self._write_rows(remaining)
        return True
