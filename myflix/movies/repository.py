"""Read-only movie catalog repository: MongoDB primary, JSON file fallback."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pymongo.database import Database
from pymongo.errors import PyMongoError

from myflix.api.errors import StoreError
from myflix.core.mongo import MOVIES_COLLECTION
from myflix.movies.models import MovieRecord

LOGGER = logging.getLogger(__name__)


class MovieRepository:
    """Catalog lookups by id, title, genre name and director name."""

    def __init__(self, app_root: Path, database: Database | None = None) -> None:
        self._movies = database[MOVIES_COLLECTION] if database is not None else None
        self._movies_file = app_root / "runtime" / "store" / "movies.json"

    def _read_rows(self) -> list[dict[str, Any]]:
        if not self._movies_file.exists():
            return []
        try:
            payload = json.loads(self._movies_file.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            LOGGER.warning("movie_store_file_unreadable", exc_info=True)
            return []
        return payload if isinstance(payload, list) else []

    def _find(self, query: dict[str, Any]) -> list[MovieRecord]:
        if self._movies is not None:
            try:
                docs = list(self._movies.find(query, {"_id": 0}))
            except PyMongoError as exc:
                raise StoreError("Movie store operation failed") from exc
            return [MovieRecord.model_validate(doc) for doc in docs]

        rows = [row for row in self._read_rows() if _matches(row, query)]
        return [MovieRecord.model_validate(row) for row in rows]

    def list_movies(self) -> list[MovieRecord]:
        return self._find({})

    def get_by_title(self, title: str) -> MovieRecord | None:
        found = self._find({"title": title})
        return found[0] if found else None

    def find_by_genre(self, name: str) -> MovieRecord | None:
        found = self._find({"genre.name": name})
        return found[0] if found else None

    def find_by_director(self, name: str) -> MovieRecord | None:
        found = self._find({"director.name": name})
        return found[0] if found else None

    def movie_exists(self, movie_id: str) -> bool:
        return bool(self._find({"movie_id": movie_id}))


def _matches(row: dict[str, Any], query: dict[str, Any]) -> bool:
    """Evaluate an equality-only dotted-path query against a plain dict."""
    for dotted_key, expected in query.items():
        value: Any = row
        for part in dotted_key.split("."):
            value = value.get(part) if isinstance(value, dict) else None
        if value != expected:
            return False
    return True
