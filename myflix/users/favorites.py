"""Favorite-movie set operations for a user."""

from __future__ import annotations

import logging
from typing import Protocol

from myflix.api.errors import ApiError, ApiErrorCode, user_not_found
from myflix.users.models import UserRecord
from myflix.users.service import UserRepositoryProtocol

LOGGER = logging.getLogger(__name__)


class MovieCatalogProtocol(Protocol):
    def movie_exists(self, movie_id: str) -> bool:
        """Return whether the catalog knows ``movie_id``."""


class FavoritesManager:
    """Add and remove movie ids with set semantics.

    Movie ids are weak references: unless a catalog is supplied, ids that
    do not exist in the catalog are stored as-is.
    """

    def __init__(
        self,
        repo: UserRepositoryProtocol,
        catalog: MovieCatalogProtocol | None = None,
    ) -> None:
        self._repo = repo
        self._catalog = catalog

    def add(self, username: str, movie_id: str) -> UserRecord:
        if self._catalog is not None and not self._catalog.movie_exists(movie_id):
            raise ApiError(
                status_code=404,
                error_code=ApiErrorCode.MOVIE_NOT_FOUND,
                message=f"Movie not found: {movie_id}",
            )
        updated = self._repo.add_favorite(username, movie_id)
        if updated is None:
            raise user_not_found(username)
        LOGGER.info("favorite_added", extra={"username": username, "movie_id": movie_id})
        return updated

    def remove(self, username: str, movie_id: str) -> UserRecord:
        updated = self._repo.remove_favorite(username, movie_id)
        if updated is None:
            raise user_not_found(username)
        LOGGER.info(
            "favorite_removed", extra={"username": username, "movie_id": movie_id}
        )
        return updated
