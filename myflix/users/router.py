"""FastAPI router for user and favorites endpoints."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from myflix.api.contracts import ApiErrorResponse, UserResponse
from myflix.users.favorites import FavoritesManager
from myflix.users.models import PasswordUpdateRequest, ProfileUpdateRequest, RegisterRequest
from myflix.users.service import CredentialStore

_NOT_FOUND = {404: {"model": ApiErrorResponse}}


class UsersRouter:
    """Factory wrapper that builds the users API router from its services."""

    def __init__(self, store: CredentialStore, favorites: FavoritesManager) -> None:
        self._store = store
        self._favorites = favorites

    def build(self) -> APIRouter:
        """Create and return configured users router."""
        router = APIRouter(tags=["users"])

        @router.post(
            "/users",
            status_code=201,
            response_model=UserResponse,
            responses={
                400: {"model": ApiErrorResponse},
                422: {"model": ApiErrorResponse},
            },
        )
        def register_user(req: RegisterRequest) -> UserResponse:
            """Register a new user account."""
            return UserResponse.from_record(self._store.create(req))

        @router.get("/users", response_model=list[UserResponse])
        def list_users() -> list[UserResponse]:
            return [UserResponse.from_record(user) for user in self._store.list_users()]

        @router.get(
            "/users/{username}", response_model=UserResponse, responses=_NOT_FOUND
        )
        def get_user(username: str) -> UserResponse:
            return UserResponse.from_record(self._store.find_by_username(username))

        @router.put(
            "/users/{username}",
            response_model=UserResponse,
            responses={
                400: {"model": ApiErrorResponse},
                404: {"model": ApiErrorResponse},
                422: {"model": ApiErrorResponse},
            },
        )
        def update_user(username: str, req: ProfileUpdateRequest) -> UserResponse:
            """Update username, email or birthday."""
            return UserResponse.from_record(self._store.update_profile(username, req))

        @router.put(
            "/users/{username}/password",
            response_model=UserResponse,
            responses={404: {"model": ApiErrorResponse}, 422: {"model": ApiErrorResponse}},
        )
        def update_password(username: str, req: PasswordUpdateRequest) -> UserResponse:
            return UserResponse.from_record(
                self._store.update_password(username, req.password)
            )

        @router.post(
            "/users/{username}/movies/{movie_id}",
            response_model=UserResponse,
            responses=_NOT_FOUND,
        )
        def add_favorite(username: str, movie_id: str) -> UserResponse:
            """Add a movie to the user's favorites; repeated adds are no-ops."""
            return UserResponse.from_record(self._favorites.add(username, movie_id))

        @router.delete(
            "/users/{username}/movies/{movie_id}",
            response_model=UserResponse,
            responses=_NOT_FOUND,
        )
        def remove_favorite(username: str, movie_id: str) -> UserResponse:
            return UserResponse.from_record(self._favorites.remove(username, movie_id))

        @router.delete(
            "/users/{username}",
            response_class=PlainTextResponse,
            responses=_NOT_FOUND,
        )
        def delete_user(username: str) -> str:
            """Deregister a user."""
            self._store.delete(username)
            return f"{username} was deleted."

        return router
