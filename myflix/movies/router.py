"""FastAPI router for read-only catalog endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from myflix.api.contracts import (
    ApiErrorResponse,
    DirectorResponse,
    GenreResponse,
    MovieResponse,
)
from myflix.api.errors import ApiError, ApiErrorCode
from myflix.movies.models import MovieRecord
from myflix.movies.repository import MovieRepository

_NOT_FOUND = {404: {"model": ApiErrorResponse}}


def _to_response(movie: MovieRecord) -> MovieResponse:
    return MovieResponse(
        id=movie.movie_id,
        title=movie.title,
        description=movie.description,
        genre=GenreResponse(**movie.genre.model_dump()) if movie.genre else None,
        director=(
            DirectorResponse(**movie.director.model_dump()) if movie.director else None
        ),
        actors=movie.actors,
        image_path=movie.image_path,
        featured=movie.featured,
    )


def create_movies_router(repo: MovieRepository) -> APIRouter:
    """Build catalog router with movie, genre and director lookups."""
    router = APIRouter(tags=["movies"])

    @router.get("/movies", response_model=list[MovieResponse])
    def list_movies() -> list[MovieResponse]:
        return [_to_response(movie) for movie in repo.list_movies()]

    @router.get("/movies/{title}", response_model=MovieResponse, responses=_NOT_FOUND)
    def get_movie(title: str) -> MovieResponse:
        """Return a single movie by its exact title."""
        movie = repo.get_by_title(title)
        if movie is None:
            raise ApiError(
                status_code=404,
                error_code=ApiErrorCode.MOVIE_NOT_FOUND,
                message=f"Movie not found: {title}",
            )
        return _to_response(movie)

    @router.get("/genres/{name}", response_model=GenreResponse, responses=_NOT_FOUND)
    def get_genre(name: str) -> GenreResponse:
        movie = repo.find_by_genre(name)
        if movie is None or movie.genre is None:
            raise ApiError(
                status_code=404,
                error_code=ApiErrorCode.GENRE_NOT_FOUND,
                message=f"Genre not found: {name}",
            )
        return GenreResponse(**movie.genre.model_dump())

    @router.get(
        "/directors/{name}", response_model=DirectorResponse, responses=_NOT_FOUND
    )
    def get_director(name: str) -> DirectorResponse:
        movie = repo.find_by_director(name)
        if movie is None or movie.director is None:
            raise ApiError(
                status_code=404,
                error_code=ApiErrorCode.DIRECTOR_NOT_FOUND,
                message=f"Director not found: {name}",
            )
        return DirectorResponse(**movie.director.model_dump())

    return router
