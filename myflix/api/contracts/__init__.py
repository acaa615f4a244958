"""Public API response contracts."""

from myflix.api.contracts.models import (
    ApiErrorResponse,
    DirectorResponse,
    GenreResponse,
    HealthResponse,
    MovieResponse,
    UserResponse,
)

__all__ = [
    "ApiErrorResponse",
    "DirectorResponse",
    "GenreResponse",
    "HealthResponse",
    "MovieResponse",
    "UserResponse",
]
