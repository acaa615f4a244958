"""Pydantic API response models used in OpenAPI contracts."""

from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

from myflix.users.models import UserRecord


class ApiErrorResponse(BaseModel):
    """Stable error envelope for API responses."""

    error_code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")


class HealthResponse(BaseModel):
    """Health check response payload."""

    status: Literal["ok"]


class UserResponse(BaseModel):
    """Outbound user shape; the password hash is deliberately absent."""

    id: str
    username: str
    email: str
    birthday: date | None = None
    favorites: list[str] = Field(default_factory=list)

    @classmethod
    def from_record(cls, user: UserRecord) -> "UserResponse":
        return cls(
            id=user.user_id,
            username=user.username,
            email=user.email,
            birthday=user.birthday,
            favorites=list(dict.fromkeys(user.favorites)),
        )


class GenreResponse(BaseModel):
    name: str
    description: str = ""


class DirectorResponse(BaseModel):
    name: str
    bio: str = ""
    birth: str | None = None
    death: str | None = None


class MovieResponse(BaseModel):
    """Catalog movie payload."""

    id: str
    title: str
    description: str = ""
    genre: GenreResponse | None = None
    director: DirectorResponse | None = None
    actors: list[str] = Field(default_factory=list)
    image_path: str = ""
    featured: bool = False
