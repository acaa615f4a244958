"""Pydantic models for the movie catalog."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Genre(BaseModel):
    name: str
    description: str = ""


class Director(BaseModel):
    name: str
    bio: str = ""
    birth: str | None = None
    death: str | None = None


class MovieRecord(BaseModel):
    """Persisted catalog document."""

    movie_id: str
    title: str
    description: str = ""
    genre: Genre | None = None
    director: Director | None = None
    actors: list[str] = Field(default_factory=list)
    image_path: str = ""
    featured: bool = False
