"""Pydantic models for the users domain."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field


class UserRecord(BaseModel):
    """Persisted user document."""

    user_id: str
    username: str
    password_hash: str
    email: str
    birthday: date | None = None
    favorites: list[str] = Field(default_factory=list)

    def to_document(self) -> dict:
        """Return a storage document; dates become ISO strings."""
        return self.model_dump(mode="json")


class RegisterRequest(BaseModel):
    """Registration payload."""

    username: str
    password: str
    email: str
    birthday: date | None = None


class ProfileUpdateRequest(BaseModel):
    """Partial profile update; omitted fields are left unchanged."""

    username: str | None = None
    email: str | None = None
    birthday: date | None = None


class PasswordUpdateRequest(BaseModel):
    password: str


class Identity(BaseModel):
    """Caller identity resolved from a valid token."""

    user_id: str
    username: str
