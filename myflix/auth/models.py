"""Pydantic models for authentication domain."""

from __future__ import annotations

from pydantic import BaseModel, Field

from myflix.api.contracts.models import UserResponse


class LoginRequest(BaseModel):
    """Login request payload."""

    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class AuthSession(BaseModel):
    """Issued token with the identity it was issued for."""

    token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
