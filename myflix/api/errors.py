"""Shared API error types and helpers."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from fastapi import HTTPException


class ApiErrorCode(StrEnum):
    """Machine-readable API error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    USERNAME_TAKEN = "USERNAME_TAKEN"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    MOVIE_NOT_FOUND = "MOVIE_NOT_FOUND"
    GENRE_NOT_FOUND = "GENRE_NOT_FOUND"
    DIRECTOR_NOT_FOUND = "DIRECTOR_NOT_FOUND"
    AUTH_MISSING_TOKEN = "AUTH_MISSING_TOKEN"
    AUTH_INVALID_CREDENTIALS = "AUTH_INVALID_CREDENTIALS"
    AUTH_TOKEN_INVALID = "AUTH_TOKEN_INVALID"
    STORE_ERROR = "STORE_ERROR"
    REQUEST_TOO_LARGE = "REQUEST_TOO_LARGE"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class ApiError(HTTPException):
    """HTTP exception carrying stable API error envelope."""

    def __init__(
        self, *, status_code: int, error_code: ApiErrorCode, message: str
    ) -> None:
        super().__init__(
            status_code=status_code,
            detail={"error_code": str(error_code), "message": message},
        )
        self.error_code = error_code


class StoreError(RuntimeError):
    """Persistence backend failed; surfaced to clients as a generic 500."""


def user_not_found(username: str) -> ApiError:
    return ApiError(
        status_code=404,
        error_code=ApiErrorCode.USER_NOT_FOUND,
        message=f"User not found: {username}",
    )


def username_taken(username: str) -> ApiError:
    return ApiError(
        status_code=400,
        error_code=ApiErrorCode.USERNAME_TAKEN,
        message=f"{username} already exists",
    )


def validation_failed(message: str) -> ApiError:
    return ApiError(
        status_code=422,
        error_code=ApiErrorCode.VALIDATION_ERROR,
        message=message,
    )


def to_error_payload(detail: Any, status_code: int) -> dict[str, str]:
    """Normalize HTTP exception detail into stable error payload."""
    if isinstance(detail, dict):
        error_code = str(detail.get("error_code") or f"HTTP_{status_code}")
        message = str(detail.get("message") or detail.get("detail") or "HTTP error")
        return {"error_code": error_code, "message": message}
    return {
        "error_code": f"HTTP_{status_code}",
        "message": str(detail or "HTTP error"),
    }
