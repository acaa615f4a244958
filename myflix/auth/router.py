"""Authentication API router."""

from __future__ import annotations

from fastapi import APIRouter

from myflix.api.contracts import ApiErrorResponse
from myflix.auth.models import AuthSession, LoginRequest
from myflix.auth.service import AuthService


def create_auth_router(service: AuthService) -> APIRouter:
    """Build the login router."""
    router = APIRouter(tags=["auth"])

    @router.post(
        "/login",
        response_model=AuthSession,
        responses={401: {"model": ApiErrorResponse}},
    )
    def login(req: LoginRequest) -> AuthSession:
        """Authenticate user and return a signed token."""
        return service.login(req.username, req.password)

    return router
