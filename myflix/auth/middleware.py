"""HTTP middleware that enforces bearer-token auth on protected routes."""

from __future__ import annotations

import re
from typing import Callable

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from myflix.api.errors import to_error_payload
from myflix.auth.service import AuthService
from myflix.core.config import AuthConfig
from myflix.core.logging import set_actor

PROTECTED_PREFIXES = ("/users", "/movies", "/genres", "/directors")
_FAVORITE_PATH_RE = re.compile(r"^/users/[^/]+/movies/[^/]+/?$")


def _extract_bearer_token(authorization: str) -> str:
    """Extract bearer token from authorization header value."""
    parts = (authorization or "").strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return ""
    return parts[1].strip()


def requires_auth(method: str, path: str, config: AuthConfig) -> bool:
    """Return whether ``method path`` must carry a valid token."""
    if method == "OPTIONS":
        return False
    if not path.startswith(PROTECTED_PREFIXES):
        return False
    if method == "POST" and path.rstrip("/") == "/users":
        return False
    if not config.protect_favorites and _FAVORITE_PATH_RE.match(path):
        return method not in {"POST", "DELETE"}
    return True


def create_auth_middleware(service: AuthService, config: AuthConfig) -> Callable:
    """Create middleware function that validates tokens on protected routes."""

    async def auth_middleware(request: Request, call_next: Callable):
        """Authenticate the caller and attach the identity to request state."""
        if not requires_auth(request.method, request.url.path, config):
            return await call_next(request)

        token = _extract_bearer_token(request.headers.get("authorization", ""))
        try:
            identity = service.authenticate(token)
        except HTTPException as exc:
            return JSONResponse(
                status_code=exc.status_code,
                content=to_error_payload(exc.detail, exc.status_code),
                headers={"WWW-Authenticate": "Bearer"},
            )

        request.state.user = identity
        set_actor(identity.username)
        return await call_next(request)

    return auth_middleware
