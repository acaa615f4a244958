"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class AuthConfig:
    """Authentication-related configuration."""

    secret_key: str
    token_ttl_seconds: int
    issuer: str
    protect_favorites: bool = True


@dataclass(frozen=True)
class StorageConfig:
    """Persistence backend configuration."""

    mongo_uri: str
    mongo_db: str
    verify_favorite_movies: bool = False


@dataclass(frozen=True)
class LoggingConfig:
    """Structured logging configuration."""

    level: str


@dataclass(frozen=True)
class SecurityConfig:
    """API perimeter security settings."""

    cors_allowed_origins: list[str]
    request_max_bytes: int
    static_dir: str = "public"


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    auth: AuthConfig
    storage: StorageConfig
    logging: LoggingConfig
    security: SecurityConfig

    @staticmethod
    def from_env() -> "AppConfig":
        """Build app config from process environment."""
        secret_key = (
            os.getenv("AUTH_SECRET_KEY", "").strip() or "dev-insecure-secret-change-me"
        )
        token_ttl = int(os.getenv("AUTH_TOKEN_TTL_SECONDS", str(7 * 24 * 3600)))
        issuer = os.getenv("AUTH_ISSUER", "myflix").strip() or "myflix"
        protect_favorites = _env_flag("AUTH_PROTECT_FAVORITES", "1")
        mongo_uri = os.getenv("MONGODB_URI", "").strip()
        mongo_db = os.getenv("MONGODB_DB", "myflix").strip() or "myflix"
        verify_favorite_movies = _env_flag("FAVORITES_VERIFY_MOVIES", "0")
        log_level = os.getenv("LOG_LEVEL", "INFO").strip() or "INFO"
        cors_allowed_origins = [
            origin.strip()
            for origin in os.getenv(
                "CORS_ALLOWED_ORIGINS",
                "http://localhost:1234,http://localhost:4200",
            ).split(",")
            if origin.strip()
        ]
        request_max_bytes = int(os.getenv("REQUEST_MAX_BYTES", str(1024 * 1024)))
        static_dir = os.getenv("STATIC_DIR", "public").strip() or "public"

        return AppConfig(
            auth=AuthConfig(
                secret_key=secret_key,
                token_ttl_seconds=token_ttl,
                issuer=issuer,
                protect_favorites=protect_favorites,
            ),
            storage=StorageConfig(
                mongo_uri=mongo_uri,
                mongo_db=mongo_db,
                verify_favorite_movies=verify_favorite_movies,
            ),
            logging=LoggingConfig(level=log_level),
            security=SecurityConfig(
                cors_allowed_origins=cors_allowed_origins,
                request_max_bytes=request_max_bytes,
                static_dir=static_dir,
            ),
        )
