from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from myflix.api.contracts import HealthResponse
from myflix.api.http_setup import register_exception_handlers, register_http_middleware
from myflix.auth.middleware import create_auth_middleware
from myflix.auth.router import create_auth_router
from myflix.auth.service import AuthService
from myflix.core.config import AppConfig
from myflix.core.logging import setup_logging
from myflix.core.mongo import apply_mongo_migrations, open_mongo_database
from myflix.movies.repository import MovieRepository
from myflix.movies.router import create_movies_router
from myflix.users.favorites import FavoritesManager
from myflix.users.repository import UserRepository
from myflix.users.router import UsersRouter
from myflix.users.service import CredentialStore

LOGGER = logging.getLogger(__name__)

APP_ROOT = Path(__file__).resolve().parent


def create_app(
    config: AppConfig,
    *,
    user_repo: UserRepository,
    movie_repo: MovieRepository,
    app_root: Path = APP_ROOT,
) -> FastAPI:
    """Wire services, routers and middleware around the given repositories."""
    app = FastAPI(title="myFlix API", version="1.0.0")

    auth_service = AuthService(user_repo, config.auth)
    credential_store = CredentialStore(user_repo)
    favorites = FavoritesManager(
        user_repo,
        catalog=movie_repo if config.storage.verify_favorite_movies else None,
    )

    # Innermost first: auth must run after correlation ids are assigned.
    app.middleware("http")(create_auth_middleware(auth_service, config.auth))
    register_http_middleware(app, config=config, logger=LOGGER)
    register_exception_handlers(app, logger=LOGGER)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.security.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )

    static_dir = app_root / config.security.static_dir
    if static_dir.is_dir():
        app.mount("/public", StaticFiles(directory=str(static_dir)), name="public")

    @app.get("/", response_class=PlainTextResponse)
    def welcome() -> str:
        return "Welcome to myFlix!"

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(status="ok")

    app.include_router(create_auth_router(auth_service))
    app.include_router(UsersRouter(credential_store, favorites).build())
    app.include_router(create_movies_router(movie_repo))
    return app


def create_app_from_env() -> FastAPI:
    """Build the application from environment configuration."""
    load_dotenv()
    config = AppConfig.from_env()
    setup_logging(config.logging.level)

    database = open_mongo_database(config.storage)
    if database is not None:
        apply_mongo_migrations(database)
    else:
        LOGGER.info("using_file_store")

    return create_app(
        config,
        user_repo=UserRepository(APP_ROOT, database),
        movie_repo=MovieRepository(APP_ROOT, database),
    )


app = create_app_from_env()
