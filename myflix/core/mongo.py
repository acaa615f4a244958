"""MongoDB connection bootstrap and versioned index migrations."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from myflix.core.config import StorageConfig
from myflix.core.logging import CORRELATION_ID_CTX

LOGGER = logging.getLogger(__name__)

USERS_COLLECTION = "users"
MOVIES_COLLECTION = "movies"

MigrationFn = Callable[[Any], None]


def _migration_01_user_indexes(db: Any) -> None:
    db[USERS_COLLECTION].create_index("username", unique=True)
    db[USERS_COLLECTION].create_index("user_id", unique=True)


def _migration_02_movie_indexes(db: Any) -> None:
    db[MOVIES_COLLECTION].create_index("movie_id", unique=True)
    db[MOVIES_COLLECTION].create_index("title")
    db[MOVIES_COLLECTION].create_index("genre.name")
    db[MOVIES_COLLECTION].create_index("director.name")


MIGRATIONS: list[tuple[str, MigrationFn]] = [
    ("01_user_indexes", _migration_01_user_indexes),
    ("02_movie_indexes", _migration_02_movie_indexes),
]


def open_mongo_database(config: StorageConfig) -> Database | None:
    """Connect to MongoDB, or return ``None`` to use the file store."""
    if not config.mongo_uri:
        return None
    try:
        client: MongoClient = MongoClient(config.mongo_uri, serverSelectionTimeoutMS=3000)
        client.admin.command("ping")
    except PyMongoError:
        LOGGER.warning("mongo_unavailable_falling_back_to_file_store", exc_info=True)
        return None
    return client[config.mongo_db]


def apply_mongo_migrations(db: Any) -> list[str]:
    """Apply pending migrations once each and return the ids applied now."""
    migration_collection = db["schema_migrations"]
    migration_collection.create_index("migration_id", unique=True)

    applied: list[str] = []
    for migration_id, migration_fn in MIGRATIONS:
        if migration_collection.find_one({"migration_id": migration_id}):
            continue
        migration_fn(db)
        migration_collection.insert_one(
            {
                "migration_id": migration_id,
                "applied_at": datetime.now(timezone.utc),
                "correlation_id": CORRELATION_ID_CTX.get(),
            }
        )
        applied.append(migration_id)
        LOGGER.info("mongo_migration_applied %s", migration_id)
    return applied
