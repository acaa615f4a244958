#!/usr/bin/env python3
"""One-shot catalog import from a JSON file into MongoDB or the file store."""

from __future__ import annotations

import argparse
import json
import os
from pathlib import Path
from typing import Any

import pymongo
from dotenv import load_dotenv
from pydantic import ValidationError

from myflix.core.mongo import MOVIES_COLLECTION
from myflix.movies.models import MovieRecord

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_SOURCE = PROJECT_ROOT / "data" / "movies.json"
DEFAULT_STORE_FILE = PROJECT_ROOT / "runtime" / "store" / "movies.json"
DEFAULT_DB_NAME = "myflix"


def _parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Import catalog movies.")
    parser.add_argument(
        "--source",
        type=Path,
        default=DEFAULT_SOURCE,
        help="Path to a JSON list of movies.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate and print the import plan without writing anything.",
    )
    return parser.parse_args()


def _load_movies(source: Path) -> tuple[list[MovieRecord], list[str]]:
    """Validate source rows, returning movies and per-row error messages."""
    payload = json.loads(source.read_text(encoding="utf-8"))
    if not isinstance(payload, list):
        raise ValueError(f"Expected list in {source}, got {type(payload).__name__}")
    movies: list[MovieRecord] = []
    errors: list[str] = []
    for idx, row in enumerate(payload):
        try:
            movies.append(MovieRecord.model_validate(row))
        except ValidationError as exc:
            errors.append(f"row {idx}: {exc.error_count()} validation error(s)")
    return movies, errors


def _write_file_store(movies: list[MovieRecord], store_file: Path) -> None:
    store_file.parent.mkdir(parents=True, exist_ok=True)
    existing: dict[str, dict[str, Any]] = {}
    if store_file.exists():
        for row in json.loads(store_file.read_text(encoding="utf-8")):
            existing[str(row.get("movie_id"))] = row
    for movie in movies:
        existing[movie.movie_id] = movie.model_dump()
    store_file.write_text(
        json.dumps(list(existing.values()), ensure_ascii=False, indent=2),
        encoding="utf-8",
    )


def _write_mongo(movies: list[MovieRecord], mongo_uri: str, db_name: str) -> None:
    client: Any = pymongo.MongoClient(mongo_uri, serverSelectionTimeoutMS=3000)
    try:
        collection = client[db_name][MOVIES_COLLECTION]
        for movie in movies:
            collection.update_one(
                {"movie_id": movie.movie_id},
                {"$set": movie.model_dump()},
                upsert=True,
            )
    finally:
        client.close()


def main() -> int:
    """Run the import and return a process exit code."""
    load_dotenv()
    args = _parse_args()
    movies, errors = _load_movies(args.source)
    for message in errors:
        print(f"skip {message}")
    print(f"valid movies: {len(movies)}")
    if args.dry_run or not movies:
        return 1 if errors else 0

    mongo_uri = os.getenv("MONGODB_URI", "").strip()
    if mongo_uri:
        db_name = os.getenv("MONGODB_DB", DEFAULT_DB_NAME).strip() or DEFAULT_DB_NAME
        _write_mongo(movies, mongo_uri, db_name)
        print(f"upserted {len(movies)} movies into {db_name}.{MOVIES_COLLECTION}")
    else:
        _write_file_store(movies, DEFAULT_STORE_FILE)
        print(f"wrote {len(movies)} movies to {DEFAULT_STORE_FILE}")
    return 1 if errors else 0


if __name__ == "__main__":
    raise SystemExit(main())
