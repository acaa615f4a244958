from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from myflix.movies.repository import MovieRepository
from myflix.users.repository import UserRepository
from tests.app_factory import build_config, write_movies
from web_api import create_app


def _client(tmp_path: Path, **config_overrides) -> TestClient:
    write_movies(tmp_path)
    app = create_app(
        build_config(**config_overrides),
        user_repo=UserRepository(tmp_path),
        movie_repo=MovieRepository(tmp_path),
        app_root=tmp_path,
    )
    return TestClient(app)


def _register(client: TestClient, username: str = "validuser1"):
    return client.post(
        "/users",
        json={
            "username": username,
            "password": "pa55word",
            "email": f"{username}@example.com",
            "birthday": "1990-05-01",
        },
    )


def _auth_headers(client: TestClient, username: str = "validuser1") -> dict[str, str]:
    response = client.post("/login", json={"username": username, "password": "pa55word"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def client(tmp_path: Path) -> TestClient:
    return _client(tmp_path)


def test_welcome_and_health_are_public(client: TestClient) -> None:
    assert client.get("/").text == "Welcome to myFlix!"
    assert client.get("/health").json() == {"status": "ok"}


def test_register_returns_user_without_password(client: TestClient) -> None:
    response = _register(client)

    assert response.status_code == 201
    body = response.json()
    assert body["username"] == "validuser1"
    assert body["birthday"] == "1990-05-01"
    assert body["favorites"] == []
    assert "password" not in body
    assert "password_hash" not in body


def test_register_short_username_is_validation_error(client: TestClient) -> None:
    response = _register(client, "ab")

    assert response.status_code == 422
    assert response.json()["error_code"] == "VALIDATION_ERROR"


def test_register_padded_username_is_rejected_not_renamed(client: TestClient) -> None:
    response = client.post(
        "/users",
        json={
            "username": "  alice1  ",
            "password": "pa55word",
            "email": "alice1@example.com",
        },
    )

    assert response.status_code == 422
    assert response.json()["error_code"] == "VALIDATION_ERROR"
    assert client.post(
        "/login", json={"username": "alice1", "password": "pa55word"}
    ).status_code == 401


def test_register_missing_field_is_validation_error(client: TestClient) -> None:
    response = client.post("/users", json={"username": "validuser1"})

    assert response.status_code == 422
    assert response.json()["error_code"] == "VALIDATION_ERROR"


def test_register_duplicate_username_is_400(client: TestClient) -> None:
    _register(client)

    response = _register(client)

    assert response.status_code == 400
    assert response.json()["error_code"] == "USERNAME_TAKEN"


def test_login_returns_token_and_identity(client: TestClient) -> None:
    _register(client)

    response = client.post(
        "/login", json={"username": "validuser1", "password": "pa55word"}
    )

    body = response.json()
    assert response.status_code == 200
    assert body["token_type"] == "bearer"
    assert body["user"]["username"] == "validuser1"
    assert "password_hash" not in body["user"]


def test_login_bad_password_is_401(client: TestClient) -> None:
    _register(client)

    response = client.post("/login", json={"username": "validuser1", "password": "nope"})

    assert response.status_code == 401
    assert response.json()["error_code"] == "AUTH_INVALID_CREDENTIALS"


def test_protected_routes_require_token(client: TestClient) -> None:
    _register(client)

    missing = client.get("/users")
    invalid = client.get("/users", headers={"Authorization": "Bearer a.b.c"})

    assert missing.status_code == 401
    assert missing.json()["error_code"] == "AUTH_MISSING_TOKEN"
    assert invalid.status_code == 401
    assert invalid.json()["error_code"] == "AUTH_TOKEN_INVALID"


def test_user_profile_lifecycle(client: TestClient) -> None:
    _register(client)
    headers = _auth_headers(client)

    listed = client.get("/users", headers=headers)
    fetched = client.get("/users/validuser1", headers=headers)
    updated = client.put(
        "/users/validuser1", json={"email": "changed@example.com"}, headers=headers
    )

    assert listed.status_code == 200
    assert [user["username"] for user in listed.json()] == ["validuser1"]
    assert fetched.json()["email"] == "validuser1@example.com"
    assert updated.status_code == 200
    assert updated.json()["email"] == "changed@example.com"
    assert client.get("/users/nobody1", headers=headers).status_code == 404


def test_password_update_allows_login_with_new_password(client: TestClient) -> None:
    _register(client)
    headers = _auth_headers(client)

    response = client.put(
        "/users/validuser1/password", json={"password": "n3w-pass"}, headers=headers
    )
    old_login = client.post(
        "/login", json={"username": "validuser1", "password": "pa55word"}
    )
    new_login = client.post(
        "/login", json={"username": "validuser1", "password": "n3w-pass"}
    )

    assert response.status_code == 200
    assert "password_hash" not in response.json()
    assert old_login.status_code == 401
    assert new_login.status_code == 200


def test_favorites_add_and_remove_with_set_semantics(client: TestClient) -> None:
    _register(client)
    headers = _auth_headers(client)

    client.post("/users/validuser1/movies/m-gladiator", headers=headers)
    twice = client.post("/users/validuser1/movies/m-gladiator", headers=headers)
    removed = client.delete("/users/validuser1/movies/m-parasite", headers=headers)

    assert twice.status_code == 200
    assert twice.json()["favorites"] == ["m-gladiator"]
    assert removed.status_code == 200
    assert removed.json()["favorites"] == ["m-gladiator"]


def test_favorites_require_token_by_default(client: TestClient) -> None:
    _register(client)

    response = client.post("/users/validuser1/movies/m-gladiator")

    assert response.status_code == 401


def test_favorites_open_when_configured(tmp_path: Path) -> None:
    client = _client(tmp_path, protect_favorites=False)
    _register(client)

    response = client.post("/users/validuser1/movies/m-gladiator")

    assert response.status_code == 200
    assert response.json()["favorites"] == ["m-gladiator"]


def test_strict_favorites_reject_unknown_movie(tmp_path: Path) -> None:
    client = _client(tmp_path, verify_favorite_movies=True)
    _register(client)
    headers = _auth_headers(client)

    ok = client.post("/users/validuser1/movies/m-parasite", headers=headers)
    missing = client.post("/users/validuser1/movies/m-unknown", headers=headers)

    assert ok.status_code == 200
    assert missing.status_code == 404
    assert missing.json()["error_code"] == "MOVIE_NOT_FOUND"


def test_delete_user_returns_text_and_missing_user_is_404(client: TestClient) -> None:
    _register(client)
    headers = _auth_headers(client)

    deleted = client.delete("/users/validuser1", headers=headers)
    again = client.delete("/users/validuser1", headers=headers)

    assert deleted.status_code == 200
    assert deleted.text == "validuser1 was deleted."
    assert again.status_code == 404
    assert again.json()["error_code"] == "USER_NOT_FOUND"


def test_movie_catalog_endpoints(client: TestClient) -> None:
    _register(client)
    headers = _auth_headers(client)

    movies = client.get("/movies", headers=headers)
    movie = client.get("/movies/Gladiator", headers=headers)
    genre = client.get("/genres/Thriller", headers=headers)
    director = client.get("/directors/Ridley Scott", headers=headers)
    missing = client.get("/movies/Unknown", headers=headers)

    assert [item["title"] for item in movies.json()] == ["Gladiator", "Parasite"]
    assert movie.json()["id"] == "m-gladiator"
    assert genre.json() == {"name": "Thriller", "description": "Suspense."}
    assert director.json()["name"] == "Ridley Scott"
    assert missing.status_code == 404
    assert missing.json()["error_code"] == "MOVIE_NOT_FOUND"


def test_movie_catalog_requires_token(client: TestClient) -> None:
    assert client.get("/movies").status_code == 401


def test_openapi_documents_error_contract_for_user_lookup(client: TestClient) -> None:
    schema = client.app.openapi()
    get_user = schema["paths"]["/users/{username}"]["get"]

    assert get_user["responses"]["404"]["content"]["application/json"]["schema"][
        "$ref"
    ].endswith("ApiErrorResponse")
