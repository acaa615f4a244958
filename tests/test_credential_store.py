from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from pathlib import Path

import pytest

from myflix.api.errors import ApiError
from myflix.core.security import verify_password
from myflix.users.models import ProfileUpdateRequest, RegisterRequest
from myflix.users.repository import UserRepository
from myflix.users.service import CredentialStore


def _store(tmp_path: Path) -> CredentialStore:
    return CredentialStore(UserRepository(tmp_path))


def _register(store: CredentialStore, username: str = "validuser1"):
    return store.create(
        RegisterRequest(
            username=username,
            password="pa55word",
            email=f"{username}@example.com",
            birthday=date(1990, 5, 1),
        )
    )


def test_create_hashes_password_and_persists_user(tmp_path: Path) -> None:
    store = _store(tmp_path)

    created = _register(store)
    loaded = store.find_by_username("validuser1")

    assert created.user_id
    assert created.password_hash != "pa55word"
    assert verify_password("pa55word", loaded.password_hash)
    assert loaded.birthday == date(1990, 5, 1)
    assert loaded.favorites == []


@pytest.mark.parametrize(
    ("username", "password", "email"),
    [
        ("ab", "pa55word", "ab@example.com"),
        ("bad user", "pa55word", "bad@example.com"),
        ("bad_user", "pa55word", "bad@example.com"),
        ("  alice1  ", "pa55word", "alice1@example.com"),
        ("gooduser", "", "good@example.com"),
        ("gooduser", "pa55word", "not-an-email"),
    ],
)
def test_create_rejects_invalid_fields(
    tmp_path: Path, username: str, password: str, email: str
) -> None:
    store = _store(tmp_path)

    with pytest.raises(ApiError) as exc:
        store.create(RegisterRequest(username=username, password=password, email=email))

    assert exc.value.status_code == 422
    assert store.list_users() == []


def test_create_duplicate_username_is_conflict(tmp_path: Path) -> None:
    store = _store(tmp_path)
    _register(store)

    with pytest.raises(ApiError) as exc:
        _register(store)

    assert exc.value.status_code == 400
    assert exc.value.detail["error_code"] == "USERNAME_TAKEN"


def test_concurrent_registrations_for_same_username_create_exactly_one(
    tmp_path: Path,
) -> None:
    store = _store(tmp_path)
    barrier = threading.Barrier(2)

    def attempt() -> str:
        barrier.wait()
        try:
            _register(store, "racinguser")
        except ApiError as exc:
            return exc.detail["error_code"]
        return "created"

    with ThreadPoolExecutor(max_workers=2) as pool:
        outcomes = sorted(pool.map(lambda _: attempt(), range(2)))

    assert outcomes == ["USERNAME_TAKEN", "created"]
    assert [user.username for user in store.list_users()] == ["racinguser"]


def test_update_profile_changes_only_given_fields(tmp_path: Path) -> None:
    store = _store(tmp_path)
    created = _register(store)

    updated = store.update_profile(
        "validuser1", ProfileUpdateRequest(email="new@example.com")
    )

    assert updated.email == "new@example.com"
    assert updated.birthday == date(1990, 5, 1)
    assert updated.password_hash == created.password_hash


def test_update_profile_can_rename_and_clear_birthday(tmp_path: Path) -> None:
    store = _store(tmp_path)
    _register(store)

    updated = store.update_profile(
        "validuser1", ProfileUpdateRequest(username="renamed1", birthday=None)
    )

    assert updated.username == "renamed1"
    assert updated.birthday is None
    with pytest.raises(ApiError) as exc:
        store.find_by_username("validuser1")
    assert exc.value.status_code == 404


def test_update_profile_rename_to_taken_username_is_conflict(tmp_path: Path) -> None:
    store = _store(tmp_path)
    _register(store, "firstuser")
    _register(store, "seconduser")

    with pytest.raises(ApiError) as exc:
        store.update_profile("seconduser", ProfileUpdateRequest(username="firstuser"))

    assert exc.value.status_code == 400


def test_update_profile_revalidates_changed_fields(tmp_path: Path) -> None:
    store = _store(tmp_path)
    _register(store)

    with pytest.raises(ApiError) as exc:
        store.update_profile("validuser1", ProfileUpdateRequest(username="abc"))

    assert exc.value.status_code == 422


def test_update_profile_missing_user_is_not_found(tmp_path: Path) -> None:
    store = _store(tmp_path)

    with pytest.raises(ApiError) as exc:
        store.update_profile("ghostuser", ProfileUpdateRequest(email="g@example.com"))

    assert exc.value.status_code == 404


def test_update_password_replaces_hash(tmp_path: Path) -> None:
    store = _store(tmp_path)
    _register(store)

    updated = store.update_password("validuser1", "n3w-password")

    assert verify_password("n3w-password", updated.password_hash)
    assert not verify_password("pa55word", updated.password_hash)


def test_update_password_rejects_empty_password(tmp_path: Path) -> None:
    store = _store(tmp_path)
    _register(store)

    with pytest.raises(ApiError) as exc:
        store.update_password("validuser1", "")

    assert exc.value.status_code == 422


def test_delete_missing_user_is_not_found(tmp_path: Path) -> None:
    store = _store(tmp_path)

    with pytest.raises(ApiError) as exc:
        store.delete("bob")

    assert exc.value.status_code == 404
    assert exc.value.detail["error_code"] == "USER_NOT_FOUND"


def test_delete_removes_user(tmp_path: Path) -> None:
    store = _store(tmp_path)
    _register(store)

    store.delete("validuser1")

    assert store.list_users() == []
