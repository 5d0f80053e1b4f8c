import json
from pathlib import Path

import pytest

from chatroom.client.models import SavedIdentity
from chatroom.client.storage import STORAGE_KEY, IdentityStore


@pytest.fixture()
def store(tmp_path: Path) -> IdentityStore:
    return IdentityStore(tmp_path / "state.json")


def identity() -> SavedIdentity:
    return SavedIdentity(id="user-123", name="Alice", last_seen="2023-12-01T10:00:00Z")


def test_save_and_load_round_trip(store: IdentityStore) -> None:
    store.save_last_user(identity())

    assert store.get_last_user() == identity()
    raw = json.loads(store.path.read_text(encoding="utf-8"))
    assert raw[STORAGE_KEY] == {"id": "user-123", "name": "Alice", "lastSeen": "2023-12-01T10:00:00Z"}


def test_missing_file_means_no_identity(store: IdentityStore) -> None:
    assert store.get_last_user() is None


def test_unparsable_file_means_no_identity(store: IdentityStore) -> None:
    store.path.write_text("{not json", encoding="utf-8")

    assert store.get_last_user() is None


@pytest.mark.parametrize(
    "payload",
    [
        {"id": "user-123", "name": "Alice"},
        {"id": 123, "name": "Alice", "lastSeen": "2023-12-01T10:00:00Z"},
        "user-123",
        None,
    ],
)
def test_incomplete_identity_is_ignored(store: IdentityStore, payload) -> None:
    store.path.write_text(json.dumps({STORAGE_KEY: payload}), encoding="utf-8")

    assert store.get_last_user() is None


def test_remove_keeps_other_keys(store: IdentityStore) -> None:
    store.path.write_text(json.dumps({"theme": "dark"}), encoding="utf-8")
    store.save_last_user(identity())

    store.remove_last_user()

    assert store.get_last_user() is None
    assert json.loads(store.path.read_text(encoding="utf-8")) == {"theme": "dark"}


def test_available_in_writable_directory(store: IdentityStore) -> None:
    assert store.is_available()
    assert list(store.path.parent.iterdir()) == []


def test_unavailable_when_directory_cannot_be_created(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file", encoding="utf-8")
    store = IdentityStore(blocker / "state.json")

    assert not store.is_available()
    store.save_last_user(identity())
    assert store.get_last_user() is None
