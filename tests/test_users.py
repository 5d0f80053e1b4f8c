import pytest

from chatroom.server import users
from chatroom.server.events import USER_JOINED
from chatroom.shared.errors import InvalidInput, NotFound


def test_create_user_sets_matching_timestamps(db, bus) -> None:
    user = users.create_user(db, bus, "  Alice ")

    assert user.name == "Alice"
    assert user.id
    assert user.created_at == user.last_seen


def test_create_user_rejects_invalid_name(db, bus) -> None:
    with pytest.raises(InvalidInput):
        users.create_user(db, bus, "   ")
    assert users.list_users(db) == []


def test_create_user_publishes_user_joined(db, bus, monkeypatch) -> None:
    published = []
    monkeypatch.setattr(bus, "publish", lambda topic, payload: published.append((topic, payload)) or 0)

    user = users.create_user(db, bus, "Alice")

    assert published == [(USER_JOINED, user)]


def test_two_users_have_no_messages(db, bus) -> None:
    alice = users.create_user(db, bus, "Alice")
    bob = users.create_user(db, bus, "Bob")

    assert len(users.list_users(db)) == 2
    assert users.list_user_messages(db, alice.id) == []
    assert users.list_user_messages(db, bob.id) == []


def test_get_user_returns_none_for_unknown_id(db) -> None:
    assert users.get_user(db, "non-existent-id") is None


def test_get_user_is_stable_across_calls(db, bus) -> None:
    created = users.create_user(db, bus, "Alice")

    first = users.get_user(db, created.id)
    second = users.get_user(db, created.id)

    assert (first.id, first.name, first.created_at) == (second.id, second.name, second.created_at)


def test_touch_last_seen_moves_forward(db, bus) -> None:
    user = users.create_user(db, bus, "Alice")
    before = user.last_seen

    touched = users.touch_last_seen(db, user.id)

    assert touched.last_seen >= before
    assert touched.last_seen >= touched.created_at


def test_touch_last_seen_unknown_user(db) -> None:
    with pytest.raises(NotFound):
        users.touch_last_seen(db, "non-existent-id")


def test_list_users_orders_by_last_seen_desc(db, bus) -> None:
    alice = users.create_user(db, bus, "Alice")
    users.create_user(db, bus, "Bob")
    users.touch_last_seen(db, alice.id)

    listed = users.list_users(db)

    assert listed[0].id == alice.id
    seen = [u.last_seen for u in listed]
    assert seen == sorted(seen, reverse=True)
