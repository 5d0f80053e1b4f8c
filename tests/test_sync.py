import threading
import time

import pytest

from chatroom.client import queries
from chatroom.client.api import UNEXPECTED_ERROR
from chatroom.client.sync import (
    MESSAGE_REQUIRED,
    ChatFeed,
    PollingSync,
    RepeatingTimer,
    ScrollAction,
    SubscriptionSync,
    SyncIntervals,
    create_sync,
    scroll_action,
)

from fakes import FakeAPI


class FakeTimer:
    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.running = False

    def start(self):
        self.running = True

    def stop(self):
        self.running = False


class FakeListener:
    instances = []

    def __init__(self, endpoint, query, on_data, on_error):
        self.endpoint = endpoint
        self.query = query
        self.on_data = on_data
        self.on_error = on_error
        self.running = False
        FakeListener.instances.append(self)

    def start(self):
        self.running = True

    def stop(self):
        self.running = False


@pytest.fixture()
def api() -> FakeAPI:
    fake = FakeAPI()
    fake.add_user("alice", "Alice")
    fake.add_user("bob", "Bob")
    return fake


@pytest.fixture()
def feed(api) -> ChatFeed:
    return ChatFeed(api, api.users["alice"])


@pytest.mark.parametrize(
    "previous, current, expected",
    [
        (None, 0, None),
        (None, 3, ScrollAction.INSTANT),
        (0, 50, ScrollAction.INSTANT),
        (3, 4, ScrollAction.SMOOTH),
        (3, 8, ScrollAction.SMOOTH),
        (3, 9, ScrollAction.INSTANT),
        (3, 13, ScrollAction.INSTANT),
        (3, 3, None),
        (4, 3, None),
    ],
)
def test_scroll_action(previous, current, expected) -> None:
    assert scroll_action(previous, current) is expected


def test_send_refreshes_both_lists(api, feed) -> None:
    seen = []
    feed.add_listener(lambda f, kind: seen.append(kind))

    assert feed.send("  Hello Bob!  ")

    assert [m.content for m in feed.messages] == ["Hello Bob!"]
    assert [u.id for u in feed.users] == [u.id for u in api.list_users()]
    assert api.calls[:3] == ["create_message", "list_messages", "list_users"]
    assert seen == ["messages", "users"]


def test_send_blank_message_is_rejected_locally(api, feed) -> None:
    assert not feed.send("   ")

    assert feed.error == MESSAGE_REQUIRED
    assert api.calls == []


def test_send_too_long_message_is_rejected_locally(api, feed) -> None:
    assert not feed.send("x" * 1001)

    assert "1000" in feed.error
    assert api.calls == []


def test_failures_are_recorded_not_raised(api, feed) -> None:
    api.offline = True

    assert not feed.refresh_messages()
    assert not feed.refresh_users()
    assert not feed.heartbeat()
    assert not feed.send("hello")
    assert "connection refused" in feed.error


def test_heartbeat_touches_current_user(api, feed) -> None:
    before = feed.current_user.last_seen

    assert feed.heartbeat()

    assert feed.current_user.last_seen >= before
    assert api.calls == ["update_last_seen"]


def test_add_message_deduplicates(api, feed) -> None:
    message = api.create_message("hi", "bob")

    assert feed.add_message(message)
    assert not feed.add_message(message)
    assert len(feed.messages) == 1


def test_add_user_prepends(api, feed) -> None:
    feed.refresh_users()
    carol = api.add_user("carol", "Carol")

    assert feed.add_user(carol)
    assert feed.users[0].id == "carol"
    assert not feed.add_user(carol)


def test_polling_sync_uses_configured_intervals(api, feed) -> None:
    sync = PollingSync(feed, SyncIntervals(messages=1, users=5, heartbeat=30), timer_factory=FakeTimer)

    sync.start()

    assert [t.interval for t in sync.timers] == [1, 5, 30]
    assert [t.callback for t in sync.timers] == [feed.refresh_messages, feed.refresh_users, feed.heartbeat]
    assert all(t.running for t in sync.timers)
    assert api.calls[:2] == ["list_messages", "list_users"]

    timers = list(sync.timers)
    sync.stop()
    assert not any(t.running for t in timers)
    assert sync.timers == []


def test_message_poll_is_faster_than_user_poll() -> None:
    intervals = SyncIntervals()

    assert intervals.messages < intervals.users < intervals.heartbeat


def test_subscription_sync_applies_pushed_events(api, feed) -> None:
    FakeListener.instances = []
    sync = SubscriptionSync(feed, api.endpoint, timer_factory=FakeTimer, listener_factory=FakeListener)
    sync.start()

    by_query = {listener.query: listener for listener in FakeListener.instances}
    by_query[queries.MESSAGE_ADDED_SUBSCRIPTION].on_data(
        {
            "messageAdded": {
                "id": "m-1",
                "content": "pushed",
                "createdAt": "2023-12-01T10:00:00+00:00",
                "user": {"id": "bob", "name": "Bob"},
            }
        }
    )
    by_query[queries.USER_JOINED_SUBSCRIPTION].on_data(
        {"userJoined": {"id": "carol", "name": "Carol", "createdAt": "2023-12-01T10:00:00+00:00", "lastSeen": "2023-12-01T10:00:00+00:00"}}
    )

    assert [m.content for m in feed.messages] == ["pushed"]
    assert feed.users[0].id == "carol"
    assert [t.interval for t in sync.timers] == [SyncIntervals().heartbeat]

    sync.stop()
    assert not any(listener.running for listener in FakeListener.instances)


def test_create_sync_selects_strategy(feed) -> None:
    assert isinstance(create_sync(feed, mode="polling", timer_factory=FakeTimer), PollingSync)
    assert isinstance(create_sync(feed, mode="subscriptions", timer_factory=FakeTimer), SubscriptionSync)
    with pytest.raises(ValueError):
        create_sync(feed, mode="carrier-pigeon")


def test_repeating_timer_fires_until_stopped() -> None:
    fired = threading.Event()
    timer = RepeatingTimer(0.01, fired.set)

    timer.start()
    assert fired.wait(1)
    timer.stop()

    assert not timer.active


def test_unexpected_error_is_reported_not_raised(api, feed) -> None:
    api.failures = [ValueError("malformed payload")]

    assert not feed.refresh_messages()
    assert feed.error == UNEXPECTED_ERROR

    assert feed.refresh_messages()


def test_unexpected_error_while_sending_is_reported(api, feed) -> None:
    api.failures = [KeyError("createMessage")]

    assert not feed.send("hello")

    assert feed.error == UNEXPECTED_ERROR
    assert feed.messages == []


def test_failing_listener_does_not_break_refresh(api, feed) -> None:
    seen = []

    def broken(f, kind):
        raise RuntimeError("printer exploded")

    feed.add_listener(broken)
    feed.add_listener(lambda f, kind: seen.append(kind))

    assert feed.refresh_messages()
    assert seen == ["messages"]


def test_polling_keeps_firing_after_unexpected_error(api, feed) -> None:
    api.failures = [ValueError("malformed payload")]
    timer = RepeatingTimer(0.01, feed.refresh_messages)

    timer.start()
    deadline = time.monotonic() + 2
    while api.calls.count("list_messages") < 3 and time.monotonic() < deadline:
        time.sleep(0.01)
    timer.stop()

    assert api.calls.count("list_messages") >= 3
    assert feed.error == UNEXPECTED_ERROR


def test_repeating_timer_survives_raising_callback() -> None:
    fired = []
    again = threading.Event()

    def callback():
        fired.append(1)
        if len(fired) == 1:
            raise ValueError("boom")
        again.set()

    timer = RepeatingTimer(0.01, callback)
    timer.start()
    assert again.wait(2)
    timer.stop()
