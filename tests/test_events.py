import asyncio
import threading

import pytest

from chatroom.server.events import MESSAGE_ADDED, USER_JOINED, EventBus


def test_subscriber_receives_published_payload() -> None:
    bus = EventBus()

    async def scenario():
        subscription = bus.subscribe(MESSAGE_ADDED)
        assert bus.publish(MESSAGE_ADDED, {"id": "m1"}) == 1
        received = await asyncio.wait_for(subscription.__anext__(), timeout=1)
        subscription.cancel()
        return received

    assert asyncio.run(scenario()) == {"id": "m1"}


def test_topics_are_independent() -> None:
    bus = EventBus()

    async def scenario():
        async with bus.subscribe(USER_JOINED) as joined:
            assert bus.publish(MESSAGE_ADDED, "message") == 0
            bus.publish(USER_JOINED, "user")
            return await asyncio.wait_for(joined.__anext__(), timeout=1)

    assert asyncio.run(scenario()) == "user"


def test_late_subscriber_misses_earlier_events() -> None:
    bus = EventBus()
    bus.publish(MESSAGE_ADDED, "too early")

    async def scenario():
        async with bus.subscribe(MESSAGE_ADDED) as subscription:
            bus.publish(MESSAGE_ADDED, "on time")
            return await asyncio.wait_for(subscription.__anext__(), timeout=1)

    assert asyncio.run(scenario()) == "on time"


def test_cancel_ends_iteration_and_detaches() -> None:
    bus = EventBus()

    async def scenario():
        subscription = bus.subscribe(MESSAGE_ADDED)
        assert bus.subscriber_count(MESSAGE_ADDED) == 1
        subscription.cancel()
        items = [item async for item in subscription]
        return items, bus.subscriber_count(MESSAGE_ADDED)

    items, remaining = asyncio.run(scenario())
    assert items == []
    assert remaining == 0


def test_context_manager_exit_cancels() -> None:
    bus = EventBus()

    async def scenario():
        async with bus.subscribe(USER_JOINED):
            pass
        return bus.publish(USER_JOINED, "nobody listening")

    assert asyncio.run(scenario()) == 0


def test_publish_from_another_thread() -> None:
    bus = EventBus()

    async def scenario():
        async with bus.subscribe(MESSAGE_ADDED) as subscription:
            worker = threading.Thread(target=bus.publish, args=(MESSAGE_ADDED, "from worker"))
            worker.start()
            worker.join()
            return await asyncio.wait_for(subscription.__anext__(), timeout=1)

    assert asyncio.run(scenario()) == "from worker"


def test_unknown_topic_is_rejected() -> None:
    bus = EventBus()
    with pytest.raises(ValueError):
        bus.publish("MESSAGE_DELETED", {})
