"""Keeping the message and user lists fresh while a user is in the chat."""
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..shared.errors import InvalidInput
from ..shared.validation import validate_message_content
from . import config, queries
from .api import UNEXPECTED_ERROR, APIClient, ChatClientError
from .logging_config import configure_logging
from .models import ChatMessage, User
from .subscriptions import SubscriptionListener

logger = configure_logging()

MESSAGE_REQUIRED = "Please enter a message."
BULK_ARRIVAL_THRESHOLD = 5


class ScrollAction(str, Enum):
    INSTANT = "auto"
    SMOOTH = "smooth"


def scroll_action(previous_count: Optional[int], current_count: int) -> Optional[ScrollAction]:
    """Decide how the message view follows new messages.

    ``previous_count`` is None before the first non-empty render.
    """
    if current_count == 0:
        return None
    if previous_count is None or previous_count == 0:
        return ScrollAction.INSTANT
    added = current_count - previous_count
    if added <= 0:
        return None
    if added > BULK_ARRIVAL_THRESHOLD:
        return ScrollAction.INSTANT
    return ScrollAction.SMOOTH


@dataclass
class SyncIntervals:
    messages: float = config.MESSAGE_POLL_SECONDS
    users: float = config.USER_POLL_SECONDS
    heartbeat: float = config.HEARTBEAT_SECONDS


class RepeatingTimer:
    """Calls ``callback`` every ``interval`` seconds on a daemon thread until stopped."""

    def __init__(self, interval: float, callback: Callable[[], Any]):
        self.interval = interval
        self.callback = callback
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def active(self) -> bool:
        return self._thread is not None and not self._stopped.is_set()

    def start(self) -> None:
        self._thread = threading.Thread(target=self._run, name="chat-poll", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stopped.wait(self.interval):
            try:
                self.callback()
            except Exception:
                logger.exception("TIMER_CALLBACK_FAIL callback=%s", getattr(self.callback, "__name__", self.callback))

    def stop(self) -> None:
        self._stopped.set()
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join(timeout=self.interval + 1)


TimerFactory = Callable[[float, Callable[[], Any]], Any]
FeedListener = Callable[["ChatFeed", str], None]


class ChatFeed:
    """Message and user lists as last seen by one signed-in user.

    Listeners are called with ``(feed, kind)`` where kind is ``"messages"``,
    ``"users"`` or ``"error"``. Methods never raise on network failures.
    """

    def __init__(self, api: APIClient, current_user: User):
        self.api = api
        self.current_user = current_user
        self.messages: List[ChatMessage] = []
        self.users: List[User] = []
        self.error = ""
        self._lock = threading.RLock()
        self._listeners: List[FeedListener] = []

    def add_listener(self, callback: FeedListener) -> None:
        self._listeners.append(callback)

    def _notify(self, kind: str) -> None:
        for callback in list(self._listeners):
            try:
                callback(self, kind)
            except Exception:
                logger.exception("FEED_LISTENER_FAIL kind=%s", kind)

    def report_error(self, detail: str) -> None:
        self.error = detail
        self._notify("error")

    def _fail(self, action: str, exc: Exception) -> bool:
        logger.warning("SYNC_FAIL action=%s user_id=%s error=%s", action, self.current_user.id, exc)
        self.report_error(str(exc))
        return False

    def _crash(self, action: str) -> bool:
        logger.exception("SYNC_UNEXPECTED action=%s user_id=%s", action, self.current_user.id)
        self.report_error(UNEXPECTED_ERROR)
        return False

    def refresh_messages(self) -> bool:
        try:
            messages = self.api.list_messages()
        except ChatClientError as exc:
            return self._fail("messages", exc)
        except Exception:
            return self._crash("messages")
        with self._lock:
            self.messages = messages
        self._notify("messages")
        return True

    def refresh_users(self) -> bool:
        try:
            users = self.api.list_users()
        except ChatClientError as exc:
            return self._fail("users", exc)
        except Exception:
            return self._crash("users")
        with self._lock:
            self.users = users
        self._notify("users")
        return True

    def heartbeat(self) -> bool:
        try:
            self.current_user = self.api.update_last_seen(self.current_user.id)
        except ChatClientError as exc:
            return self._fail("heartbeat", exc)
        except Exception:
            return self._crash("heartbeat")
        return True

    def send(self, content: str) -> bool:
        """Send a message and refresh both lists without waiting for the timers."""
        if not content or not content.strip():
            self.report_error(MESSAGE_REQUIRED)
            return False
        try:
            validated = validate_message_content(content)
            self.api.create_message(validated, self.current_user.id)
        except InvalidInput as exc:
            self.report_error(exc.message)
            return False
        except ChatClientError as exc:
            return self._fail("send", exc)
        except Exception:
            return self._crash("send")
        self.error = ""
        self.refresh_messages()
        self.refresh_users()
        return True

    def add_message(self, message: ChatMessage) -> bool:
        with self._lock:
            if any(existing.id == message.id for existing in self.messages):
                return False
            self.messages = self.messages + [message]
        self._notify("messages")
        return True

    def add_user(self, user: User) -> bool:
        with self._lock:
            if any(existing.id == user.id for existing in self.users):
                return False
            self.users = [user] + self.users
        self._notify("users")
        return True


class PollingSync:
    """Refreshes messages, users and the heartbeat on independent timers."""

    def __init__(
        self,
        feed: ChatFeed,
        intervals: Optional[SyncIntervals] = None,
        timer_factory: TimerFactory = RepeatingTimer,
    ):
        self.feed = feed
        self.intervals = intervals or SyncIntervals()
        self.timer_factory = timer_factory
        self.timers: List[Any] = []

    def start(self) -> None:
        self.feed.refresh_messages()
        self.feed.refresh_users()
        for interval, callback in (
            (self.intervals.messages, self.feed.refresh_messages),
            (self.intervals.users, self.feed.refresh_users),
            (self.intervals.heartbeat, self.feed.heartbeat),
        ):
            timer = self.timer_factory(interval, callback)
            timer.start()
            self.timers.append(timer)
        logger.info("SYNC_START mode=polling user_id=%s", self.feed.current_user.id)

    def stop(self) -> None:
        for timer in self.timers:
            timer.stop()
        self.timers = []
        logger.info("SYNC_STOP mode=polling user_id=%s", self.feed.current_user.id)


class SubscriptionSync:
    """Loads both lists once, then applies pushed ``messageAdded``/``userJoined`` events."""

    def __init__(
        self,
        feed: ChatFeed,
        endpoint: str,
        intervals: Optional[SyncIntervals] = None,
        timer_factory: TimerFactory = RepeatingTimer,
        listener_factory: Callable[..., Any] = SubscriptionListener,
    ):
        self.feed = feed
        self.endpoint = endpoint
        self.intervals = intervals or SyncIntervals()
        self.timer_factory = timer_factory
        self.listener_factory = listener_factory
        self.listeners: List[Any] = []
        self.timers: List[Any] = []

    def _on_message(self, data: Dict[str, Any]) -> None:
        self.feed.add_message(ChatMessage.model_validate(data["messageAdded"]))

    def _on_user(self, data: Dict[str, Any]) -> None:
        self.feed.add_user(User.model_validate(data["userJoined"]))

    def start(self) -> None:
        self.feed.refresh_messages()
        self.feed.refresh_users()
        for query, handler in (
            (queries.MESSAGE_ADDED_SUBSCRIPTION, self._on_message),
            (queries.USER_JOINED_SUBSCRIPTION, self._on_user),
        ):
            listener = self.listener_factory(self.endpoint, query, handler, self.feed.report_error)
            listener.start()
            self.listeners.append(listener)
        heartbeat = self.timer_factory(self.intervals.heartbeat, self.feed.heartbeat)
        heartbeat.start()
        self.timers.append(heartbeat)
        logger.info("SYNC_START mode=subscriptions user_id=%s", self.feed.current_user.id)

    def stop(self) -> None:
        for listener in self.listeners:
            listener.stop()
        for timer in self.timers:
            timer.stop()
        self.listeners = []
        self.timers = []
        logger.info("SYNC_STOP mode=subscriptions user_id=%s", self.feed.current_user.id)


def create_sync(
    feed: ChatFeed,
    mode: Optional[str] = None,
    endpoint: Optional[str] = None,
    intervals: Optional[SyncIntervals] = None,
    timer_factory: TimerFactory = RepeatingTimer,
):
    """Pick the sync strategy named by ``mode`` (defaults to config.SYNC_MODE)."""
    mode = mode or config.SYNC_MODE
    if mode == "polling":
        return PollingSync(feed, intervals, timer_factory)
    if mode == "subscriptions":
        return SubscriptionSync(feed, endpoint or feed.api.endpoint, intervals, timer_factory)
    raise ValueError(f"Unknown sync mode: {mode}")
