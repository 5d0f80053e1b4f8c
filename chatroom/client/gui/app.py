"""Qt adapters that let the headless client layer drive widgets."""
from typing import Any, Callable

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..sync import ChatFeed


class QtRepeatingTimer:
    """Timer with the RepeatingTimer interface, firing on the Qt event loop."""

    def __init__(self, interval: float, callback: Callable[[], Any]):
        self.interval = interval
        self._timer = QTimer()
        self._timer.setInterval(int(interval * 1000))
        self._timer.timeout.connect(callback)

    @property
    def active(self) -> bool:
        return self._timer.isActive()

    def start(self) -> None:
        self._timer.start()

    def stop(self) -> None:
        self._timer.stop()


class FeedBridge(QObject):
    """Re-emits ChatFeed notifications as a Qt signal.

    Pushed events arrive on listener threads; the queued signal delivers them
    on the GUI thread.
    """

    changed = pyqtSignal(str)

    def __init__(self, feed: ChatFeed):
        super().__init__()
        feed.add_listener(lambda _feed, kind: self.changed.emit(kind))


__all__ = ["FeedBridge", "QtRepeatingTimer"]
