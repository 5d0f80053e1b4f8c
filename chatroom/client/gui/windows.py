"""PyQt window classes for the chat GUI."""
from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import QPropertyAnimation, Qt
from PyQt6.QtGui import QColor
from PyQt6.QtWidgets import (
    QApplication,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from ...shared.validation import MAX_MESSAGE_LENGTH, MAX_NAME_LENGTH
from ..api import APIClient
from ..config import SERVER_URL
from ..session import AppState, SessionController
from ..storage import IdentityStore
from ..sync import ChatFeed, ScrollAction, create_sync, scroll_action
from .app import FeedBridge, QtRepeatingTimer
from .styles import (
    ACCENT,
    BORDER_RADIUS,
    ERROR,
    ONLINE,
    OTHER_BUBBLE,
    OWN_BUBBLE,
    PADDING,
    PRIMARY_BG,
    SIDEBAR_BG,
    SMOOTH_SCROLL_MS,
    TEXT_MUTED,
    TEXT_PRIMARY,
)


def _error_label() -> QLabel:
    label = QLabel()
    label.setStyleSheet(f"color: {ERROR}")
    label.setWordWrap(True)
    return label


class LoginView(QWidget):
    """Registration form: pick a display name and join."""

    def __init__(self, session: SessionController):
        super().__init__()
        self.session = session
        layout = QFormLayout(self)
        layout.addRow(QLabel("<h2>Join the chat</h2>"))
        self.name_input = QLineEdit()
        self.name_input.setMaxLength(MAX_NAME_LENGTH)
        self.name_input.setPlaceholderText("Name shown in the chat")
        self.name_input.returnPressed.connect(self._join)
        layout.addRow("Name", self.name_input)
        self.error = _error_label()
        layout.addRow(self.error)
        self.join_btn = QPushButton("Join")
        self.join_btn.clicked.connect(self._join)
        layout.addRow(self.join_btn)

    def refresh(self) -> None:
        self.error.setText(self.session.error)
        self.join_btn.setEnabled(not self.session.busy)

    def _join(self) -> None:
        if self.session.register(self.name_input.text()):
            self.name_input.clear()


class SelectionView(QWidget):
    """Offer the saved identity, a fresh registration, or forgetting it."""

    def __init__(self, session: SessionController):
        super().__init__()
        self.session = session
        layout = QVBoxLayout(self)
        layout.addWidget(QLabel("<h2>Join the chat</h2>"))
        self.error = _error_label()
        layout.addWidget(self.error)
        self.saved_label = QLabel()
        layout.addWidget(self.saved_label)

        self.use_btn = QPushButton()
        self.use_btn.clicked.connect(self.session.use_saved_identity)
        self.new_btn = QPushButton("Log in as a new user")
        self.new_btn.clicked.connect(self.session.create_new)
        self.delete_btn = QPushButton("Forget saved user")
        self.delete_btn.clicked.connect(self.session.delete_saved)
        for btn in (self.use_btn, self.new_btn, self.delete_btn):
            layout.addWidget(btn)

        hint = QLabel("Creating a new user replaces the saved one.")
        hint.setStyleSheet(f"color: {TEXT_MUTED}")
        layout.addWidget(hint)
        layout.addStretch()

    def refresh(self) -> None:
        saved = self.session.saved_identity
        if saved:
            self.saved_label.setText(f"Last user: <b>{saved.name}</b><br>Last login: {saved.last_seen}")
            self.use_btn.setText("Checking..." if self.session.busy else f"Continue as {saved.name}")
        self.error.setText(self.session.error)
        for btn in (self.use_btn, self.new_btn, self.delete_btn):
            btn.setEnabled(not self.session.busy)


class ChatView(QWidget):
    """Message list, composer and user list for the signed-in user."""

    def __init__(self, session: SessionController, api: APIClient):
        super().__init__()
        self.session = session
        self.api = api
        self.feed: Optional[ChatFeed] = None
        self.bridge: Optional[FeedBridge] = None
        self.sync = None
        self._rendered_count: Optional[int] = None
        self._scroll_animation: Optional[QPropertyAnimation] = None
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QHBoxLayout(self)

        main_area = QWidget()
        main_layout = QVBoxLayout(main_area)
        header = QHBoxLayout()
        self.title = QLabel()
        self.title.setStyleSheet("font-size: 16px; font-weight: bold")
        logout_btn = QPushButton("Leave")
        logout_btn.clicked.connect(self.session.logout)
        header.addWidget(self.title, 1)
        header.addWidget(logout_btn)
        main_layout.addLayout(header)

        self.messages_view = QListWidget()
        self.messages_view.setWordWrap(True)
        main_layout.addWidget(self.messages_view, 1)
        self.empty_label = QLabel("No messages yet. Send the first one!")
        self.empty_label.setStyleSheet(f"color: {TEXT_MUTED}")
        main_layout.addWidget(self.empty_label)

        self.error = _error_label()
        main_layout.addWidget(self.error)
        composer = QHBoxLayout()
        self.message_input = QLineEdit()
        self.message_input.setMaxLength(MAX_MESSAGE_LENGTH)
        self.message_input.setPlaceholderText("Type a message...")
        self.message_input.returnPressed.connect(self._send)
        send_btn = QPushButton("Send")
        send_btn.clicked.connect(self._send)
        composer.addWidget(self.message_input, 1)
        composer.addWidget(send_btn)
        main_layout.addLayout(composer)
        layout.addWidget(main_area, 3)

        sidebar = QWidget()
        sidebar.setStyleSheet(f"background: {SIDEBAR_BG}; color: white")
        side_layout = QVBoxLayout(sidebar)
        side_layout.setContentsMargins(PADDING, PADDING, PADDING, PADDING)
        side_layout.addWidget(QLabel("<b>Users</b>"))
        self.users_view = QListWidget()
        side_layout.addWidget(self.users_view, 1)
        layout.addWidget(sidebar, 1)

    def enter(self) -> None:
        user = self.session.current_user
        self.title.setText(f"Chat room - {user.name}")
        self.messages_view.clear()
        self.users_view.clear()
        self.error.clear()
        self._rendered_count = None
        self.feed = ChatFeed(self.api, user)
        self.bridge = FeedBridge(self.feed)
        self.bridge.changed.connect(self._on_feed_changed)
        self.sync = create_sync(self.feed, timer_factory=QtRepeatingTimer)
        self.sync.start()

    def leave(self) -> None:
        if self.sync:
            self.sync.stop()
        self.sync = None
        self.feed = None
        self.bridge = None

    def _send(self) -> None:
        if not self.feed:
            return
        if self.feed.send(self.message_input.text()):
            self.message_input.clear()

    def _on_feed_changed(self, kind: str) -> None:
        if not self.feed:
            return
        if kind == "messages":
            self._render_messages()
        elif kind == "users":
            self._render_users()
        self.error.setText(self.feed.error)

    def _render_messages(self) -> None:
        me = self.feed.current_user.id
        self.messages_view.clear()
        for msg in self.feed.messages:
            own = msg.user.id == me
            item = QListWidgetItem(f"{msg.user.name} • {msg.time_label()}\n{msg.content}")
            item.setTextAlignment(Qt.AlignmentFlag.AlignRight if own else Qt.AlignmentFlag.AlignLeft)
            item.setToolTip(msg.created_at.isoformat() if msg.created_at else "")
            item.setData(Qt.ItemDataRole.UserRole, msg.id)
            item.setBackground(QColor(OWN_BUBBLE if own else OTHER_BUBBLE))
            self.messages_view.addItem(item)
        count = len(self.feed.messages)
        self.empty_label.setVisible(count == 0)
        action = scroll_action(self._rendered_count, count)
        if count:
            self._rendered_count = count
        self._scroll(action)

    def _scroll(self, action: Optional[ScrollAction]) -> None:
        if action is None:
            return
        bar = self.messages_view.verticalScrollBar()
        if action is ScrollAction.INSTANT:
            self.messages_view.scrollToBottom()
            return
        self._scroll_animation = QPropertyAnimation(bar, b"value", self)
        self._scroll_animation.setDuration(SMOOTH_SCROLL_MS)
        self._scroll_animation.setStartValue(bar.value())
        self._scroll_animation.setEndValue(bar.maximum())
        self._scroll_animation.start()

    def _render_users(self) -> None:
        me = self.feed.current_user.id
        self.users_view.clear()
        for user in self.feed.users:
            label = f"{user.name} (you)" if user.id == me else user.name
            item = QListWidgetItem(f"{label}\n{'online' if user.is_online() else 'offline'}")
            if user.is_online() and user.id != me:
                item.setForeground(QColor(ONLINE))
            self.users_view.addItem(item)


class MainWindow(QMainWindow):
    """Switches between the login, selection and chat views as the session changes."""

    def __init__(self, session: SessionController, api: APIClient):
        super().__init__()
        self.session = session
        self.setWindowTitle("Chatroom")
        self.resize(1024, 720)
        self.stack = QStackedWidget()
        self.login_view = LoginView(session)
        self.selection_view = SelectionView(session)
        self.chat_view = ChatView(session, api)
        for view in (self.login_view, self.selection_view, self.chat_view):
            self.stack.addWidget(view)
        self.stack.setStyleSheet(
            f"QWidget {{ background: {PRIMARY_BG}; color: {TEXT_PRIMARY}; }}\n"
            f"QLineEdit {{ background: white; border: 1px solid #d1d5db; border-radius: {BORDER_RADIUS}px; }}\n"
            f"QPushButton {{ background: {ACCENT}; color: white; padding: 6px 12px; border-radius: {BORDER_RADIUS}px; }}"
        )
        self.setCentralWidget(self.stack)
        self._shown_state: Optional[AppState] = None
        session.add_listener(lambda _session: self.sync_view())

    def sync_view(self) -> None:
        state = self.session.state
        if state is not self._shown_state:
            if self._shown_state is AppState.CHAT:
                self.chat_view.leave()
            if state is AppState.CHAT:
                self.chat_view.enter()
            self._shown_state = state
        views = {
            AppState.LOGIN: self.login_view,
            AppState.SELECTION: self.selection_view,
            AppState.CHAT: self.chat_view,
        }
        self.stack.setCurrentWidget(views[state])
        self.login_view.refresh()
        self.selection_view.refresh()


class ChatApplication:
    """Top-level class wiring the session controller to the main window."""

    def __init__(self, server_url: Optional[str] = None, store: Optional[IdentityStore] = None):
        self.app = QApplication.instance() or QApplication([])
        self.api = APIClient(server_url or SERVER_URL)
        self.session = SessionController(self.api, store or IdentityStore())
        self.window = MainWindow(self.session, self.api)

    def run(self) -> int:
        self.session.start()
        self.window.show()
        return self.app.exec()


__all__ = ["ChatApplication", "ChatView", "LoginView", "MainWindow", "SelectionView"]
