"""Console client for the chat application."""
import sys
import threading
from typing import Optional, Set

from .api import APIClient
from .config import SERVER_URL
from .models import User
from .session import AppState, SessionController
from .storage import IdentityStore
from .sync import ChatFeed, create_sync


def format_user(user: User, current_user_id: Optional[str]) -> str:
    marker = " (you)" if user.id == current_user_id else ""
    status = "online" if user.is_online() else "offline"
    return f"- {user.name}{marker} [{status}]"


class ConsoleChat:
    """Menu-driven front end over SessionController and ChatFeed."""

    def __init__(self, server_url: str, store: Optional[IdentityStore] = None):
        self.api = APIClient(server_url)
        self.session = SessionController(self.api, store or IdentityStore())
        self.printed_ids: Set[str] = set()
        self._print_lock = threading.Lock()

    def _show_error(self) -> None:
        if self.session.error:
            print(f"! {self.session.error}")

    def selection_menu(self) -> bool:
        saved = self.session.saved_identity
        print(f"\nLast user: {saved.name} (last login {saved.last_seen})")
        print("Menu: [u]se saved user, [n]ew user, [d]elete saved user, [q]uit")
        choice = input("> ").strip().lower()
        if choice == "q":
            return False
        if choice == "u":
            self.session.use_saved_identity()
            self._show_error()
        if choice == "n":
            self.session.create_new()
        if choice == "d":
            self.session.delete_saved()
        return True

    def login_menu(self) -> bool:
        print("\n=== Join the chat ===")
        name = input("Name (empty to quit): ")
        if not name:
            return False
        self.session.register(name)
        self._show_error()
        return True

    def _print_new_messages(self, feed: ChatFeed, kind: str) -> None:
        if kind == "error":
            print(f"! {feed.error}")
            return
        if kind != "messages":
            return
        with self._print_lock:
            for msg in feed.messages:
                if msg.id in self.printed_ids:
                    continue
                self.printed_ids.add(msg.id)
                author = "(you)" if msg.user.id == feed.current_user.id else msg.user.name
                print(f"[{msg.time_label()}] {author}: {msg.content}")

    def chat_loop(self) -> None:
        user = self.session.current_user
        print(f"\nWelcome, {user.name}! Type a message and press enter.")
        print("Commands: /users, /quit")
        feed = ChatFeed(self.api, user)
        feed.add_listener(self._print_new_messages)
        sync = create_sync(feed)
        sync.start()
        try:
            while True:
                text = input()
                if text.strip() == "/quit":
                    break
                if text.strip() == "/users":
                    for u in feed.users:
                        print(format_user(u, user.id))
                    continue
                feed.send(text)
        finally:
            sync.stop()
            self.printed_ids.clear()
            self.session.logout()

    def run(self) -> None:
        self.session.start()
        while True:
            if self.session.state is AppState.SELECTION:
                if not self.selection_menu():
                    return
            elif self.session.state is AppState.LOGIN:
                if not self.login_menu():
                    return
            else:
                self.chat_loop()


def main():
    print("Chatroom Client")
    server_url = input(f"Server URL [{SERVER_URL}]: ").strip() or SERVER_URL
    try:
        ConsoleChat(server_url).run()
    except (KeyboardInterrupt, EOFError):
        print()
    sys.exit(0)


if __name__ == "__main__":
    main()
