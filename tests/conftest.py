import os
import tempfile
from pathlib import Path

import pytest

_LOG_DIR = Path(tempfile.mkdtemp(prefix="chatroom-tests-"))
os.environ.setdefault("CHAT_LOG_FILE", str(_LOG_DIR / "server.log"))
os.environ.setdefault("CHAT_CLIENT_LOG_FILE", str(_LOG_DIR / "client.log"))
os.environ.setdefault("CHAT_CLIENT_STATE_FILE", str(_LOG_DIR / "client-state.json"))
os.environ.setdefault("CHAT_DATABASE_URL", f"sqlite:///{_LOG_DIR / 'default.sqlite3'}")

from chatroom.server.context import ChatContext
from chatroom.server.database import build_engine, build_session_factory, init_db
from chatroom.server.events import EventBus


@pytest.fixture()
def database_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'chat.sqlite3'}"


@pytest.fixture()
def db(database_url: str):
    engine = build_engine(database_url)
    init_db(engine)
    session = build_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def bus() -> EventBus:
    return EventBus()


@pytest.fixture()
def context(db, bus) -> ChatContext:
    return ChatContext(db=db, bus=bus)
