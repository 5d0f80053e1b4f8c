"""SQLAlchemy engine and session factory helpers."""
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import DATABASE_URL

Base = declarative_base()


def build_engine(url: Optional[str] = None) -> Engine:
    url = url or DATABASE_URL
    connect_args = {}
    if url.startswith("sqlite"):
        # Sessions are opened in FastAPI's threadpool and used on the event loop.
        connect_args["check_same_thread"] = False
    return create_engine(url, connect_args=connect_args)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create all tables known to the model metadata."""
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
