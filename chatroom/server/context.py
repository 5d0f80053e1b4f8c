"""Per-request GraphQL context."""
from typing import Callable, Iterator

from fastapi import Depends
from sqlalchemy.orm import Session, sessionmaker
from strawberry.fastapi import BaseContext

from .events import EventBus


class ChatContext(BaseContext):
    """Everything a resolver may touch: one database session and the event bus."""

    def __init__(self, db: Session, bus: EventBus):
        super().__init__()
        self.db = db
        self.bus = bus


def build_context_getter(session_factory: sessionmaker, bus: EventBus) -> Callable[..., ChatContext]:
    """Return a FastAPI dependency creating a fresh ChatContext per request."""

    def get_session() -> Iterator[Session]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    async def get_context(db: Session = Depends(get_session)) -> ChatContext:
        return ChatContext(db=db, bus=bus)

    return get_context
