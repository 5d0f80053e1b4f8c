"""Message operations: sending and retrieval."""
from datetime import datetime, timedelta
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ..shared.errors import NotFound
from ..shared.validation import validate_message_content
from .events import MESSAGE_ADDED, EventBus
from .logging_config import configure_logging
from .models import Message, User, utcnow
from .users import mark_seen, require_user

logger = configure_logging()

TICK = timedelta(microseconds=1)


def next_created_at(db: Session) -> datetime:
    """Now, or just past the newest message when the clock has not advanced."""
    now = utcnow()
    latest = db.query(func.max(Message.created_at)).scalar()
    if latest is not None and latest >= now:
        return latest + TICK
    return now


def create_message(db: Session, bus: EventBus, content: str, user_id: str) -> Message:
    validated = validate_message_content(content)
    sender = require_user(db, user_id)

    message = Message(content=validated, user_id=sender.id, created_at=next_created_at(db))
    db.add(message)
    mark_seen(sender)
    db.commit()
    db.refresh(message)
    db.refresh(sender)
    message.user = sender
    logger.info("MESSAGE_SENT user_id=%s message_id=%s", sender.id, message.id)
    bus.publish(MESSAGE_ADDED, message)
    return message


def list_messages(db: Session) -> List[Message]:
    return db.query(Message).options(joinedload(Message.user)).order_by(Message.created_at, Message.id).all()


def get_message_user(db: Session, message: Message) -> User:
    try:
        return require_user(db, message.user_id)
    except NotFound:
        logger.warning("DANGLING_MESSAGE message_id=%s user_id=%s", message.id, message.user_id)
        raise
