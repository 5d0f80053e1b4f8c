"""User operations: registration, lookup and last-seen tracking."""
from typing import List, Optional

from sqlalchemy.orm import Session

from ..shared.errors import NotFound
from ..shared.validation import validate_name
from .events import USER_JOINED, EventBus
from .logging_config import configure_logging
from .models import Message, User, utcnow

logger = configure_logging()


def create_user(db: Session, bus: EventBus, name: str) -> User:
    validated = validate_name(name)
    now = utcnow()
    user = User(name=validated, created_at=now, last_seen=now)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("USER_CREATED user_id=%s name=%s", user.id, user.name)
    bus.publish(USER_JOINED, user)
    return user


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.last_seen.desc()).all()


def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def require_user(db: Session, user_id: str) -> User:
    user = get_user(db, user_id)
    if not user:
        logger.info("USER_NOT_FOUND user_id=%s", user_id)
        raise NotFound("User")
    return user


def mark_seen(user: User) -> None:
    """Advance last_seen to now; never moves it backwards."""
    now = utcnow()
    if user.last_seen is None or now > user.last_seen:
        user.last_seen = now


def touch_last_seen(db: Session, user_id: str) -> User:
    user = require_user(db, user_id)
    mark_seen(user)
    db.commit()
    db.refresh(user)
    logger.info("LAST_SEEN_TOUCHED user_id=%s last_seen=%s", user.id, user.last_seen)
    return user


def list_user_messages(db: Session, user_id: str) -> List[Message]:
    return db.query(Message).filter(Message.user_id == user_id).order_by(Message.created_at, Message.id).all()
