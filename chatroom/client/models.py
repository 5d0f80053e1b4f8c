"""Client-side models for users, messages and the saved identity."""
from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ONLINE_WINDOW = timedelta(minutes=5)


class ChatModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class User(ChatModel):
    id: str
    name: str
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    last_seen: Optional[datetime] = Field(default=None, alias="lastSeen")

    def is_online(self, now: Optional[datetime] = None) -> bool:
        """A user counts as online when seen within the last five minutes."""
        if self.last_seen is None:
            return False
        now = now or datetime.now(timezone.utc)
        last_seen = self.last_seen
        if last_seen.tzinfo is None:
            last_seen = last_seen.replace(tzinfo=timezone.utc)
        return now - last_seen < ONLINE_WINDOW


class MessageAuthor(ChatModel):
    id: str
    name: str


class ChatMessage(ChatModel):
    id: str
    content: str
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    user: MessageAuthor

    def time_label(self) -> str:
        if self.created_at is None:
            return "--:--"
        return self.created_at.astimezone().strftime("%H:%M")


class SavedIdentity(ChatModel):
    """Locally cached copy of a previously used user; not authoritative."""

    model_config = ConfigDict(populate_by_name=True, strict=True)

    id: str
    name: str
    last_seen: str = Field(alias="lastSeen")

    @classmethod
    def from_user(cls, user: User) -> "SavedIdentity":
        last_seen = user.last_seen or datetime.now(timezone.utc)
        return cls(id=user.id, name=user.name, last_seen=last_seen.isoformat())

    def to_storage(self) -> dict:
        return self.model_dump(by_alias=True)
