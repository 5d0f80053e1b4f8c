"""GraphQL types and resolvers."""
from datetime import datetime, timezone
from typing import AsyncGenerator, List, Optional

import strawberry
from graphql import GraphQLError
from strawberry.extensions import MaskErrors
from strawberry.types import Info

from ..shared.errors import ChatError
from . import messages as message_ops
from . import users as user_ops
from .events import MESSAGE_ADDED, USER_JOINED
from .logging_config import configure_logging
from .models import Message as MessageRow
from .models import User as UserRow

logger = configure_logging()


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@strawberry.type
class User:
    id: strawberry.ID
    name: str
    created_at: datetime
    last_seen: datetime

    @strawberry.field
    def messages(self, info: Info) -> List["Message"]:
        rows = user_ops.list_user_messages(info.context.db, self.id)
        return [Message.from_row(row, owner=self) for row in rows]

    @classmethod
    def from_row(cls, row: UserRow) -> "User":
        return cls(
            id=strawberry.ID(row.id),
            name=row.name,
            created_at=as_utc(row.created_at),
            last_seen=as_utc(row.last_seen),
        )


@strawberry.type
class Message:
    id: strawberry.ID
    content: str
    created_at: datetime
    user_id: strawberry.Private[str]
    owner: strawberry.Private[Optional[User]] = None

    @strawberry.field
    def user(self, info: Info) -> User:
        if self.owner is None:
            self.owner = User.from_row(message_ops.get_message_user(info.context.db, self))
        return self.owner

    @classmethod
    def from_row(cls, row: MessageRow, owner: Optional[User] = None) -> "Message":
        if owner is None and "user" in row.__dict__ and row.user is not None:
            owner = User.from_row(row.user)
        return cls(
            id=strawberry.ID(row.id),
            content=row.content,
            created_at=as_utc(row.created_at),
            user_id=row.user_id,
            owner=owner,
        )


@strawberry.type
class Query:
    @strawberry.field(description="All users, most recently seen first.")
    def users(self, info: Info) -> List[User]:
        return [User.from_row(row) for row in user_ops.list_users(info.context.db)]

    @strawberry.field(description="All messages, oldest first.")
    def messages(self, info: Info) -> List[Message]:
        return [Message.from_row(row) for row in message_ops.list_messages(info.context.db)]

    @strawberry.field
    def user(self, info: Info, id: strawberry.ID) -> Optional[User]:
        row = user_ops.get_user(info.context.db, str(id))
        return User.from_row(row) if row else None


@strawberry.type
class Mutation:
    @strawberry.mutation
    def create_user(self, info: Info, name: str) -> User:
        row = user_ops.create_user(info.context.db, info.context.bus, name)
        return User.from_row(row)

    @strawberry.mutation
    def update_user_last_seen(self, info: Info, id: strawberry.ID) -> User:
        return User.from_row(user_ops.touch_last_seen(info.context.db, str(id)))

    @strawberry.mutation
    def create_message(self, info: Info, content: str, user_id: strawberry.ID) -> Message:
        row = message_ops.create_message(info.context.db, info.context.bus, content, str(user_id))
        return Message.from_row(row)


@strawberry.type
class Subscription:
    @strawberry.subscription
    async def message_added(self, info: Info) -> AsyncGenerator[Message, None]:
        async with info.context.bus.subscribe(MESSAGE_ADDED) as events:
            async for row in events:
                yield Message.from_row(row)

    @strawberry.subscription
    async def user_joined(self, info: Info) -> AsyncGenerator[User, None]:
        async with info.context.bus.subscribe(USER_JOINED) as events:
            async for row in events:
                yield User.from_row(row)


def is_unexpected(error: GraphQLError) -> bool:
    original = error.original_error
    return original is not None and not isinstance(original, (ChatError, GraphQLError))


class ChatSchema(strawberry.Schema):
    def process_errors(self, errors, execution_context=None) -> None:
        for error in errors:
            if is_unexpected(error):
                logger.error("UNEXPECTED_ERROR path=%s", error.path, exc_info=error.original_error)
            else:
                logger.info("REQUEST_ERROR path=%s message=%s", error.path, error.message)


schema = ChatSchema(
    query=Query,
    mutation=Mutation,
    subscription=Subscription,
    extensions=[MaskErrors(should_mask_error=is_unexpected, error_message="Unexpected error.")],
)
