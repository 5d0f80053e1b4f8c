"""Error types shared by the chat server and client."""
from typing import Any, Dict


class ChatError(Exception):
    """Base class for recoverable chat errors.

    ``extensions`` is copied into the GraphQL error payload by graphql-core.
    """

    code = "CHAT_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.extensions: Dict[str, Any] = {"code": self.code}


class InvalidInput(ChatError):
    """A client-supplied value failed a validation rule."""

    code = "BAD_USER_INPUT"


class NotFound(ChatError):
    """A referenced entity does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity: str):
        super().__init__(f"{entity} not found")
        self.entity = entity
