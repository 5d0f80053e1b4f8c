"""Input validation shared by server resolvers and client forms."""
from typing import Any

from .errors import InvalidInput

MAX_NAME_LENGTH = 50
MAX_MESSAGE_LENGTH = 1000


def validate_name(value: Any) -> str:
    """Return the trimmed display name or raise InvalidInput."""
    if not value or not isinstance(value, str):
        raise InvalidInput("Name is required and must be a string")
    name = value.strip()
    if not name:
        raise InvalidInput("Name cannot be empty")
    if len(name) > MAX_NAME_LENGTH:
        raise InvalidInput(f"Name cannot exceed {MAX_NAME_LENGTH} characters")
    return name


def validate_message_content(value: Any) -> str:
    """Return the trimmed message body or raise InvalidInput."""
    if not isinstance(value, str):
        raise InvalidInput("Message content is required and must be a string")
    content = value.strip()
    if not content:
        raise InvalidInput("Message content cannot be empty")
    if len(content) > MAX_MESSAGE_LENGTH:
        raise InvalidInput(f"Message content cannot exceed {MAX_MESSAGE_LENGTH} characters")
    return content
