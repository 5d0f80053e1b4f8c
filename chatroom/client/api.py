"""GraphQL-over-HTTP client for the chat server."""
from typing import Any, Dict, List, Optional

import requests

from . import queries
from .config import REQUEST_TIMEOUT
from .models import ChatMessage, User


UNEXPECTED_ERROR = "Something went wrong. Please try again."


class ChatClientError(Exception):
    """Base class for client-side request failures."""


class TransportError(ChatClientError):
    """The request failed before a resolver produced a response."""


class GraphQLRequestError(ChatClientError):
    """The server answered with GraphQL errors."""

    def __init__(self, message: str, code: Optional[str] = None, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.errors = errors or []


class APIClient:
    def __init__(self, endpoint: str, timeout: float = REQUEST_TIMEOUT, session: Optional[requests.Session] = None):
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Run one operation and return its ``data`` mapping."""
        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables
        try:
            resp = self.session.post(self.endpoint, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransportError(f"Could not reach server: {exc}") from exc
        try:
            body = resp.json()
        except ValueError as exc:
            raise TransportError(f"Invalid response from server (HTTP {resp.status_code})") from exc
        errors = body.get("errors") if isinstance(body, dict) else None
        if errors:
            first = errors[0]
            code = (first.get("extensions") or {}).get("code")
            raise GraphQLRequestError(first.get("message", "Request failed"), code=code, errors=errors)
        if not resp.ok or not isinstance(body, dict) or body.get("data") is None:
            raise TransportError(f"Unexpected response from server (HTTP {resp.status_code})")
        return body["data"]

    def list_users(self) -> List[User]:
        data = self.execute(queries.GET_USERS)
        return [User.model_validate(u) for u in data["users"]]

    def get_user(self, user_id: str) -> Optional[User]:
        data = self.execute(queries.GET_USER_BY_ID, {"id": user_id})
        return User.model_validate(data["user"]) if data.get("user") else None

    def create_user(self, name: str) -> User:
        data = self.execute(queries.CREATE_USER, {"name": name})
        return User.model_validate(data["createUser"])

    def update_last_seen(self, user_id: str) -> User:
        data = self.execute(queries.UPDATE_USER_LAST_SEEN, {"id": user_id})
        return User.model_validate(data["updateUserLastSeen"])

    def list_messages(self) -> List[ChatMessage]:
        data = self.execute(queries.GET_MESSAGES)
        return [ChatMessage.model_validate(m) for m in data["messages"]]

    def create_message(self, content: str, user_id: str) -> ChatMessage:
        data = self.execute(queries.CREATE_MESSAGE, {"content": content, "userId": user_id})
        return ChatMessage.model_validate(data["createMessage"])
