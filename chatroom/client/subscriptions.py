"""GraphQL subscription listener speaking the graphql-transport-ws protocol."""
import asyncio
import json
import threading
from typing import Any, Callable, Dict, Optional

import websockets

from .api import UNEXPECTED_ERROR
from .logging_config import configure_logging

GRAPHQL_TRANSPORT_WS = "graphql-transport-ws"

logger = configure_logging()


def websocket_url(endpoint: str) -> str:
    if endpoint.startswith("https://"):
        return "wss://" + endpoint[len("https://"):]
    if endpoint.startswith("http://"):
        return "ws://" + endpoint[len("http://"):]
    return endpoint


class SubscriptionListener:
    """Runs one subscription on a background thread and hands each payload to ``on_data``.

    ``stop()`` closes the socket; the listener does not reconnect.
    """

    def __init__(
        self,
        endpoint: str,
        query: str,
        on_data: Callable[[Dict[str, Any]], None],
        on_error: Optional[Callable[[str], None]] = None,
        connect: Optional[Callable[..., Any]] = None,
    ):
        self.url = websocket_url(endpoint)
        self.query = query
        self.on_data = on_data
        self.on_error = on_error
        self.connect = connect or websockets.connect
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._socket = None

    def start(self) -> None:
        self._thread = threading.Thread(target=self._thread_main, name="chat-subscription", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stopped.set()
        if self._loop and self._loop.is_running() and self._socket is not None:
            try:
                asyncio.run_coroutine_threadsafe(self._socket.close(), self._loop)
            except RuntimeError:
                pass
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join(timeout=2)

    def _thread_main(self) -> None:
        try:
            asyncio.run(self._run())
        except (OSError, websockets.WebSocketException, ValueError) as exc:
            if not self._stopped.is_set():
                logger.warning("SUBSCRIPTION_FAIL url=%s error=%s", self.url, exc)
                if self.on_error:
                    self.on_error(str(exc))
        except Exception:
            logger.exception("SUBSCRIPTION_UNEXPECTED url=%s", self.url)
            if self.on_error and not self._stopped.is_set():
                self.on_error(UNEXPECTED_ERROR)

    def _dispatch(self, data: Dict[str, Any]) -> None:
        try:
            self.on_data(data)
        except Exception:
            logger.exception("SUBSCRIPTION_HANDLER_FAIL url=%s", self.url)

    async def _run(self) -> None:
        self._loop = asyncio.get_running_loop()
        async with self.connect(self.url, subprotocols=[GRAPHQL_TRANSPORT_WS]) as socket:
            self._socket = socket
            await socket.send(json.dumps({"type": "connection_init", "payload": {}}))
            ack = json.loads(await socket.recv())
            if ack.get("type") != "connection_ack":
                raise ValueError(f"Unexpected handshake reply: {ack.get('type')}")
            await socket.send(json.dumps({"id": "1", "type": "subscribe", "payload": {"query": self.query}}))
            logger.info("SUBSCRIPTION_OPEN url=%s", self.url)
            while not self._stopped.is_set():
                try:
                    message = json.loads(await socket.recv())
                except websockets.ConnectionClosed:
                    break
                kind = message.get("type")
                if kind == "ping":
                    await socket.send(json.dumps({"type": "pong"}))
                elif kind == "next":
                    data = (message.get("payload") or {}).get("data")
                    if data:
                        self._dispatch(data)
                elif kind == "error":
                    detail = message.get("payload")
                    logger.warning("SUBSCRIPTION_ERROR url=%s payload=%s", self.url, detail)
                    if self.on_error:
                        self.on_error(str(detail))
                elif kind == "complete":
                    break
        logger.info("SUBSCRIPTION_CLOSED url=%s", self.url)
