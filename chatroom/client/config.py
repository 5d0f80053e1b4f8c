"""Client configuration values."""
import os
from pathlib import Path

SERVER_URL = os.getenv("CHAT_SERVER_URL", "http://127.0.0.1:4000/graphql")
STATE_FILE = Path(os.getenv("CHAT_CLIENT_STATE_FILE", str(Path.home() / ".chatroom_client.json")))
LOG_FILE = Path(os.getenv("CHAT_CLIENT_LOG_FILE", str(Path.home() / ".chatroom_client.log")))
REQUEST_TIMEOUT = float(os.getenv("CHAT_REQUEST_TIMEOUT", "10"))

# "polling" (default) or "subscriptions"
SYNC_MODE = os.getenv("CHAT_SYNC_MODE", "polling")

MESSAGE_POLL_SECONDS = 1.0
USER_POLL_SECONDS = 5.0
HEARTBEAT_SECONDS = 30.0
