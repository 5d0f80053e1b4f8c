"""Server configuration values."""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent
DATABASE_URL = os.getenv("CHAT_DATABASE_URL", f"sqlite:///{BASE_DIR / 'chatroom.db'}")
GRAPHQL_PATH = os.getenv("CHAT_GRAPHQL_PATH", "/graphql")
HOST = os.getenv("CHAT_HOST", "0.0.0.0")
PORT = int(os.getenv("CHAT_PORT", "4000"))
LOG_FILE = Path(os.getenv("CHAT_LOG_FILE", str(BASE_DIR / "server.log")))
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CHAT_CORS_ORIGINS", "*").split(",") if origin.strip()]
