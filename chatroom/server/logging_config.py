"""Server event log."""
import logging

from ..shared import logging_config
from .config import LOG_FILE


def configure_logging() -> logging.Logger:
    return logging_config.configure_logging("chatroom_server", LOG_FILE)
