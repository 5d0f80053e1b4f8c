"""Client log; written to a file so console output stays clean."""
import logging

from ..shared import logging_config
from .config import LOG_FILE


def configure_logging() -> logging.Logger:
    return logging_config.configure_logging("chatroom_client", LOG_FILE)
