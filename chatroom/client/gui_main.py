"""Desktop client entry point; ``CHAT_SERVER_URL`` selects the server."""
import sys

from .config import SERVER_URL
from .gui.windows import ChatApplication
from .logging_config import configure_logging

logger = configure_logging()


def main() -> None:
    logger.info("GUI_START server_url=%s", SERVER_URL)
    sys.exit(ChatApplication(SERVER_URL).run())


if __name__ == "__main__":
    main()
