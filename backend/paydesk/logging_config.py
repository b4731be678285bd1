"""
Logging Setup — console + rotating file handler under LOG_DIR.
"""
import logging
import os
from logging.handlers import RotatingFileHandler

from paydesk.config import get_settings

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def configure_logging() -> None:
    settings = get_settings()
    formatter = logging.Formatter(LOG_FORMAT)

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    handlers: list[logging.Handler] = [handler]

    try:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(settings.LOG_DIR, "server.log"),
            maxBytes=10_000_000,
            backupCount=5,
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)
    except OSError:
        logging.getLogger(__name__).warning("Log directory %s not writable, console only", settings.LOG_DIR)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)
    root.handlers = handlers
