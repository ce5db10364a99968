"""Logging setup shared by the API and command-line entry points."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from config import LoggingConfig, config

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(settings: LoggingConfig | None = None) -> None:
    """
    Configure the root logger.

    Always logs to the console; also writes to a rotating file when
    ``LOG_FILE`` is set. Calling it again replaces the handlers.
    """
    settings = settings or config.logging
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    handlers: list[logging.Handler] = [console]

    if settings.file:
        Path(settings.file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            settings.file,
            maxBytes=settings.max_bytes,
            backupCount=settings.backup_count,
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=settings.level, handlers=handlers, force=True)
