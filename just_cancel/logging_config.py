"""Logging setup for the Just Cancel server.

Each module logger gets three handlers the first time it is requested:

    console                  LOG_LEVEL and above, short format
    just_cancel.log          everything, rotating
    just_cancel_errors.log   ERROR and above, rotating

Files live in ``config.LOG_DIR``. Records may carry ``session_id`` and
``tool_name`` through ``extra={}``:

    logger = get_logger(__name__)
    logger.info("Tool called", extra={"session_id": sid, "tool_name": "just-cancel"})
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from .config import config

CONTEXT_FIELDS = ("session_id", "tool_name")

CONSOLE_FORMAT = "[%(levelname)s] [session:%(session_id)s] %(message)s"
FILE_FORMAT = (
    "[%(asctime)s] [%(levelname)s] [%(name)s] "
    "[session:%(session_id)s tool:%(tool_name)s] %(message)s"
)

MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 30

# Rotating files and the lowest level each one keeps
LOG_FILES = (
    ("just_cancel.log", logging.DEBUG),
    ("just_cancel_errors.log", logging.ERROR),
)


class StructuredFormatter(logging.Formatter):
    """Formatter that renders absent context fields as None."""

    def format(self, record):
        for field in CONTEXT_FIELDS:
            if not hasattr(record, field):
                setattr(record, field, None)
        return super().format(record)


def get_log_file_path(filename: str) -> str:
    return os.path.join(config.LOG_DIR, filename)


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(logging.getLevelNamesMapping().get(config.LOG_LEVEL, logging.INFO))
    handler.setFormatter(StructuredFormatter(CONSOLE_FORMAT))
    return handler


def _file_handler(filename: str, level: int) -> logging.Handler:
    handler = RotatingFileHandler(
        get_log_file_path(filename),
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(StructuredFormatter(FILE_FORMAT))
    return handler


def get_logger(name: str) -> logging.Logger:
    """
    Return the named logger, attaching handlers on first use.

    Configured loggers do not propagate, so a record is written once even
    when a parent logger also has handlers.

    Args:
        name: Logger name (typically __name__)
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    os.makedirs(config.LOG_DIR, exist_ok=True)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    logger.addHandler(_console_handler())
    for filename, level in LOG_FILES:
        logger.addHandler(_file_handler(filename, level))

    return logger
