import logging
import os
from logging.handlers import RotatingFileHandler

from app.platform.config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE_NAME = "a11y_audit.log"
MAX_LOG_BYTES = 10_000_000
LOG_BACKUPS = 5


def _build_handlers():
    log_dir = os.path.join(os.getcwd(), settings.LOG_DIR)
    os.makedirs(log_dir, exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT)

    file_handler = RotatingFileHandler(
        os.path.join(log_dir, LOG_FILE_NAME), maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS
    )
    console_handler = logging.StreamHandler()

    for handler in (file_handler, console_handler):
        handler.setFormatter(formatter)
        handler.setLevel(logging.INFO)
    return file_handler, console_handler


def get_logger(name: str) -> logging.Logger:
    """
    Logger for a pipeline module (scan, store, suggestions, ...).

    Writes to the console and to logs/a11y_audit.log, rotated at 10 MB.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)
    for handler in _build_handlers():
        logger.addHandler(handler)
    return logger
