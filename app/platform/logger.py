import logging
import os
from logging.handlers import RotatingFileHandler

from app.platform.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE_NAME = "lighthouse_service.log"

log_dir = os.path.join(os.getcwd(), settings.LOG_DIR)
os.makedirs(log_dir, exist_ok=True)
log_file_path = os.path.join(log_dir, LOG_FILE_NAME)


def _build_handlers(level: int) -> list[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = [
        RotatingFileHandler(log_file_path, maxBytes=10_000_000, backupCount=5),
        logging.StreamHandler(),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
    return handlers


def get_logger(name: str) -> logging.Logger:
    """
    Named logger writing to the console and to ``<LOG_DIR>/lighthouse_service.log``.
    Handlers are attached on first use only, so repeated calls are cheap.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logger.setLevel(level)
    for handler in _build_handlers(level):
        logger.addHandler(handler)
    return logger
