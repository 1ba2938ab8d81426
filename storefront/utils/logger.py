"""Logging setup shared by the whole application."""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from storefront.config import settings

_configured = False

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_MAX_BYTES = 2 * 1024 * 1024
LOG_BACKUPS = 3


def setup_logging():
    """Configure the root logger once (stdout + optional rotating file)."""
    global _configured
    if _configured:
        return

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT)

    # Avoid duplicate handlers (uvicorn / pytest may have installed their own)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

        if settings.log_file:
            try:
                os.makedirs(os.path.dirname(settings.log_file) or ".", exist_ok=True)
                file_handler = RotatingFileHandler(
                    settings.log_file,
                    maxBytes=LOG_MAX_BYTES,
                    backupCount=LOG_BACKUPS,
                )
                file_handler.setLevel(level)
                file_handler.setFormatter(formatter)
                root.addHandler(file_handler)
            except OSError as e:
                root.warning("Failed to initialize file logging: %s", e)

    _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    setup_logging()
    return logging.getLogger(name)
