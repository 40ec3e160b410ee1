"""Logging helpers for the json_grid_editor package."""

# Module responsibilities:
# - Centralize logging configuration with file + stream handlers.
# - configure_logging() runs once at start-up; get_logger() only names loggers.

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = 'json_grid_editor'
DEFAULT_LOG_DIR = Path('logs')
_LOG_CONFIGURED = False


def configure_logging(log_dir: Optional[Path] = None, level: int = logging.INFO) -> None:
    """Configure the package logger once with rotating file + console handlers."""
    global _LOG_CONFIGURED
    if _LOG_CONFIGURED:
        return

    directory = Path(log_dir) if log_dir else DEFAULT_LOG_DIR
    directory.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        fmt='%(asctime)s [%(levelname)s] %(name)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    file_handler = logging.handlers.RotatingFileHandler(
        directory / 'app.log', maxBytes=10 * 1024 * 1024, backupCount=3, encoding='utf-8'
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)
    root_logger.propagate = False

    _LOG_CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package namespace."""
    return logging.getLogger(f'{ROOT_LOGGER_NAME}.{name}')
