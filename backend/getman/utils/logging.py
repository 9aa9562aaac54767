"""Unified logging configuration for the Getman backend.

Provides consistent logging with both console and file output.
Log files are written under the workspace logs directory with rotation support.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from getman.settings import settings

LOG_FORMAT = "[%(asctime)s.%(msecs)03d][%(levelname)s][%(filename)s:%(lineno)d]: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER_NAME = "getman"


def _build_formatter() -> logging.Formatter:
    return logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)


def _has_console_handler(logger: logging.Logger) -> bool:
    """True once our formatted console handler is installed."""
    return any(
        type(h) is logging.StreamHandler and getattr(h.formatter, "_fmt", None) == LOG_FORMAT for h in logger.handlers
    )


def _ensure_app_logger_configured():
    """
    Ensure the getman parent logger is configured with a console handler.
    This is called automatically on module import.
    """
    app_logger = logging.getLogger(ROOT_LOGGER_NAME)

    if _has_console_handler(app_logger):
        return

    app_logger.handlers.clear()
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(_build_formatter())
    app_logger.addHandler(console_handler)
    app_logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)

    # Let pytest's caplog see records through the root logger
    app_logger.propagate = settings.environment == "test"


def setup_logging(log_name: str = "getman") -> logging.Logger:
    """
    Setup logging configuration with console and file output.

    Log file path pattern: {logs_root}/{log_name}.log

    Args:
        log_name: The name of the log file (without .log extension).

    Returns:
        Configured logger instance
    """
    _ensure_app_logger_configured()

    log_dir = _get_logs_root()

    logger_name = f"{ROOT_LOGGER_NAME}.{log_name}"
    logger = logging.getLogger(logger_name)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

        log_file_path = os.path.join(log_dir, f"{log_name}.log")

        app_logger = logging.getLogger(ROOT_LOGGER_NAME)
        if not any(isinstance(h, RotatingFileHandler) and h.baseFilename == log_file_path for h in app_logger.handlers):
            app_file_handler = RotatingFileHandler(
                log_file_path,
                maxBytes=settings.log_max_bytes,
                backupCount=settings.log_backup_count,
                encoding="utf-8",
            )
            app_file_handler.setFormatter(_build_formatter())
            app_logger.addHandler(app_file_handler)
            app_logger.info(f"File handler added: {log_file_path}")

        logger.propagate = True

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name, typically __name__ of the calling module

    Returns:
        Logger instance
    """
    _ensure_app_logger_configured()

    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    return logging.getLogger(name)


def _get_logs_root() -> Path | None:
    """
    Get the logs root directory, or None if it cannot be created.
    Tests log to the console only.
    """
    if settings.environment == "test":
        return None

    logs_root = settings.get_logs_root()
    if _can_create_dir(logs_root):
        return logs_root
    return None


def _can_create_dir(path: Path) -> bool:
    """Check if a directory can be created."""
    try:
        path.mkdir(parents=True, exist_ok=True)
        return True
    except (OSError, PermissionError):
        return False


_ensure_app_logger_configured()
