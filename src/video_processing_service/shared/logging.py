"""Centralized logging utilities."""

import logging
import sys
from typing import Optional, Union
from pathlib import Path

DEFAULT_FORMAT = '[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s'

# Root of the package logger hierarchy; configured once by the entry points
ROOT_LOGGER_NAME = 'video_processing_service'


def _coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, str):
        value = logging.getLevelName(level.upper())
        return value if isinstance(value, int) else logging.INFO
    return level


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Set up a logger with console and optional file output.

    Args:
        name: Logger name
        level: Logging level (int or name such as "DEBUG")
        log_file: Optional file to write logs to
        format_string: Custom format string

    Returns:
        Configured logger instance
    """
    level = _coerce_level(level)
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt='%H:%M:%S')

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    Loggers inside the package hierarchy propagate to the package root, so
    only the root gets handlers. Anything outside it is configured on demand.
    """
    logger = logging.getLogger(name)
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + '.'):
        root = logging.getLogger(ROOT_LOGGER_NAME)
        if not root.handlers:
            setup_logger(ROOT_LOGGER_NAME)
        return logger
    if not logger.handlers:
        return setup_logger(name)
    return logger


class LoggerAdapter:
    """
    Adapter to make a standard logger compatible with the ILogger protocol.

    An optional prefix (usually ``[job <id>]``) is prepended to every message
    so interleaved jobs stay readable.
    """

    def __init__(self, logger: logging.Logger, prefix: str = ""):
        self._logger = logger
        self._prefix = prefix

    def bind(self, prefix: str) -> "LoggerAdapter":
        """Return an adapter on the same logger with a different prefix."""
        return LoggerAdapter(self._logger, prefix)

    def _fmt(self, message: str) -> str:
        return f"{self._prefix} {message}" if self._prefix else message

    def debug(self, message: str, **kwargs) -> None:
        self._logger.debug(self._fmt(message), extra=kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._logger.info(self._fmt(message), extra=kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._logger.warning(self._fmt(message), extra=kwargs)

    def error(self, message: str, **kwargs) -> None:
        self._logger.error(self._fmt(message), extra=kwargs)

    def exception(self, message: str, **kwargs) -> None:
        """Log exception with traceback."""
        self._logger.exception(self._fmt(message), extra=kwargs)
