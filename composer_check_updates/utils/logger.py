"""
Logging utilities for composer-check-updates.

All loggers live under the ``ccu`` namespace. Library code obtains one via
:func:`get_logger` and never configures handlers itself; the CLI calls
:func:`setup_logging` once per invocation with a level derived from the
``-v`` count.
"""

from __future__ import annotations

import os
import sys
import logging
import threading
from typing import IO, Optional

from composer_check_updates.constants import (
    LOG_DATE_FORMAT,
    LOG_DEFAULT_FORMAT,
    LOG_VERBOSE_FORMAT,
)

ROOT_LOGGER_NAME = "ccu"

_logging_configured: bool = False
_lock = threading.Lock()


class ColoredFormatter(logging.Formatter):
    """Formatter that colours the level name when writing to a terminal."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: str,
        *,
        datefmt: Optional[str] = None,
        use_color: bool = True,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname)
        if not (color and self.use_color and _stderr_supports_color()):
            return super().format(record)

        # Other handlers may share the record; restore the plain name.
        original = record.levelname
        record.levelname = f"{color}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def _stderr_supports_color() -> bool:
    if os.environ.get("NO_COLOR") or os.environ.get("CI"):
        return False
    try:
        return sys.stderr.isatty()
    except (AttributeError, OSError):
        return False


def verbosity_to_level(verbose: int) -> int:
    """Map a ``-v`` count to a logging level.

    ``0`` → WARNING, ``1`` → INFO, ``2`` or more → DEBUG.
    """
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(
    *,
    level: int = logging.WARNING,
    verbose: bool = False,
    stream: Optional[IO[str]] = None,
) -> None:
    """Configure the ``ccu`` logger hierarchy.

    Safe to call repeatedly: existing handlers are replaced, never stacked.

    Args:
        level: Logging level (e.g. ``logging.INFO``).
        verbose: Use the timestamped format that includes logger names.
        stream: Output stream; defaults to ``sys.stderr``.
    """
    global _logging_configured

    with _lock:
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.handlers.clear()
        root_logger.setLevel(level)

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(
            ColoredFormatter(
                LOG_VERBOSE_FORMAT if verbose else LOG_DEFAULT_FORMAT,
                datefmt=LOG_DATE_FORMAT,
                use_color=not os.environ.get("NO_COLOR"),
            )
        )

        root_logger.addHandler(handler)
        root_logger.propagate = False
        _logging_configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger within the ``ccu`` namespace.

    ``get_logger("catalog")`` and ``get_logger("ccu.catalog")`` return the
    same logger. Unconfigured loggers get a ``NullHandler`` so that library
    use never prints "No handlers could be found" warnings.
    """
    if not name or name == ROOT_LOGGER_NAME:
        qualified = ROOT_LOGGER_NAME
    elif name.startswith(f"{ROOT_LOGGER_NAME}."):
        qualified = name
    else:
        qualified = f"{ROOT_LOGGER_NAME}.{name}"

    logger = logging.getLogger(qualified)
    if not logger.handlers and (not logger.parent or not logger.parent.handlers):
        logger.addHandler(logging.NullHandler())

    return logger


def is_logging_configured() -> bool:
    """Return True once :func:`setup_logging` has run."""
    return _logging_configured


def disable_logging() -> None:
    """Silence all ``ccu`` logging output."""
    global _logging_configured

    with _lock:
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.handlers.clear()
        root_logger.addHandler(logging.NullHandler())
        root_logger.setLevel(logging.NOTSET)
        _logging_configured = False
