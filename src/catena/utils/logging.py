"""
Structured logging helpers.

Modules obtain a logger with ``get_logger(__name__)`` and pass context
through ``extra={...}``. Library code only logs; applications decide
where records go with ``configure_logging``.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional, Union

ROOT_LOGGER_NAME = "catena"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


class ContextFormatter(logging.Formatter):
    """Formatter that appends ``extra`` fields as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        context = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        if not context:
            return base
        rendered = " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        return f"{base} [{rendered}]"


def get_logger(name: str) -> logging.Logger:
    """Return a logger below the package root logger."""
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_logging(
    level: Union[int, str] = logging.INFO,
    stream: Optional[IO[str]] = None,
    fmt: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """
    Attach a single stream handler to the package root logger.

    Calling it again replaces the previous handler, so the CLI and tests can
    reconfigure freely.

    Args:
        level: Log level name or number
        stream: Target stream (defaults to stderr)
        fmt: Log line format

    Returns:
        The package root logger
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        if getattr(handler, "_catena_handler", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(ContextFormatter(fmt))
    handler._catena_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    set_level(level)
    return root


def set_level(level: Union[int, str]) -> None:
    if isinstance(level, str):
        level = level.upper()
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(level)


__all__ = ["get_logger", "configure_logging", "set_level", "ContextFormatter"]
