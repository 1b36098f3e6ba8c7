"""
lib/log.py

Logging setup shared by all project packages. Library modules log through
`logging.getLogger(__name__)`; this module attaches handlers and levels.
"""

from __future__ import annotations
import logging
from logging import CRITICAL, DEBUG, ERROR, INFO, WARNING

__all__ = [
    "logger",
    "set_log_level",
    "set_file_handler",
    "set_stream_handler",
    "DEBUG",
    "INFO",
    "WARNING",
    "ERROR",
    "CRITICAL",
]

packages = ["controller", "env", "lib", "scripts"]

_fmt = "%(asctime)s %(name)s:%(levelname)s %(message)s"
_formatter = logging.Formatter(fmt=_fmt)
_stream_handler = logging.StreamHandler()
_stream_handler.setFormatter(_formatter)

logger = logging.getLogger("scripts")


def set_file_handler(file, formatter=None):
    """Set a file handler to all packages."""
    if formatter is None:
        formatter = _formatter
    fh = logging.FileHandler(file, mode="w")
    fh.setFormatter(formatter)
    for package in packages:
        logging.getLogger(package).addHandler(fh)
    return fh


def set_stream_handler(handler=None):
    """Set the stream handler to all packages."""
    for package in packages:
        logger_ = logging.getLogger(package)
        if handler is None and _stream_handler in logger_.handlers:
            continue
        logger_.addHandler(handler if handler else _stream_handler)


def set_log_level(level, pkg: str | None = None):
    """Set the log level for the specified or all packages.

    Args:
        level: The log level to set, as an int or a name such as "INFO".
        pkg: If set, apply the log level only to the specified package.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level '{level}'")

    if pkg is not None:
        logging.getLogger(pkg).setLevel(level)
        return

    for package in packages:
        logging.getLogger(package).setLevel(level)
