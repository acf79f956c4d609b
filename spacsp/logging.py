"""Logging setup for spacsp.

Library modules log under the ``spacsp`` hierarchy and never print; only the
CLI installs handlers.
"""

from __future__ import annotations

import logging
from pathlib import Path

_ROOT_NAME = "spacsp"
_CONSOLE_FORMAT = "[spacsp] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``spacsp.<name>`` (or the package logger itself)."""
    return logging.getLogger(f"{_ROOT_NAME}.{name}" if name else _ROOT_NAME)


def resolve_level(*, verbose: bool = False, quiet: bool = False) -> int:
    """DEBUG for --verbose, WARNING for --quiet, INFO otherwise; verbose wins."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    return logging.INFO


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install console (and optional file) handlers on the package logger.

    Safe to call repeatedly: previously installed handlers are closed and
    replaced.
    """
    level = resolve_level(verbose=verbose, quiet=quiet)
    logger = logging.getLogger(_ROOT_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_with_format(logging.StreamHandler(), level, _CONSOLE_FORMAT))
    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        logger.addHandler(_with_format(file_handler, level, _FILE_FORMAT))
    return logger


def _with_format(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


__all__ = ["configure_logging", "get_logger", "resolve_level"]
