# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
import logging
import sys

from recrypt.config import load_settings

_loggers: dict[str, logging.Logger] = {}

_FORMAT = "[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str, level: str | int | None = None) -> logging.Logger:
    """
    Return a cached logger for a `recrypt` module.

    The first call for a name attaches a single stderr handler with the
    project format; later calls return the same logger untouched.

    Args:
        name: Logger name, usually the module `__name__`.
        level: Optional level override. When omitted the level comes from
            `RECRYPT_LOG_LEVEL` (see `recrypt.config`).

    Returns:
        The configured `logging.Logger`.
    """
    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)
    logger.setLevel(level if level is not None else load_settings().log_level)
    logger.propagate = False
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT))
    logger.addHandler(handler)

    _loggers[name] = logger
    return logger


def set_level(name: str, level: str | int) -> None:
    """Change the level of an existing logger."""
    if name in _loggers:
        _loggers[name].setLevel(level)


def clear_cache() -> None:
    _loggers.clear()
