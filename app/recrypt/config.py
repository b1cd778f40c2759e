# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
import logging
import os

from dataclasses import dataclass
from typing import Mapping

from recrypt.constants import DEFAULT_LOG_LEVEL, DEFAULT_MAX_WORKERS


@dataclass(frozen=True)
class Settings:
    log_level: str = DEFAULT_LOG_LEVEL
    max_workers: int = DEFAULT_MAX_WORKERS


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Read runtime settings from the environment.

    Recognised variables:
        RECRYPT_LOG_LEVEL: a `logging` level name (default WARNING).
        RECRYPT_MAX_WORKERS: thread count for the delegation-key fan-out
            done at vendor registration (default 8).

    Args:
        environ: Mapping to read from. Defaults to `os.environ`.

    Returns:
        A frozen `Settings` value.

    Raises:
        ValueError: If a variable holds an unknown level or a non-positive
            worker count.
    """
    env = os.environ if environ is None else environ

    log_level = env.get("RECRYPT_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ValueError(f"Unknown log level {log_level!r} in RECRYPT_LOG_LEVEL")

    raw_workers = env.get("RECRYPT_MAX_WORKERS", str(DEFAULT_MAX_WORKERS))
    try:
        max_workers = int(raw_workers)
    except ValueError as exc:
        raise ValueError(
            f"RECRYPT_MAX_WORKERS must be an integer, got {raw_workers!r}"
        ) from exc
    if max_workers < 1:
        raise ValueError(f"RECRYPT_MAX_WORKERS must be positive, got {max_workers}")

    return Settings(log_level=log_level, max_workers=max_workers)
