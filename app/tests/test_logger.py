# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
import logging

from recrypt.logger import clear_cache, get_logger, set_level


def test_logger_is_cached():
    assert get_logger("recrypt.test") is get_logger("recrypt.test")


def test_single_handler_and_level():
    clear_cache()
    logger = get_logger("recrypt.test.level", level=logging.DEBUG)
    again = get_logger("recrypt.test.level")
    assert again is logger
    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG

    set_level("recrypt.test.level", logging.ERROR)
    assert logger.level == logging.ERROR


def test_default_level_from_environment(monkeypatch):
    clear_cache()
    monkeypatch.setenv("RECRYPT_LOG_LEVEL", "info")
    assert get_logger("recrypt.test.env").level == logging.INFO
