# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
import pytest

from recrypt.config import Settings, load_settings


def test_defaults():
    assert load_settings({}) == Settings(log_level="WARNING", max_workers=8)


def test_from_environment():
    settings = load_settings({"RECRYPT_LOG_LEVEL": "debug", "RECRYPT_MAX_WORKERS": "3"})
    assert settings.log_level == "DEBUG"
    assert settings.max_workers == 3


def test_reads_os_environ(monkeypatch):
    monkeypatch.setenv("RECRYPT_MAX_WORKERS", "5")
    assert load_settings().max_workers == 5


@pytest.mark.parametrize(
    "environ",
    [
        {"RECRYPT_LOG_LEVEL": "LOUD"},
        {"RECRYPT_MAX_WORKERS": "many"},
        {"RECRYPT_MAX_WORKERS": "0"},
    ],
)
def test_rejects_bad_values(environ):
    with pytest.raises(ValueError):
        load_settings(environ)


if __name__ == "__main__":
    pytest.main()
