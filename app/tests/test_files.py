# Copyright (C) 2025 Logical Mechanism LLC
# SPDX-License-Identifier: GPL-3.0-only
import pytest

from recrypt.files import fields_of, load_json, save_json


def test_save_and_load(tmp_path):
    path = tmp_path / "nested" / "artifact.json"
    data = {"constructor": 0, "fields": [{"bytes": "acab"}, {"bytes": "cafe"}]}
    save_json(path, data)

    assert load_json(path) == data
    assert fields_of(load_json(path)) == ["acab", "cafe"]


def test_output_is_sorted(tmp_path):
    path = tmp_path / "artifact.json"
    save_json(path, {"b": 1, "a": 2})
    assert path.read_text(encoding="utf-8").index('"a"') < path.read_text(encoding="utf-8").index('"b"')


def test_fields_of_rejects_other_shapes():
    with pytest.raises(ValueError):
        fields_of({"list": []})


if __name__ == "__main__":
    pytest.main()
