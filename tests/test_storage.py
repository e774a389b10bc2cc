from __future__ import annotations

import json
from pathlib import Path

import pytest

from sfmap.storage import JsonFileStorage, MemoryStorage


def test_memory_storage_round_trip() -> None:
    storage = MemoryStorage({"a": "1"})
    storage.set_item("b", "2")
    storage.remove_item("a")
    storage.remove_item("missing")

    assert storage.get_item("a") is None
    assert storage.get_item("b") == "2"


def test_json_file_storage_persists_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "state.json"
    JsonFileStorage(path).set_item("sfm_log_level", "debug")

    reopened = JsonFileStorage(path)
    assert reopened.get_item("sfm_log_level") == "debug"
    assert json.loads(path.read_text(encoding="utf-8")) == {"sfm_log_level": "debug"}
    assert [p.name for p in path.parent.iterdir()] == ["state.json"]


def test_json_file_storage_treats_garbage_file_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text("not json", encoding="utf-8")
    storage = JsonFileStorage(path)

    assert storage.get_item("anything") is None
    storage.set_item("k", "v")
    assert storage.get_item("k") == "v"


def test_json_file_storage_remove_item(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path / "state.json")
    storage.set_item("k", "v")
    storage.remove_item("k")

    assert storage.get_item("k") is None


def test_json_file_storage_expands_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    storage = JsonFileStorage("~/state.json")
    storage.set_item("k", "v")

    assert storage.path == tmp_path / "state.json"
    assert (tmp_path / "state.json").is_file()
