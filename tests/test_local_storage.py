from __future__ import annotations

import json
from pathlib import Path

from code_roaster.storage import LocalStorage


def test_memory_storage() -> None:
    storage = LocalStorage()

    assert storage.get_item("missing") is None
    storage.set_item("a", "1")
    storage.remove_item("a")
    storage.remove_item("a")

    assert storage.keys() == []


def test_file_storage_survives_reopen(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "store.json"
    LocalStorage(path).set_item("codeRoaster_history", "[]")

    reopened = LocalStorage(path)

    assert reopened.get_item("codeRoaster_history") == "[]"
    assert json.loads(path.read_text(encoding="utf-8")) == {"codeRoaster_history": "[]"}
    assert [p.name for p in path.parent.iterdir()] == ["store.json"]


def test_unreadable_file_is_treated_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_text("[1, 2", encoding="utf-8")

    storage = LocalStorage(path)

    assert storage.get_item("anything") is None
    storage.set_item("k", "v")
    assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}
