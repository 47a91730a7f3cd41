"""Unit tests for the JSON slot store used by the mirror and the pending log."""

import json

from app.core.storage.json_store import JsonStore


def test_missing_file_reads_as_empty_list(tmp_path):
    store = JsonStore(tmp_path / "nested" / "slot.json")
    assert store.read_list() == []
    assert not store.path.exists()


def test_write_then_read_roundtrip_creates_parent_dirs(tmp_path):
    store = JsonStore(tmp_path / "nested" / "slot.json")
    store.write_list([{"id": "1", "name": "Alien"}])

    assert store.path.exists()
    assert store.read_list() == [{"id": "1", "name": "Alien"}]
    assert not (tmp_path / "nested" / "slot.json.tmp").exists()


def test_trailing_garbage_is_recovered_and_file_healed(tmp_path):
    path = tmp_path / "slot.json"
    path.write_text('[{"id": "1"}]garbage', encoding="utf-8")

    store = JsonStore(path)
    assert store.read_list() == [{"id": "1"}]
    assert json.loads(path.read_text(encoding="utf-8")) == [{"id": "1"}]


def test_unrecoverable_file_resets_to_empty(tmp_path):
    path = tmp_path / "slot.json"
    path.write_text("{{{ not json", encoding="utf-8")

    store = JsonStore(path)
    assert store.read_list() == []
    assert json.loads(path.read_text(encoding="utf-8")) == []


def test_non_list_payload_is_ignored(tmp_path):
    path = tmp_path / "slot.json"
    path.write_text('{"id": "1"}', encoding="utf-8")

    assert JsonStore(path).read_list() == []


def test_non_dict_items_are_dropped(tmp_path):
    path = tmp_path / "slot.json"
    path.write_text('[{"id": "1"}, 42, "x"]', encoding="utf-8")

    assert JsonStore(path).read_list() == [{"id": "1"}]
