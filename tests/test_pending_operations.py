"""Unit tests for the durable pending operation log."""

import json

import pytest

from app.core.services.pending_operations import PendingOperationLog


class _Clock:
    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def millis(self) -> int:
        self.now += 1
        return self.now


def test_add_persists_immediately_and_survives_restart(tmp_path):
    path = tmp_path / "pending.json"
    log = PendingOperationLog(path, time_fn=_Clock().millis)
    log.add_pending_operation("create", {"id": "local-1", "name": "Dune"})
    log.add_pending_operation("delete", {"id": "srv-9"})
    before = log.get_pending_operations()

    on_disk = json.loads(path.read_text(encoding="utf-8"))
    assert [item["kind"] for item in on_disk] == ["create", "delete"]

    restarted = PendingOperationLog(path)
    restarted.load_pending_operations()
    assert restarted.get_pending_operations() == before


def test_entries_keep_insertion_order_and_timestamps(tmp_path):
    clock = _Clock(start=1000)
    log = PendingOperationLog(tmp_path / "pending.json", time_fn=clock.millis)
    log.add_pending_operation("create", {"id": "a"})
    log.add_pending_operation("update", {"id": "a", "name": "A2"})
    log.add_pending_operation("delete", {"id": "b"})

    ops = log.get_pending_operations()
    assert [op.kind for op in ops] == ["create", "update", "delete"]
    assert [op.recordedAtMillis for op in ops] == [1001, 1002, 1003]
    assert ops[2].payload == {"id": "b"}


def test_duplicates_are_not_coalesced(tmp_path):
    log = PendingOperationLog(tmp_path / "pending.json")
    log.add_pending_operation("update", {"id": "a", "name": "x"})
    log.add_pending_operation("update", {"id": "a", "name": "x"})
    assert len(log) == 2


def test_snapshot_is_read_only(tmp_path):
    log = PendingOperationLog(tmp_path / "pending.json")
    log.add_pending_operation("create", {"id": "a"})

    snapshot = log.get_pending_operations()
    snapshot[0].payload["id"] = "mutated"
    snapshot.clear()

    assert log.get_pending_operations()[0].payload == {"id": "a"}


def test_clear_persists_empty_log(tmp_path):
    path = tmp_path / "pending.json"
    log = PendingOperationLog(path)
    log.add_pending_operation("create", {"id": "a"})
    log.clear_pending_operations()

    assert log.get_pending_operations() == []
    assert json.loads(path.read_text(encoding="utf-8")) == []
    assert len(PendingOperationLog(path)) == 0


def test_discard_head_keeps_later_entries(tmp_path):
    log = PendingOperationLog(tmp_path / "pending.json")
    for movie_id in ("a", "b", "c"):
        log.add_pending_operation("delete", {"id": movie_id})

    log.discard_head(2)
    assert [op.payload["id"] for op in log.get_pending_operations()] == ["c"]


def test_unknown_kind_is_rejected(tmp_path):
    log = PendingOperationLog(tmp_path / "pending.json")
    with pytest.raises(ValueError):
        log.add_pending_operation("upsert", {"id": "a"})  # type: ignore[arg-type]
    assert len(log) == 0


def test_malformed_entries_are_skipped_on_load(tmp_path):
    path = tmp_path / "pending.json"
    path.write_text(
        json.dumps(
            [
                {"kind": "create", "payload": {"id": "a"}, "recordedAtMillis": 1},
                {"kind": "explode", "payload": {}, "recordedAtMillis": 2},
                {"kind": "delete"},
            ]
        ),
        encoding="utf-8",
    )
    log = PendingOperationLog(path)
    assert [op.kind for op in log.get_pending_operations()] == ["create"]
