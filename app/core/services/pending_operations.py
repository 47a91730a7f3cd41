"""Durable FIFO log of movie mutations that could not reach the movies service."""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, List

from pydantic import ValidationError

from app.core.storage.json_store import JsonStore
from app.integrations.movies_api.types import OPERATION_KINDS, OperationKind, PendingOperation

logger = logging.getLogger(__name__)


def _now_millis() -> int:
    return int(time.time() * 1000)


class PendingOperationLog:
    """
    Ordered record of create/update/delete intents.

    Insertion order is replay order. The full log is rewritten to disk after
    every mutation, so an entry survives a crash right after it was added.
    Entries are never de-duplicated or coalesced.
    """

    def __init__(
        self,
        path: str | Path = "data/pending_operations.json",
        *,
        time_fn: Callable[[], int] = _now_millis,
    ) -> None:
        self.store = JsonStore(path)
        self._time_fn = time_fn
        self._lock = threading.RLock()
        self._operations: List[PendingOperation] = []
        self.load_pending_operations()

    def add_pending_operation(self, kind: OperationKind, payload: Dict[str, Any]) -> PendingOperation:
        if kind not in OPERATION_KINDS:
            raise ValueError(f"Unknown operation kind: {kind!r}")
        operation = PendingOperation(kind=kind, payload=dict(payload), recordedAtMillis=self._time_fn())
        with self._lock:
            self._operations.append(operation)
            self._save()
        logger.info("Queued %s operation (%d pending)", kind, len(self._operations))
        return operation

    def get_pending_operations(self) -> List[PendingOperation]:
        """Snapshot of the log; mutating it does not touch the log."""
        with self._lock:
            return [op.model_copy(deep=True) for op in self._operations]

    def clear_pending_operations(self) -> None:
        with self._lock:
            self._operations = []
            self._save()

    def discard_head(self, count: int) -> None:
        """Drop the first ``count`` entries (those a replay pass consumed)."""
        with self._lock:
            self._operations = self._operations[max(0, int(count)):]
            self._save()

    def load_pending_operations(self) -> None:
        loaded: List[PendingOperation] = []
        for index, raw in enumerate(self.store.read_list()):
            try:
                loaded.append(PendingOperation.model_validate(raw))
            except ValidationError as e:
                logger.warning("Skipping malformed pending operation #%d in %s: %s", index, self.store.path, e)
        with self._lock:
            self._operations = loaded
        if loaded:
            logger.info("Loaded %d pending operations from %s", len(loaded), self.store.path)

    def __len__(self) -> int:
        with self._lock:
            return len(self._operations)

    def _save(self) -> None:
        self.store.write_list([op.model_dump() for op in self._operations])
