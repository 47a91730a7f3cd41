"""
Local JSON persistence for the offline sync core.

Each store is one named slot (a single JSON file holding a list). Used by
the local movie mirror and by the pending operation log; both are plain
JSON text so they survive process restarts and can be inspected by hand.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

_LOCKS: Dict[str, threading.Lock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = str(path.resolve())
    with _LOCKS_GUARD:
        if key not in _LOCKS:
            _LOCKS[key] = threading.Lock()
        return _LOCKS[key]


class JsonStore:
    """List-based JSON file slot with atomic writes."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def read_list(self) -> List[Dict[str, Any]]:
        lock = _lock_for(self.path)
        with lock:
            if not self.path.exists():
                return []
            raw = self.path.read_text(encoding="utf-8").strip() or "[]"
            try:
                data = json.loads(raw)
            except json.JSONDecodeError:
                return self._recover(raw)
            if not isinstance(data, list):
                logger.warning("Expected a JSON list in %s, found %s; ignoring", self.path, type(data).__name__)
                return []
            return [item for item in data if isinstance(item, dict)]

    def write_list(self, items: List[Dict[str, Any]]) -> None:
        lock = _lock_for(self.path)
        with lock:
            self._write(items)

    def _write(self, items: List[Dict[str, Any]]) -> None:
        # temp file + rename so a crash never leaves a half-written slot
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(
            json.dumps(items, indent=2, ensure_ascii=False, default=str),
            encoding="utf-8",
        )
        tmp.replace(self.path)

    def _recover(self, raw: str) -> List[Dict[str, Any]]:
        logger.warning("Corrupted JSON in %s, attempting recovery", self.path)
        try:
            obj, _ = json.JSONDecoder().raw_decode(raw)
        except (json.JSONDecodeError, ValueError):
            obj = None
        if isinstance(obj, list):
            items = [item for item in obj if isinstance(item, dict)]
            self._write(items)
            logger.info("Recovered %d items from %s", len(items), self.path)
            return items
        logger.error("Unrecoverable JSON in %s, resetting to empty list", self.path)
        self._write([])
        return []
