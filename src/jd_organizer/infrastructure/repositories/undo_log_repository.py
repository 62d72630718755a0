"""
Undo-log repository for batch renames.

All logs live as one JSON blob under a single key of a KeyValueStore:
``{undo_id: {"timestamp": float, "log": [entry, ...]}}``. Ids are
zero-padded nanosecond timestamps, so string order equals creation order
and the most recent log is the max key.
"""

import json
import logging
import time
from typing import Dict, List, Optional

from ...domain.repositories import KeyValueStore
from ...exceptions import ConfigurationError
from ...models.rename import UndoLog, UndoLogEntry

logger = logging.getLogger(__name__)

UNDO_LOG_KEY = "batch_rename_undo"
DEFAULT_MAX_UNDO_LOGS = 10
_ID_WIDTH = 20


class UndoLogRepository:
    """Capped store of rename undo logs, most recent N kept."""

    def __init__(self, store: KeyValueStore, max_logs: int = DEFAULT_MAX_UNDO_LOGS,
                 key: str = UNDO_LOG_KEY):
        if max_logs < 1:
            raise ValueError("max_logs must be at least 1")
        self.store = store
        self.max_logs = max_logs
        self.key = key

    def _load(self) -> Dict[str, dict]:
        raw = self.store.get(self.key)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Undo log store is corrupt: {e}") from e
        return data if isinstance(data, dict) else {}

    def _save(self, logs: Dict[str, dict]) -> None:
        self.store.set(self.key, json.dumps(logs))

    @staticmethod
    def _new_id(existing: Dict[str, dict]) -> str:
        candidate = time.time_ns()
        if existing:
            # Clock can go backwards or repeat; ids must keep increasing
            newest = int(max(existing))
            if candidate <= newest:
                candidate = newest + 1
        return str(candidate).zfill(_ID_WIDTH)

    def save(self, entries: List[UndoLogEntry]) -> str:
        """Persist a batch of renames and return its undo id."""
        logs = self._load()
        undo_id = self._new_id(logs)
        logs[undo_id] = {
            "timestamp": time.time(),
            "log": [entry.to_dict() for entry in entries],
        }

        keep = sorted(logs, reverse=True)[:self.max_logs]
        pruned = len(logs) - len(keep)
        logs = {undo_id: logs[undo_id] for undo_id in keep}
        self._save(logs)

        if pruned:
            logger.debug(f"Pruned {pruned} old undo log(s)")
        return undo_id

    def get(self, undo_id: str) -> Optional[UndoLog]:
        data = self._load().get(undo_id)
        if data is None:
            return None
        return self._to_undo_log(undo_id, data)

    def get_most_recent(self) -> Optional[UndoLog]:
        logs = self._load()
        if not logs:
            return None
        undo_id = max(logs)
        return self._to_undo_log(undo_id, logs[undo_id])

    def list_ids(self) -> List[str]:
        """Stored undo ids, newest first."""
        return sorted(self._load(), reverse=True)

    def remove(self, undo_id: str) -> bool:
        logs = self._load()
        if undo_id not in logs:
            return False
        del logs[undo_id]
        self._save(logs)
        return True

    @staticmethod
    def _to_undo_log(undo_id: str, data: dict) -> UndoLog:
        return UndoLog(
            undo_id=undo_id,
            timestamp=data.get("timestamp", 0.0),
            entries=[UndoLogEntry.from_dict(entry) for entry in data.get("log", [])],
        )
