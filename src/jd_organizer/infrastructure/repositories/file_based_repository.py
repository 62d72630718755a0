"""
File-based key/value store.

Keeps every key in one JSON document on disk. Writes go to a temporary
file in the same directory and are swapped in with an atomic replace, so a
crash mid-write leaves the previous document intact.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

from ...domain.repositories import KeyValueStore
from ...exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class JsonFileKeyValueStore(KeyValueStore):
    """KeyValueStore persisted as a single JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Key/value store {self.path} is corrupt: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Key/value store {self.path} is not a JSON object")
        return data

    def _save(self, data: Dict[str, str]) -> None:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)
        logger.debug(f"Stored {len(value)} bytes under {key!r} in {self.path}")
