"""
Repository implementations - Infrastructure Layer

Concrete storage for folders, drives, the organized-file ledger and
rename undo logs.
"""

from .sqlite_repository import SQLiteOrganizerStore
from .file_based_repository import JsonFileKeyValueStore
from .memory_repository import (
    InMemoryFolderRepository,
    InMemoryDriveRepository,
    InMemoryLedger,
    InMemoryKeyValueStore,
)
from .undo_log_repository import UndoLogRepository

__all__ = [
    "SQLiteOrganizerStore",
    "JsonFileKeyValueStore",
    "InMemoryFolderRepository",
    "InMemoryDriveRepository",
    "InMemoryLedger",
    "InMemoryKeyValueStore",
    "UndoLogRepository",
]
