"""Repository interfaces the move and rename engines depend on.

The folder taxonomy, drive configuration, organized-file ledger and the
undo-log store are owned outside the engine; these interfaces are the only
way the engine reads or writes them.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from ..models.operations import DriveInfo, FolderInfo, OrganizedFileRecord, RecordStatus


class FolderRepository(ABC):
    """Resolves JD folder numbers to folder metadata."""

    @abstractmethod
    def resolve_folder(self, folder_number: str) -> Optional[FolderInfo]:
        """Find a folder by its number (e.g. ``"11.01"``)."""
        pass


class DriveRepository(ABC):
    """Looks up the storage roots folders are created under."""

    @abstractmethod
    def get_default_drive(self) -> Optional[DriveInfo]:
        """Get the default active drive."""
        pass

    @abstractmethod
    def get_drive(self, drive_id: str) -> Optional[DriveInfo]:
        """Get a drive by id."""
        pass


class OrganizedFileLedger(ABC):
    """Durable record of moves performed by the organizer."""

    @abstractmethod
    def record_move(self, original_path: Path, current_path: Path,
                    folder_number: Optional[str], file_size: Optional[int] = None,
                    drive_id: Optional[str] = None) -> int:
        """Record a completed move with status ``moved`` and return its id."""
        pass

    @abstractmethod
    def update_record(self, record_id: int, status: RecordStatus) -> None:
        """Change the status of a record."""
        pass

    @abstractmethod
    def get_record(self, record_id: int) -> Optional[OrganizedFileRecord]:
        """Get a record by id."""
        pass


class KeyValueStore(ABC):
    """Opaque durable key/value storage for serialized blobs."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Get the blob stored under key."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a blob under key, replacing any previous value."""
        pass
