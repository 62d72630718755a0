"""In-memory repository implementations for embedding and tests."""

from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from ...domain.repositories import (
    DriveRepository,
    FolderRepository,
    KeyValueStore,
    OrganizedFileLedger,
)
from ...exceptions import NotFoundError
from ...models.operations import DriveInfo, FolderInfo, OrganizedFileRecord, RecordStatus


class InMemoryFolderRepository(FolderRepository):
    def __init__(self, *folders: FolderInfo):
        self.folders: Dict[str, FolderInfo] = {f.number: f for f in folders}

    def add(self, folder: FolderInfo) -> None:
        self.folders[folder.number] = folder

    def resolve_folder(self, folder_number: str) -> Optional[FolderInfo]:
        return self.folders.get(folder_number)


class InMemoryDriveRepository(DriveRepository):
    def __init__(self, *drives: DriveInfo):
        self.drives: Dict[str, DriveInfo] = {d.id: d for d in drives}

    def add(self, drive: DriveInfo) -> None:
        self.drives[drive.id] = drive

    def get_drive(self, drive_id: str) -> Optional[DriveInfo]:
        return self.drives.get(drive_id)

    def get_default_drive(self) -> Optional[DriveInfo]:
        for drive in self.drives.values():
            if drive.is_default:
                return drive
        return None


class InMemoryLedger(OrganizedFileLedger):
    def __init__(self):
        self.records: Dict[int, OrganizedFileRecord] = {}
        self._next_id = 1

    def record_move(self, original_path: Path, current_path: Path,
                    folder_number: Optional[str], file_size: Optional[int] = None,
                    drive_id: Optional[str] = None) -> int:
        record_id = self._next_id
        self._next_id += 1
        self.records[record_id] = OrganizedFileRecord(
            id=record_id,
            original_path=Path(original_path),
            current_path=Path(current_path),
            folder_number=folder_number,
            status=RecordStatus.MOVED,
            file_size=file_size,
            drive_id=drive_id,
            organized_at=datetime.now().isoformat(),
        )
        return record_id

    def update_record(self, record_id: int, status: RecordStatus) -> None:
        if record_id not in self.records:
            raise NotFoundError(f"Record {record_id} not found")
        self.records[record_id] = replace(self.records[record_id], status=status)

    def get_record(self, record_id: int) -> Optional[OrganizedFileRecord]:
        return self.records.get(record_id)


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self):
        self.data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value
