"""SQLite-backed folder, drive and organized-file repositories."""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

from ...domain.repositories import DriveRepository, FolderRepository, OrganizedFileLedger
from ...exceptions import NotFoundError
from ...models.operations import DriveInfo, FolderInfo, OrganizedFileRecord, RecordStatus

logger = logging.getLogger(__name__)


class SQLiteOrganizerStore(FolderRepository, DriveRepository, OrganizedFileLedger):
    """Persists the folder taxonomy, drives and the organized-file ledger."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_database()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path)
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _init_database(self) -> None:
        """Initialize the SQLite database with required tables."""
        with self._connect() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS folders (
                    folder_number TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    category_name TEXT,
                    area_name TEXT
                );

                CREATE TABLE IF NOT EXISTS drives (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL DEFAULT '',
                    base_path TEXT NOT NULL,
                    jd_root_path TEXT,
                    is_default INTEGER DEFAULT 0,
                    is_active INTEGER DEFAULT 1
                );

                CREATE TABLE IF NOT EXISTS organized_files (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    original_path TEXT NOT NULL,
                    current_path TEXT NOT NULL,
                    folder_number TEXT,
                    file_size INTEGER,
                    drive_id TEXT,
                    status TEXT NOT NULL DEFAULT 'moved'
                        CHECK (status IN ('moved', 'undone')),
                    organized_at TEXT DEFAULT CURRENT_TIMESTAMP
                );

                CREATE INDEX IF NOT EXISTS idx_organized_status ON organized_files(status);
            """)

    # Folders

    def add_folder(self, folder: FolderInfo) -> None:
        with self._connect() as conn:
            conn.execute(
                """INSERT OR REPLACE INTO folders (folder_number, name, category_name, area_name)
                   VALUES (?, ?, ?, ?)""",
                (folder.number, folder.name, folder.category_name, folder.area_name)
            )

    def resolve_folder(self, folder_number: str) -> Optional[FolderInfo]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT folder_number, name, category_name, area_name FROM folders WHERE folder_number = ?",
                (folder_number,)
            ).fetchone()

        if row:
            return FolderInfo(number=row[0], name=row[1], category_name=row[2], area_name=row[3])
        return None

    # Drives

    def add_drive(self, drive: DriveInfo) -> None:
        with self._connect() as conn:
            if drive.is_default:
                conn.execute("UPDATE drives SET is_default = 0")
            conn.execute(
                """INSERT OR REPLACE INTO drives (id, name, base_path, jd_root_path, is_default, is_active)
                   VALUES (?, ?, ?, ?, ?, 1)""",
                (
                    drive.id,
                    drive.name,
                    str(drive.base_path),
                    str(drive.jd_root_path) if drive.jd_root_path else None,
                    1 if drive.is_default else 0,
                )
            )

    def get_drive(self, drive_id: str) -> Optional[DriveInfo]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT id, name, base_path, jd_root_path, is_default FROM drives WHERE id = ?",
                (drive_id,)
            ).fetchone()
        return self._row_to_drive(row) if row else None

    def get_default_drive(self) -> Optional[DriveInfo]:
        with self._connect() as conn:
            row = conn.execute(
                """SELECT id, name, base_path, jd_root_path, is_default FROM drives
                   WHERE is_default = 1 AND is_active = 1 LIMIT 1"""
            ).fetchone()
        return self._row_to_drive(row) if row else None

    @staticmethod
    def _row_to_drive(row) -> DriveInfo:
        return DriveInfo(
            id=row[0],
            name=row[1],
            base_path=Path(row[2]),
            jd_root_path=Path(row[3]) if row[3] else None,
            is_default=bool(row[4]),
        )

    # Ledger

    def record_move(self, original_path: Path, current_path: Path,
                    folder_number: Optional[str], file_size: Optional[int] = None,
                    drive_id: Optional[str] = None) -> int:
        with self._connect() as conn:
            cursor = conn.execute(
                """INSERT INTO organized_files
                   (original_path, current_path, folder_number, file_size, drive_id, status)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (
                    str(original_path),
                    str(current_path),
                    folder_number,
                    file_size,
                    drive_id,
                    RecordStatus.MOVED.value,
                )
            )
            record_id = cursor.lastrowid

        logger.debug(f"Recorded move #{record_id}: {original_path} -> {current_path}")
        return record_id

    def update_record(self, record_id: int, status: RecordStatus) -> None:
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE organized_files SET status = ? WHERE id = ?",
                (status.value, record_id)
            )
            if cursor.rowcount == 0:
                raise NotFoundError(f"Record {record_id} not found")

    def get_record(self, record_id: int) -> Optional[OrganizedFileRecord]:
        with self._connect() as conn:
            row = conn.execute(
                """SELECT id, original_path, current_path, folder_number, status,
                          file_size, drive_id, organized_at
                   FROM organized_files WHERE id = ?""",
                (record_id,)
            ).fetchone()
        return self._row_to_record(row) if row else None

    def list_records(self, status: Optional[RecordStatus] = None,
                     limit: int = 50) -> List[OrganizedFileRecord]:
        """List recent ledger records, newest first."""
        query = """SELECT id, original_path, current_path, folder_number, status,
                          file_size, drive_id, organized_at
                   FROM organized_files"""
        params: tuple = ()
        if status:
            query += " WHERE status = ?"
            params = (status.value,)
        query += " ORDER BY id DESC LIMIT ?"
        params += (limit,)

        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_record(row) for row in rows]

    @staticmethod
    def _row_to_record(row) -> OrganizedFileRecord:
        return OrganizedFileRecord(
            id=row[0],
            original_path=Path(row[1]),
            current_path=Path(row[2]),
            folder_number=row[3],
            status=RecordStatus(row[4]),
            file_size=row[5],
            drive_id=row[6],
            organized_at=row[7],
        )
