"""Data models for file moves, the organized-file ledger and rollbacks."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ..exceptions import ValidationError


class ConflictStrategy(Enum):
    """Policy for a destination name that is already taken."""
    SKIP = "skip"
    RENAME = "rename"
    OVERWRITE = "overwrite"


class MoveStatus(Enum):
    """Outcome of a single move."""
    SKIPPED = "skipped"
    SUCCESS = "success"
    FAILED = "failed"


class RecordStatus(Enum):
    """Status of an organized-file ledger record."""
    MOVED = "moved"
    UNDONE = "undone"


@dataclass(frozen=True)
class FolderInfo:
    """Folder metadata as resolved from the folder repository."""
    number: str
    name: str
    category_name: Optional[str] = None
    area_name: Optional[str] = None


@dataclass(frozen=True)
class DriveInfo:
    """A storage root that organized folders live under."""
    id: str
    base_path: Path
    jd_root_path: Optional[Path] = None
    name: str = ""
    is_default: bool = False

    @property
    def root(self) -> Path:
        return self.jd_root_path or self.base_path


@dataclass(frozen=True)
class ResolvedDestination:
    """Result of resolving a folder id to a sandboxed directory."""
    base_path: Path
    folder: FolderInfo
    destination_dir: Path
    drive_id: Optional[str] = None


@dataclass(frozen=True)
class MoveRequest:
    """A request to move one file into a JD folder."""
    source_path: Path
    target_folder_id: str
    conflict_strategy: ConflictStrategy = ConflictStrategy.RENAME
    drive_id: Optional[str] = None

    def __post_init__(self):
        # Accept plain strings from callers and the CLI
        object.__setattr__(self, "source_path", Path(self.source_path))
        if not isinstance(self.conflict_strategy, ConflictStrategy):
            try:
                object.__setattr__(self, "conflict_strategy",
                                   ConflictStrategy(self.conflict_strategy))
            except ValueError:
                raise ValidationError(
                    f"Unknown conflict strategy: {self.conflict_strategy}", "conflict_strategy"
                )


@dataclass(frozen=True)
class MoveResult:
    """Outcome of a single move request."""
    status: MoveStatus
    source_path: Path
    destination_path: Optional[Path] = None
    reason: Optional[str] = None
    record_id: Optional[int] = None
    folder_number: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def filename(self) -> Optional[str]:
        return self.destination_path.name if self.destination_path else None

    @classmethod
    def failed(cls, request: MoveRequest, error: Exception) -> "MoveResult":
        return cls(
            status=MoveStatus.FAILED,
            source_path=request.source_path,
            reason=str(error),
            folder_number=request.target_folder_id,
            error=error,
        )


@dataclass(frozen=True)
class OrganizedFileRecord:
    """Ledger entry for a file the organizer moved."""
    id: int
    original_path: Path
    current_path: Path
    folder_number: Optional[str]
    status: RecordStatus
    file_size: Optional[int] = None
    drive_id: Optional[str] = None
    organized_at: Optional[str] = None

    @property
    def filename(self) -> str:
        return self.current_path.name


@dataclass(frozen=True)
class ProgressInfo:
    """Progress event emitted by batch operations."""
    current: int
    total: int
    current_file: Optional[str] = None

    @property
    def percent(self) -> int:
        if self.total == 0:
            return 100
        return round(self.current * 100 / self.total)


@dataclass
class BatchMoveResults:
    """Summary of a batch move."""
    total: int
    success: int = 0
    failed: int = 0
    skipped: int = 0
    cancelled: bool = False
    operations: List[MoveResult] = field(default_factory=list)


@dataclass(frozen=True)
class RollbackResult:
    """Outcome of reversing one ledger record."""
    record_id: int
    original_path: Path
    from_path: Path


@dataclass(frozen=True)
class RollbackItem:
    """Per-record entry in a batch rollback."""
    record_id: int
    result: Optional[RollbackResult] = None
    error: Optional[Exception] = None

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class BatchRollbackResults:
    """Summary of a batch rollback."""
    total: int
    success: int = 0
    failed: int = 0
    cancelled: bool = False
    operations: List[RollbackItem] = field(default_factory=list)


@dataclass(frozen=True)
class PreviewResult:
    """Dry-run view of a move request."""
    request: MoveRequest
    source_exists: bool = False
    destination_path: Optional[Path] = None
    would_conflict: bool = False
    folder: Optional[FolderInfo] = None
    error: Optional[str] = None
