"""Data models for pattern-based batch renaming."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..exceptions import ValidationError


class CaseType(Enum):
    """Case transformation applied to the base name."""
    LOWERCASE = "lowercase"
    UPPERCASE = "uppercase"
    TITLECASE = "titlecase"
    SENTENCECASE = "sentencecase"


class NumberPosition(Enum):
    """Where the sequential number goes."""
    PREFIX = "prefix"
    SUFFIX = "suffix"


class ConflictKind(Enum):
    """Why a preview item cannot be renamed."""
    DUPLICATE = "duplicate"
    EXISTS = "exists"


MAX_NUMBER_DIGITS = 10


@dataclass(frozen=True)
class RenameOptions:
    """Validated rename pattern.

    Each transformation is switched on by its flag; the matching value
    fields are ignored while the flag is off.
    """
    # Find & replace
    find_replace: bool = False
    find: str = ""
    replace: str = ""
    replace_all: bool = False

    # Case change
    change_case: bool = False
    case_type: Optional[CaseType] = None

    # Prefix / suffix
    add_prefix: bool = False
    prefix: str = ""
    add_suffix: bool = False
    suffix: str = ""

    # Sequential numbering
    add_number: bool = False
    start_number: int = 1
    digits: int = 3
    number_position: NumberPosition = NumberPosition.SUFFIX

    def __post_init__(self):
        if self.case_type is not None and not isinstance(self.case_type, CaseType):
            try:
                object.__setattr__(self, "case_type", CaseType(self.case_type))
            except ValueError:
                raise ValidationError(f"Unknown case type: {self.case_type}", "case_type")

        if not isinstance(self.number_position, NumberPosition):
            try:
                object.__setattr__(self, "number_position", NumberPosition(self.number_position))
            except ValueError:
                raise ValidationError(
                    f"Unknown number position: {self.number_position}", "number_position"
                )

        if self.find_replace and not self.find:
            raise ValidationError("Find text is required for find & replace", "find")

        if self.change_case and self.case_type is None:
            raise ValidationError("A case type is required to change case", "case_type")

        try:
            start = int(self.start_number)
            digits = int(self.digits)
        except (TypeError, ValueError):
            raise ValidationError("Start number and digits must be integers", "start_number")

        if start < 0:
            raise ValidationError("Start number cannot be negative", "start_number")
        if not 1 <= digits <= MAX_NUMBER_DIGITS:
            raise ValidationError(
                f"Digits must be between 1 and {MAX_NUMBER_DIGITS}", "digits"
            )

        object.__setattr__(self, "start_number", start)
        object.__setattr__(self, "digits", digits)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RenameOptions":
        """Build options from a plain mapping, rejecting unknown keys."""
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ValidationError(
                f"Unknown rename options: {', '.join(sorted(unknown))}", "options"
            )
        return cls(**data)


@dataclass(frozen=True)
class FileEntry:
    """A file offered for renaming."""
    name: str
    path: Path
    size: int = 0


@dataclass(frozen=True)
class RenamePreviewItem:
    """What a rename would do to one file."""
    original: str
    original_path: Path
    new_name: str
    new_path: Path
    will_change: bool
    conflict: Optional[ConflictKind] = None

    @property
    def actionable(self) -> bool:
        return self.will_change and self.conflict is None


@dataclass(frozen=True)
class UndoLogEntry:
    """One completed rename, enough to reverse it exactly."""
    original_path: Path
    renamed_path: Path
    original_name: str
    new_name: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "original_path": str(self.original_path),
            "renamed_path": str(self.renamed_path),
            "original_name": self.original_name,
            "new_name": self.new_name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> "UndoLogEntry":
        return cls(
            original_path=Path(data["original_path"]),
            renamed_path=Path(data["renamed_path"]),
            original_name=data["original_name"],
            new_name=data["new_name"],
        )


@dataclass(frozen=True)
class UndoLog:
    """A stored batch of renames."""
    undo_id: str
    timestamp: float
    entries: List[UndoLogEntry]


@dataclass(frozen=True)
class RenameError:
    """Per-file failure in a rename or undo batch."""
    file: str
    error: str


@dataclass
class BatchRenameResult:
    """Summary of an executed rename batch."""
    count: int = 0
    total: int = 0
    errors: List[RenameError] = field(default_factory=list)
    undo_id: Optional[str] = None
    cancelled: bool = False

    @property
    def success(self) -> bool:
        return not self.errors


@dataclass
class UndoResult:
    """Summary of an undo batch."""
    count: int = 0
    total: int = 0
    errors: List[RenameError] = field(default_factory=list)
    cancelled: bool = False

    @property
    def success(self) -> bool:
        return not self.errors
