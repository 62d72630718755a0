"""JD File Organizer

Moves and renames files into a Johnny Decimal folder structure with
sandboxed destinations, conflict handling and reversible operations.
"""

__version__ = "0.1.0"

from .core.path_resolver import PathResolver
from .core.unique_names import UniqueNameGenerator
from .core.mover import FileMover
from .core.rollback import RollbackService
from .core.batch import BatchCoordinator
from .core.cancellation import CancellationToken
from .core.rename_engine import (
    BatchRenamer,
    generate_new_name,
    generate_preview,
    read_directory_files,
    transform_case
)

from .models.operations import (
    ConflictStrategy,
    MoveRequest,
    MoveResult,
    MoveStatus,
    RecordStatus
)
from .models.rename import RenameOptions, CaseType, NumberPosition, ConflictKind

__all__ = [
    # Move engine
    "PathResolver",
    "UniqueNameGenerator",
    "FileMover",
    "RollbackService",
    "BatchCoordinator",
    "CancellationToken",

    # Rename engine
    "BatchRenamer",
    "generate_new_name",
    "generate_preview",
    "read_directory_files",
    "transform_case",

    # Types and enums
    "ConflictStrategy",
    "MoveRequest",
    "MoveResult",
    "MoveStatus",
    "RecordStatus",
    "RenameOptions",
    "CaseType",
    "NumberPosition",
    "ConflictKind",
]
