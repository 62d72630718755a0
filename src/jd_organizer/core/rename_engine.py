"""
Pattern-based batch renaming.

Names are computed by a pure function, previewed with conflict detection,
executed one file at a time and recorded in an undo log so a whole batch
can be reversed later.
"""

import asyncio
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from ..exceptions import ConflictError, NotFoundError, OrganizerError
from ..infrastructure.adapters.filesystem_adapter import FilesystemAdapter
from ..infrastructure.repositories.undo_log_repository import UndoLogRepository
from ..models.operations import ProgressInfo
from ..models.rename import (
    BatchRenameResult,
    CaseType,
    ConflictKind,
    FileEntry,
    NumberPosition,
    RenameError,
    RenameOptions,
    RenamePreviewItem,
    UndoLog,
    UndoLogEntry,
    UndoResult,
)
from ..utils.filenames import get_base_name, get_extension, sanitize_filename, sanitize_text
from ..utils.security import SecurityUtils
from .cancellation import CancellationToken

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressInfo], None]

_WORD_START = re.compile(r'\b\w', re.ASCII)


def transform_case(text: str, case_type: Optional[CaseType]) -> str:
    """Apply a case transformation; unknown or missing case leaves text as is."""
    if case_type is CaseType.LOWERCASE:
        return text.lower()
    if case_type is CaseType.UPPERCASE:
        return text.upper()
    if case_type is CaseType.TITLECASE:
        return _WORD_START.sub(lambda m: m.group().upper(), text)
    if case_type is CaseType.SENTENCECASE:
        return text[:1].upper() + text[1:].lower()
    return text


def _coerce_options(options: Union[RenameOptions, Dict[str, Any]]) -> RenameOptions:
    if isinstance(options, RenameOptions):
        return options
    return RenameOptions.from_dict(options)


def generate_new_name(original_name: str,
                      options: Union[RenameOptions, Dict[str, Any]],
                      index: int = 0) -> str:
    """
    Compute the new name for one file.

    Transformations apply to the base name in a fixed order: find/replace,
    case, prefix, suffix, sequential number. The extension only follows a
    lowercase or uppercase rule. The result is sanitized.

    Args:
        original_name: Current filename
        options: Rename pattern
        index: Position of the file in its batch, added to the start number

    Returns:
        The sanitized new filename
    """
    options = _coerce_options(options)
    name = get_base_name(original_name)
    ext = get_extension(original_name)

    if options.find_replace and options.find:
        count = -1 if options.replace_all else 1
        name = name.replace(options.find, options.replace or '', count)

    if options.change_case and options.case_type:
        name = transform_case(name, options.case_type)

    if options.add_prefix and options.prefix:
        name = sanitize_text(options.prefix) + name

    if options.add_suffix and options.suffix:
        name = name + sanitize_text(options.suffix)

    if options.add_number:
        number = str(options.start_number + index).zfill(options.digits)
        if options.number_position is NumberPosition.PREFIX:
            name = f"{number}_{name}"
        else:
            name = f"{name}_{number}"

    new_filename = name
    if ext:
        if options.change_case and options.case_type in (CaseType.LOWERCASE, CaseType.UPPERCASE):
            ext = transform_case(ext, options.case_type)
        new_filename = f"{name}.{ext}"

    return sanitize_filename(new_filename)


def generate_preview(files: Sequence[FileEntry],
                     options: Union[RenameOptions, Dict[str, Any]],
                     fs: Optional[FilesystemAdapter] = None) -> List[RenamePreviewItem]:
    """
    Preview a rename batch.

    A name that collides case-insensitively with an earlier item is a
    ``duplicate``; a name already taken on disk by another file is
    ``exists``. The first occurrence of a duplicated name is not flagged.
    """
    options = _coerce_options(options)
    fs = fs or FilesystemAdapter()
    seen = set()
    preview = []

    for index, file in enumerate(files):
        original_path = Path(file.path)
        new_name = generate_new_name(file.name, options, index)
        new_path = original_path.parent / new_name
        will_change = new_name != file.name

        conflict = None
        key = new_name.lower()
        if key in seen:
            conflict = ConflictKind.DUPLICATE
        seen.add(key)

        if (conflict is None and will_change and fs.exists(new_path)
                and not fs.same_file(original_path, new_path)):
            conflict = ConflictKind.EXISTS

        preview.append(RenamePreviewItem(
            original=file.name,
            original_path=original_path,
            new_name=new_name,
            new_path=new_path,
            will_change=will_change,
            conflict=conflict,
        ))

    return preview


def read_directory_files(directory: Path,
                         fs: Optional[FilesystemAdapter] = None) -> List[FileEntry]:
    """Regular files directly inside directory, sorted by name."""
    fs = fs or FilesystemAdapter()
    try:
        paths = fs.list_files(Path(directory))
    except OSError as e:
        logger.warning(f"Cannot read directory {directory}: {e}")
        return []

    entries = []
    for path in paths:
        try:
            size = fs.size(path)
        except OSError:
            size = 0
        entries.append(FileEntry(name=path.name, path=path, size=size))

    return sorted(entries, key=lambda entry: (entry.name.casefold(), entry.name))


class BatchRenamer:
    """Executes and undoes rename batches, keeping undo logs in a repository."""

    def __init__(self, undo_logs: UndoLogRepository, fs: Optional[FilesystemAdapter] = None):
        self.undo_logs = undo_logs
        self.fs = fs or FilesystemAdapter()
        self.executor = ThreadPoolExecutor(max_workers=1)
        self._lock = asyncio.Lock()

    def _rename_one(self, item: RenamePreviewItem) -> UndoLogEntry:
        source = SecurityUtils.validate_source_path(item.original_path)
        destination = source.parent / Path(item.new_path).name

        if not self.fs.exists(source):
            raise NotFoundError("File not found")

        # The preview may be stale; never replace a file that appeared since
        if self.fs.exists(destination) and not self.fs.same_file(source, destination):
            raise ConflictError(f"Destination already exists: {destination.name}")

        self.fs.rename(source, destination)
        logger.debug(f"Renamed {source.name} -> {destination.name}")
        return UndoLogEntry(
            original_path=source,
            renamed_path=destination,
            original_name=item.original,
            new_name=item.new_name,
        )

    async def execute_batch_rename(self, preview: Sequence[RenamePreviewItem],
                                   on_progress: Optional[ProgressCallback] = None,
                                   cancel_token: Optional[CancellationToken] = None) -> BatchRenameResult:
        """
        Rename every changed, conflict-free item of a preview.

        Per-file failures are collected, not raised. An undo log is stored
        only when at least one rename succeeded.
        """
        to_rename = [item for item in preview if item.actionable]
        result = BatchRenameResult(total=len(to_rename))
        undo_entries: List[UndoLogEntry] = []
        loop = asyncio.get_running_loop()

        async with self._lock:
            for i, item in enumerate(to_rename):
                if cancel_token and cancel_token.cancelled:
                    result.cancelled = True
                    logger.info(f"Batch rename cancelled after {i} of {len(to_rename)}")
                    break

                if on_progress:
                    on_progress(ProgressInfo(current=i + 1, total=len(to_rename),
                                             current_file=item.original))

                try:
                    entry = await loop.run_in_executor(self.executor, self._rename_one, item)
                except (OrganizerError, OSError) as e:
                    logger.warning(f"Failed to rename {item.original}: {e}")
                    result.errors.append(RenameError(file=item.original, error=str(e) or "Failed to rename"))
                    continue

                undo_entries.append(entry)
                result.count += 1

            if undo_entries:
                try:
                    result.undo_id = await loop.run_in_executor(
                        self.executor, self.undo_logs.save, undo_entries
                    )
                except (OrganizerError, OSError) as e:
                    logger.error(f"Renamed {result.count} files but could not save undo log: {e}")
                    result.errors.append(RenameError(
                        file="(undo log)", error=f"Undo log could not be saved: {e}"
                    ))

        logger.info(f"Renamed {result.count} of {result.total} files (undo id: {result.undo_id})")
        return result

    def _undo_one(self, entry: UndoLogEntry) -> Optional[RenameError]:
        if not self.fs.exists(entry.renamed_path):
            return RenameError(file=entry.new_name, error="File not found (may have been moved)")
        if self.fs.exists(entry.original_path):
            return RenameError(file=entry.original_name, error="Original location occupied")

        try:
            self.fs.rename(entry.renamed_path, entry.original_path)
        except OSError as e:
            return RenameError(file=entry.new_name, error=str(e) or "Failed to undo")

        logger.debug(f"Restored {entry.new_name} -> {entry.original_name}")
        return None

    async def undo_batch_rename(self, undo_id: str,
                                on_progress: Optional[ProgressCallback] = None,
                                cancel_token: Optional[CancellationToken] = None) -> UndoResult:
        """
        Reverse a stored rename batch.

        The undo log is removed only when every entry was restored; after
        any failure or cancellation it stays available for another attempt.

        Raises:
            NotFoundError: If no undo log has this id
        """
        loop = asyncio.get_running_loop()

        async with self._lock:
            undo_log = await loop.run_in_executor(self.executor, self.undo_logs.get, undo_id)
            if undo_log is None:
                raise NotFoundError(f"Undo log not found: {undo_id}")

            # Last rename first, so chained names unwind cleanly
            entries = list(reversed(undo_log.entries))
            result = UndoResult(total=len(entries))

            for i, entry in enumerate(entries):
                if cancel_token and cancel_token.cancelled:
                    result.cancelled = True
                    logger.info(f"Undo cancelled after {i} of {len(entries)}")
                    break

                if on_progress:
                    on_progress(ProgressInfo(current=i + 1, total=len(entries),
                                             current_file=entry.new_name))

                error = await loop.run_in_executor(self.executor, self._undo_one, entry)
                if error:
                    logger.warning(f"Could not undo {error.file}: {error.error}")
                    result.errors.append(error)
                else:
                    result.count += 1

            if not result.errors and not result.cancelled:
                await loop.run_in_executor(self.executor, self.undo_logs.remove, undo_id)

        logger.info(f"Undid {result.count} of {result.total} renames from {undo_id}")
        return result

    def get_undo_log(self, undo_id: str) -> Optional[UndoLog]:
        return self.undo_logs.get(undo_id)

    def get_most_recent_undo_log(self) -> Optional[UndoLog]:
        return self.undo_logs.get_most_recent()

    def close(self) -> None:
        self.executor.shutdown(wait=True)
