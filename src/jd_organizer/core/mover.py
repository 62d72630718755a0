"""
File mover for JD folders.

Moves one file into its resolved folder, applying the conflict strategy,
falling back to copy-verify-delete across volumes, and recording every
completed move in the organized-file ledger.
"""

import logging
from pathlib import Path
from typing import List, Optional

from ..domain.repositories import OrganizedFileLedger
from ..domain.result import Result, failure, success
from ..exceptions import (
    FileOperationError,
    NotFoundError,
    OrganizerError,
    ValidationError,
)
from ..infrastructure.adapters.filesystem_adapter import FilesystemAdapter, is_cross_device_error
from ..models.operations import (
    ConflictStrategy,
    MoveRequest,
    MoveResult,
    MoveStatus,
    PreviewResult,
)
from ..utils.security import SecurityUtils
from .path_resolver import PathResolver
from .unique_names import UniqueNameGenerator

logger = logging.getLogger(__name__)


class FileMover:
    """Moves files into resolved JD folders."""

    def __init__(self,
                 resolver: PathResolver,
                 ledger: OrganizedFileLedger,
                 fs: Optional[FilesystemAdapter] = None,
                 unique_names: Optional[UniqueNameGenerator] = None,
                 verify_checksum: bool = False):
        self.resolver = resolver
        self.ledger = ledger
        self.fs = fs or FilesystemAdapter()
        self.unique_names = unique_names or UniqueNameGenerator(self.fs)
        self.verify_checksum = verify_checksum

    def transfer(self, source: Path, destination: Path) -> None:
        """
        Move source to destination.

        Tries an atomic rename first; when source and destination are on
        different volumes the file is copied, verified, and only then is
        the source deleted.

        Raises:
            FileOperationError: If the rename, copy, verification or delete fails
        """
        try:
            self.fs.rename(source, destination)
            return
        except OSError as e:
            if not is_cross_device_error(e):
                raise FileOperationError(
                    f"Failed to move file: {e}", "move", source, cause=e
                ) from e

        logger.debug(f"Cross-device move, copying {source} -> {destination}")
        self._copy_verify_delete(source, destination)

    def _copy_verify_delete(self, source: Path, destination: Path) -> None:
        # Copy into a sibling first so an existing destination survives failure
        try:
            staged = self.fs.temp_sibling(destination)
        except OSError as e:
            raise FileOperationError(
                f"Failed to copy file: {e}", "copy", source, cause=e
            ) from e

        try:
            self.fs.copy(source, staged)
        except OSError as e:
            self._discard_copy(staged)
            raise FileOperationError(
                f"Failed to copy file: {e}", "copy", source, cause=e
            ) from e

        try:
            verified = self._verify_copy(source, staged)
        except OSError as e:
            self._discard_copy(staged)
            raise FileOperationError(
                f"Failed to verify copy: {e}", "verify", destination, cause=e
            ) from e

        if not verified:
            self._discard_copy(staged)
            raise FileOperationError(
                f"Copy verification failed for {destination}", "verify", destination
            )

        try:
            self.fs.replace(staged, destination)
        except OSError as e:
            self._discard_copy(staged)
            raise FileOperationError(
                f"Failed to move copy into place: {e}", "copy", destination, cause=e
            ) from e

        try:
            self.fs.delete(source)
        except OSError as e:
            # Both copies remain; nothing is lost
            raise FileOperationError(
                f"Copied but failed to remove source: {e}", "delete", source, cause=e
            ) from e

    def _verify_copy(self, source: Path, destination: Path) -> bool:
        if self.fs.size(source) != self.fs.size(destination):
            return False
        if self.verify_checksum:
            return self.fs.checksum(source) == self.fs.checksum(destination)
        return True

    def _discard_copy(self, staged: Path) -> None:
        try:
            if self.fs.exists(staged):
                self.fs.delete(staged)
        except OSError as e:
            logger.warning(f"Could not remove partial copy {staged}: {e}")

    def _validate_source(self, source_path: Path) -> Path:
        source = SecurityUtils.validate_source_path(source_path)
        if not self.fs.exists(source):
            raise NotFoundError(f"Source file not found: {source}")
        if self.fs.is_dir(source):
            raise ValidationError(f"Source is a directory: {source}", "source_path")
        return source

    def move_file(self, request: MoveRequest) -> Result[MoveResult, OrganizerError]:
        """
        Move one file into its target folder.

        Returns:
            Success with a ``success`` or ``skipped`` MoveResult, or Failure
            carrying the error that stopped the move
        """
        try:
            return success(self._move(request))
        except OrganizerError as e:
            logger.warning(f"Failed to move {request.source_path}: {e}")
            return failure(e)

    def _move(self, request: MoveRequest) -> MoveResult:
        source = self._validate_source(request.source_path)
        resolved, destination = self.resolver.build_destination_path(
            request.target_folder_id, source.name, request.drive_id
        )
        folder_number = resolved.folder.number

        if self.fs.exists(destination):
            if self.fs.same_file(source, destination):
                return MoveResult(
                    status=MoveStatus.SKIPPED,
                    source_path=source,
                    destination_path=destination,
                    reason="File is already at destination",
                    folder_number=folder_number,
                )

            strategy = request.conflict_strategy
            if strategy is ConflictStrategy.SKIP:
                logger.info(f"Skipped {source.name}: already exists in {folder_number}")
                return MoveResult(
                    status=MoveStatus.SKIPPED,
                    source_path=source,
                    destination_path=destination,
                    reason="File already exists at destination",
                    folder_number=folder_number,
                )
            if strategy is ConflictStrategy.RENAME:
                unique_name = self.unique_names.generate(resolved.destination_dir, destination.name)
                destination = resolved.destination_dir / unique_name
                SecurityUtils.ensure_within_base(destination, resolved.base_path)
            # OVERWRITE keeps the destination and replaces the file

        try:
            file_size = self.fs.size(source)
        except OSError as e:
            raise FileOperationError(f"Cannot stat source: {e}", "stat", source, cause=e) from e

        self.transfer(source, destination)

        record_id = self.ledger.record_move(
            source, destination, folder_number,
            file_size=file_size, drive_id=resolved.drive_id,
        )
        logger.info(f"Moved {source} -> {destination}")

        return MoveResult(
            status=MoveStatus.SUCCESS,
            source_path=source,
            destination_path=destination,
            record_id=record_id,
            folder_number=folder_number,
        )

    def preview_operations(self, requests: List[MoveRequest]) -> List[PreviewResult]:
        """Dry run: where each request would land, without touching the filesystem."""
        previews = []
        for request in requests:
            try:
                source = SecurityUtils.validate_source_path(request.source_path)
                source_exists = self.fs.exists(source)
                resolved, destination = self.resolver.build_destination_path(
                    request.target_folder_id, source.name, request.drive_id, create=False
                )
                previews.append(PreviewResult(
                    request=request,
                    source_exists=source_exists,
                    destination_path=destination,
                    would_conflict=self.fs.exists(destination),
                    folder=resolved.folder,
                ))
            except OrganizerError as e:
                previews.append(PreviewResult(request=request, error=str(e)))
        return previews
