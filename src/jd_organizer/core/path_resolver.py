"""
Destination path resolution for JD folders.

Turns a folder number such as ``11.01`` into
``<base>/10-19 Area/11 Category/11.01 Folder`` and guarantees the result
stays inside the drive's base directory.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Tuple

from ..domain.repositories import DriveRepository, FolderRepository
from ..exceptions import ConfigurationError, NotFoundError, SecurityError, ValidationError
from ..infrastructure.adapters.filesystem_adapter import FilesystemAdapter
from ..models.operations import DriveInfo, FolderInfo, ResolvedDestination
from ..utils.filenames import sanitize_filename
from ..utils.security import SecurityUtils

logger = logging.getLogger(__name__)


def area_range(category_number: int) -> Tuple[int, int]:
    """Area bounds for a category, e.g. 11 -> (10, 19)."""
    start = category_number // 10 * 10
    return start, start + 9


def build_folder_segments(folder: FolderInfo) -> Tuple[str, str, str]:
    """Area, category and folder directory names for a JD folder.

    Raises:
        ValidationError: If the category part of the folder number is not numeric
    """
    category_part = folder.number.split('.')[0].strip()
    if not category_part.isdigit():
        raise ValidationError(f"Invalid folder number: {folder.number!r}", "folder_number")

    start, end = area_range(int(category_part))
    area_name = SecurityUtils.sanitize_folder_name(folder.area_name, "Area")
    category_name = SecurityUtils.sanitize_folder_name(folder.category_name, "Category")
    folder_name = SecurityUtils.sanitize_folder_name(folder.name, "Folder")
    number = SecurityUtils.sanitize_folder_name(folder.number, "00.00")

    return (
        f"{start:02d}-{end:02d} {area_name}",
        f"{category_part.zfill(2)} {category_name}",
        f"{number} {folder_name}",
    )


class PathResolver:
    """Resolves folder numbers to sandboxed destination directories."""

    def __init__(self, folders: FolderRepository, drives: DriveRepository,
                 fs: Optional[FilesystemAdapter] = None):
        self.folders = folders
        self.drives = drives
        self.fs = fs or FilesystemAdapter()

    def get_drive(self, drive_id: Optional[str] = None) -> DriveInfo:
        """Explicit drive by id, else the default drive."""
        if drive_id:
            drive = self.drives.get_drive(drive_id)
            if drive is None:
                raise NotFoundError(f"Drive not found: {drive_id}")
            return drive

        drive = self.drives.get_default_drive()
        if drive is None:
            raise ConfigurationError("No drive available: configure a default drive")
        return drive

    def resolve(self, folder_number: str, drive_id: Optional[str] = None,
                create: bool = True) -> ResolvedDestination:
        """
        Resolve a folder number to its destination directory.

        Args:
            folder_number: JD folder number, e.g. ``"11.01"``
            drive_id: Drive to resolve against; default drive when omitted
            create: Create the directory tree; ``False`` for dry runs

        Raises:
            NotFoundError: Unknown folder or drive
            ConfigurationError: No drive id given and no default drive
            ValidationError: Malformed folder number
            SecurityError: Destination escapes the base directory
        """
        folder = self.folders.resolve_folder(folder_number)
        if folder is None:
            raise NotFoundError(f"Folder not found: {folder_number}")

        drive = self.get_drive(drive_id)
        base_path = Path(os.path.abspath(drive.root))
        destination_dir = base_path.joinpath(*build_folder_segments(folder))

        # Lexical check before anything is created on disk
        if not Path(os.path.abspath(destination_dir)).is_relative_to(base_path):
            raise SecurityError(f"destination escapes base directory: {destination_dir}")

        # Existing symlinks in the tree must not send make_dirs outside the base
        SecurityUtils.ensure_within_base(destination_dir, base_path)

        if create:
            self.fs.make_dirs(destination_dir)
            SecurityUtils.ensure_within_base(destination_dir, base_path)

        logger.debug(f"Resolved {folder_number} -> {destination_dir}")
        return ResolvedDestination(
            base_path=base_path,
            folder=folder,
            destination_dir=destination_dir,
            drive_id=drive.id,
        )

    def build_destination_path(self, folder_number: str, filename: str,
                               drive_id: Optional[str] = None,
                               create: bool = True) -> Tuple[ResolvedDestination, Path]:
        """Resolve the folder and the full, sanitized file path inside it."""
        resolved = self.resolve(folder_number, drive_id, create=create)
        full_path = resolved.destination_dir / sanitize_filename(filename)
        SecurityUtils.ensure_within_base(full_path, resolved.base_path)
        return resolved, full_path
