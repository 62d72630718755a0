"""Collision-free filenames via bounded ``_N`` suffixes."""

import logging
from pathlib import Path
from typing import Optional

from ..exceptions import ExhaustedError
from ..infrastructure.adapters.filesystem_adapter import FilesystemAdapter
from ..utils.filenames import MAX_FILENAME_LENGTH, sanitize_filename, split_name

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 100


class UniqueNameGenerator:
    """Finds a free name in a directory: ``a.txt``, ``a_1.txt``, ``a_2.txt`` ..."""

    def __init__(self, fs: Optional[FilesystemAdapter] = None,
                 max_attempts: int = DEFAULT_MAX_ATTEMPTS):
        self.fs = fs or FilesystemAdapter()
        self.max_attempts = max_attempts

    def generate(self, directory: Path, filename: str) -> str:
        """
        Return a filename that does not exist in directory.

        Raises:
            ExhaustedError: If every suffix up to max_attempts is taken
        """
        name = sanitize_filename(filename)
        if not self.fs.exists(Path(directory) / name):
            return name

        base, ext = split_name(name)
        for counter in range(1, self.max_attempts + 1):
            suffix = f"_{counter}{ext}"
            # The counter and extension survive; the base gives way at the length limit
            candidate = base[:MAX_FILENAME_LENGTH - len(suffix)] + suffix
            if not self.fs.exists(Path(directory) / candidate):
                logger.debug(f"Renamed {name} -> {candidate} to avoid a collision")
                return candidate

        raise ExhaustedError(f"too many files with similar names: {name}")
