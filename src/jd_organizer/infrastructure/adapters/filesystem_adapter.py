"""
Filesystem Adapter - the filesystem primitives the engines consume.

Keeps OS-specific calls out of the move and rename logic and gives tests a
single seam to simulate failures such as cross-device renames.
"""

import errno
import hashlib
import os
import shutil
import tempfile
from pathlib import Path
from typing import List


class FilesystemAdapter:
    """
    Adapter for local filesystem operations.

    All methods are blocking; async callers run them on an executor.
    """

    def exists(self, path: Path) -> bool:
        return os.path.lexists(path)

    def is_dir(self, path: Path) -> bool:
        return Path(path).is_dir()

    def size(self, path: Path) -> int:
        return Path(path).stat().st_size

    def make_dirs(self, path: Path) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def rename(self, source: Path, destination: Path) -> None:
        """Atomic same-volume rename; replaces an existing destination."""
        os.replace(source, destination)

    def copy(self, source: Path, destination: Path) -> None:
        """Copy file contents and metadata."""
        shutil.copy2(source, destination)

    def temp_sibling(self, path: Path) -> Path:
        """Create an empty hidden file next to path, on the same volume."""
        path = Path(path)
        fd, name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".part", dir=path.parent)
        os.close(fd)
        return Path(name)

    def replace(self, source: Path, destination: Path) -> None:
        """Swap a finished file into place within one volume."""
        os.replace(source, destination)

    def delete(self, path: Path) -> None:
        Path(path).unlink()

    def same_file(self, first: Path, second: Path) -> bool:
        """True when both paths name the same inode (e.g. case-only renames)."""
        try:
            return os.path.samefile(first, second)
        except OSError:
            return False

    def checksum(self, path: Path) -> str:
        """Calculate SHA-256 checksum of a file."""
        h = hashlib.sha256()
        with open(path, 'rb') as f:
            for chunk in iter(lambda: f.read(65536), b''):
                h.update(chunk)
        return h.hexdigest()

    def list_files(self, directory: Path) -> List[Path]:
        """Regular files directly inside a directory."""
        return [entry for entry in Path(directory).iterdir() if entry.is_file()]


def is_cross_device_error(error: OSError) -> bool:
    """Whether a rename failed only because source and target are on different volumes."""
    return getattr(error, "errno", None) == errno.EXDEV
