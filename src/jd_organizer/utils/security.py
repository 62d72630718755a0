"""
Security utilities for file operations.

Provides path validation, folder-name sanitization and the sandbox
containment check that every constructed destination must pass.
"""

import os
import re
from pathlib import Path
from typing import Optional, Union

from ..exceptions import SecurityError, ValidationError

PathLike = Union[str, Path]

_SEPARATORS = re.compile(r'[/\\]')
_FOLDER_INVALID_CHARS = re.compile(r'[<>:"|?*]')


class SecurityUtils:
    """Security utilities for file operations."""

    @staticmethod
    def validate_source_path(path: Optional[PathLike]) -> Path:
        """
        Reject paths with suspicious patterns before touching the filesystem.

        Args:
            path: Path supplied by a caller

        Returns:
            The path as an absolute Path

        Raises:
            ValidationError: If path is empty, contains null bytes or parent references
        """
        if path is None or not str(path).strip():
            raise ValidationError("Path cannot be empty", "path")

        path_str = str(path).strip()

        if '\x00' in path_str:
            raise ValidationError("Path contains null bytes", "path")

        if '..' in Path(path_str).parts:
            raise ValidationError("Path contains parent directory references", "path")

        return Path(os.path.abspath(os.path.expanduser(path_str)))

    @staticmethod
    def sanitize_folder_name(name: Optional[str], fallback: str) -> str:
        """
        Make one folder-name segment safe to join under a base path.

        Separators and traversal sequences are replaced so the segment can
        never introduce another path level.
        """
        if not name:
            return fallback
        cleaned = _SEPARATORS.sub('_', name)
        cleaned = cleaned.replace('..', '_')
        cleaned = _FOLDER_INVALID_CHARS.sub('_', cleaned)
        cleaned = ''.join(ch for ch in cleaned if ord(ch) >= 32).strip()
        return cleaned or fallback

    @staticmethod
    def canonicalize(path: PathLike) -> Path:
        """Resolve symlinks and relative parts; works for paths that don't exist yet."""
        return Path(os.path.realpath(os.path.expanduser(str(path))))

    @staticmethod
    def is_within_base(path: PathLike, base_path: PathLike, strict: bool = True) -> bool:
        """
        Check that path lies inside base_path after canonicalization.

        Args:
            path: Candidate path
            base_path: Sandbox root
            strict: When True the base itself does not count as inside

        Returns:
            True if path is contained
        """
        resolved = SecurityUtils.canonicalize(path)
        base_resolved = SecurityUtils.canonicalize(base_path)

        if resolved == base_resolved:
            return not strict
        return resolved.is_relative_to(base_resolved)

    @staticmethod
    def ensure_within_base(path: PathLike, base_path: PathLike) -> Path:
        """
        Verify containment and return the canonical path.

        Raises:
            SecurityError: If the path escapes the base directory
        """
        if not SecurityUtils.is_within_base(path, base_path, strict=True):
            raise SecurityError(f"destination escapes base directory: {path}")
        return SecurityUtils.canonicalize(path)
