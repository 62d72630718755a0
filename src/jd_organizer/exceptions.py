"""Custom exceptions for the JD file organizer."""

from pathlib import Path
from typing import Optional, Union


class OrganizerError(Exception):
    """Base exception for organizer errors."""
    pass


class NotFoundError(OrganizerError):
    """Raised when a source file, folder, drive, ledger record or undo log is missing."""
    pass


class SecurityError(OrganizerError):
    """Raised when a constructed path escapes its base directory."""
    pass


class ConfigurationError(OrganizerError):
    """Raised when there's an error in configuration or no drive is available."""
    pass


class ExhaustedError(OrganizerError):
    """Raised when the unique-name retry bound is hit."""
    pass


class InvalidStateError(OrganizerError):
    """Raised when an operation is not allowed in the record's current state."""
    pass


class ConflictError(OrganizerError):
    """Raised when a target location is already occupied."""
    pass


class ValidationError(OrganizerError):
    """Raised when options or identifiers fail validation."""

    def __init__(self, message: str, field: str = "unknown"):
        super().__init__(message)
        self.field = field


class FileOperationError(OrganizerError):
    """Raised when an OS-level move, copy or delete fails."""

    def __init__(self, message: str, operation: str = "unknown",
                 path: Optional[Union[str, Path]] = None,
                 cause: Optional[BaseException] = None):
        super().__init__(message)
        self.operation = operation
        self.path = Path(path) if path is not None else None
        self.cause = cause
