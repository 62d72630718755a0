"""
Adapters - Infrastructure Layer

Adapters that keep operating-system specifics out of the engines.
"""

from .filesystem_adapter import FilesystemAdapter, is_cross_device_error

__all__ = [
    "FilesystemAdapter",
    "is_cross_device_error",
]
