"""Shared fixtures for the JD organizer tests."""

from pathlib import Path

import pytest

from jd_organizer.core.mover import FileMover
from jd_organizer.core.path_resolver import PathResolver
from jd_organizer.infrastructure.adapters.filesystem_adapter import FilesystemAdapter
from jd_organizer.infrastructure.repositories.memory_repository import (
    InMemoryDriveRepository,
    InMemoryFolderRepository,
    InMemoryKeyValueStore,
    InMemoryLedger,
)
from jd_organizer.infrastructure.repositories.undo_log_repository import UndoLogRepository
from jd_organizer.models.operations import DriveInfo, FolderInfo

DOCUMENTS = FolderInfo("11.01", "Documents", category_name="Administration", area_name="System")
INVOICES = FolderInfo("22.03", "Invoices", category_name="Finance", area_name="Business")

DOCUMENTS_DIR = Path("10-19 System") / "11 Administration" / "11.01 Documents"


@pytest.fixture
def base_dir(tmp_path):
    """JD root of the default drive."""
    path = tmp_path / "jd"
    path.mkdir()
    return path


@pytest.fixture
def inbox(tmp_path):
    """Directory files are moved out of."""
    path = tmp_path / "inbox"
    path.mkdir()
    return path


@pytest.fixture
def make_file():
    """Create a file with content and return its path."""
    def _make(directory: Path, name: str, content: str = "data") -> Path:
        path = directory / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path
    return _make


@pytest.fixture
def fs():
    return FilesystemAdapter()


@pytest.fixture
def folders():
    return InMemoryFolderRepository(DOCUMENTS, INVOICES)


@pytest.fixture
def drives(base_dir):
    return InMemoryDriveRepository(DriveInfo("local", base_dir, name="Local", is_default=True))


@pytest.fixture
def ledger():
    return InMemoryLedger()


@pytest.fixture
def resolver(folders, drives, fs):
    return PathResolver(folders, drives, fs)


@pytest.fixture
def mover(resolver, ledger, fs):
    return FileMover(resolver, ledger, fs)


@pytest.fixture
def documents_dir(base_dir):
    return base_dir / DOCUMENTS_DIR


@pytest.fixture
def undo_logs():
    return UndoLogRepository(InMemoryKeyValueStore())
