"""Property-based tests for sanitizing, path containment and renaming.

Uses Hypothesis to generate hostile names and verify the invariants that
must hold for any input.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import Mock

from hypothesis import HealthCheck, given, settings, strategies as st

from jd_organizer.core.path_resolver import PathResolver
from jd_organizer.core.rename_engine import generate_new_name
from jd_organizer.core.unique_names import UniqueNameGenerator
from jd_organizer.infrastructure.repositories.memory_repository import (
    InMemoryDriveRepository,
    InMemoryFolderRepository,
)
from jd_organizer.models.operations import DriveInfo, FolderInfo
from jd_organizer.models.rename import RenameOptions
from jd_organizer.utils.filenames import (
    INVALID_FILENAME_CHARS,
    MAX_FILENAME_LENGTH,
    RESERVED_NAMES,
    get_base_name,
    sanitize_filename,
)

# Lone surrogates cannot be encoded as filesystem paths
names = st.text(alphabet=st.characters(blacklist_categories=("Cs",)), max_size=300)
segment_names = st.text(alphabet=st.characters(blacklist_categories=("Cs",)), max_size=60)


# ============================================================================
# Filename sanitizing
# ============================================================================

@given(names)
def test_sanitized_filename_is_safe(filename: str) -> None:
    """Sanitized names are non-empty, bounded and free of invalid characters."""
    result = sanitize_filename(filename)

    assert result
    assert len(result) <= MAX_FILENAME_LENGTH
    assert not INVALID_FILENAME_CHARS.search(result)
    assert result not in (".", "..")


@given(names)
def test_sanitized_filename_is_not_a_device_name(filename: str) -> None:
    """No sanitized name is a bare Windows device name."""
    assert get_base_name(sanitize_filename(filename)).upper() not in RESERVED_NAMES


@given(st.text(alphabet="abc.", min_size=1, max_size=20))
def test_dotfile_keeps_at_most_one_leading_dot(filename: str) -> None:
    """Leading dots collapse to a single dot or none."""
    assert not sanitize_filename(filename).startswith("..")


# ============================================================================
# Destination containment
# ============================================================================

@settings(suppress_health_check=[HealthCheck.function_scoped_fixture], max_examples=50)
@given(
    st.integers(min_value=0, max_value=99),
    segment_names,
    segment_names,
    segment_names,
)
def test_destination_always_inside_base(tmp_path: Path, category: int, folder_name: str,
                                        category_name: str, area_name: str) -> None:
    """Whatever the folder names, the destination is three levels below the base."""
    number = f"{category:02d}.01"
    folders = InMemoryFolderRepository(FolderInfo(number, folder_name, category_name, area_name))
    drives = InMemoryDriveRepository(DriveInfo("local", tmp_path, is_default=True))

    resolved = PathResolver(folders, drives).resolve(number, create=False)

    relative = resolved.destination_dir.relative_to(tmp_path)
    assert len(relative.parts) == 3
    assert ".." not in relative.parts
    assert relative.parts[2].startswith(number)


# ============================================================================
# Unique names
# ============================================================================

@given(st.sets(st.integers(min_value=1, max_value=30), max_size=30))
def test_unique_name_is_lowest_free_suffix(taken_suffixes: set) -> None:
    """The generated name is free and uses the smallest free counter."""
    taken = {"scan.pdf"} | {f"scan_{n}.pdf" for n in taken_suffixes}
    fs = Mock()
    fs.exists.side_effect = lambda path: path.name in taken

    result = UniqueNameGenerator(fs).generate(Path("/jd"), "scan.pdf")

    expected = min(n for n in range(1, 32) if n not in taken_suffixes)
    assert result == f"scan_{expected}.pdf"
    assert result not in taken


# ============================================================================
# Rename patterns
# ============================================================================

@given(names, st.integers(min_value=0, max_value=10_000))
def test_generated_name_is_deterministic_and_safe(filename: str, index: int) -> None:
    """Same input, same output, always a valid single filename."""
    options = RenameOptions(add_prefix=True, prefix="x/", add_number=True, digits=4)

    first = generate_new_name(filename, options, index)

    assert first == generate_new_name(filename, options, index)
    assert first
    assert "/" not in first
    assert len(first) <= MAX_FILENAME_LENGTH


@given(st.integers(min_value=0, max_value=1000), st.integers(min_value=1, max_value=10),
       st.integers(min_value=0, max_value=500))
def test_sequence_number_padding(start: int, digits: int, index: int) -> None:
    """The number is start + index, zero-padded to at least the requested width."""
    options = RenameOptions(add_number=True, start_number=start, digits=digits)

    result = generate_new_name("file.txt", options, index)

    number = result[len("file_"):-len(".txt")]
    assert int(number) == start + index
    assert len(number) == max(digits, len(str(start + index)))
