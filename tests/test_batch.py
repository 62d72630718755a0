"""Tests for batch moves."""

from unittest.mock import MagicMock

import pytest

from jd_organizer.core.batch import BatchCoordinator
from jd_organizer.core.cancellation import CancellationToken
from jd_organizer.exceptions import NotFoundError
from jd_organizer.models.operations import ConflictStrategy, MoveRequest, MoveStatus


@pytest.fixture
def coordinator(mover):
    coordinator = BatchCoordinator(mover)
    yield coordinator
    coordinator.close()


class TestBatchMove:
    """Test BatchCoordinator.batch_move."""

    @pytest.mark.asyncio
    async def test_counts_by_outcome(self, coordinator, inbox, documents_dir, make_file):
        moved = make_file(inbox, "moved.txt")
        skipped = make_file(inbox, "skipped.txt")
        make_file(documents_dir, "skipped.txt")

        results = await coordinator.batch_move([
            MoveRequest(moved, "11.01"),
            MoveRequest(skipped, "11.01", ConflictStrategy.SKIP),
            MoveRequest(inbox / "missing.txt", "11.01"),
        ])

        assert (results.total, results.success, results.skipped, results.failed) == (3, 1, 1, 1)
        assert [op.status for op in results.operations] == [
            MoveStatus.SUCCESS, MoveStatus.SKIPPED, MoveStatus.FAILED
        ]
        assert isinstance(results.operations[2].error, NotFoundError)
        assert results.operations[2].reason
        assert not results.cancelled

    @pytest.mark.asyncio
    async def test_continues_after_failure_by_default(self, coordinator, inbox, make_file):
        last = make_file(inbox, "last.txt")

        results = await coordinator.batch_move([
            MoveRequest(inbox / "missing.txt", "11.01"),
            MoveRequest(last, "11.01"),
        ])

        assert (results.success, results.failed) == (1, 1)
        assert not last.exists()

    @pytest.mark.asyncio
    async def test_stop_on_error_excludes_untouched(self, coordinator, inbox, make_file):
        first = make_file(inbox, "first.txt")
        untouched = make_file(inbox, "untouched.txt")

        results = await coordinator.batch_move([
            MoveRequest(first, "11.01"),
            MoveRequest(first, "99.99"),
            MoveRequest(untouched, "11.01"),
        ], stop_on_error=True)

        assert results.total == 3
        assert len(results.operations) == 2
        assert (results.success, results.failed) == (1, 1)
        assert untouched.exists()

    @pytest.mark.asyncio
    async def test_same_name_from_two_sources_gets_unique_name(self, coordinator, tmp_path,
                                                               documents_dir, make_file):
        first = make_file(tmp_path / "one", "scan.pdf", "1")
        second = make_file(tmp_path / "two", "scan.pdf", "2")

        results = await coordinator.batch_move([
            MoveRequest(first, "11.01"),
            MoveRequest(second, "11.01"),
        ])

        assert results.success == 2
        assert (documents_dir / "scan.pdf").read_text() == "1"
        assert (documents_dir / "scan_1.pdf").read_text() == "2"

    @pytest.mark.asyncio
    async def test_callbacks(self, coordinator, inbox, make_file):
        files = [make_file(inbox, f"{i}.txt") for i in range(4)]
        progress, completed = [], []

        await coordinator.batch_move(
            [MoveRequest(f, "11.01") for f in files],
            on_progress=progress.append,
            on_file_complete=completed.append,
        )

        assert [p.current for p in progress] == [1, 2, 3, 4]
        assert [p.percent for p in progress] == [25, 50, 75, 100]
        assert progress[0].current_file == str(files[0])
        assert [r.source_path for r in completed] == files

    @pytest.mark.asyncio
    async def test_cancellation(self, coordinator, inbox, make_file):
        files = [make_file(inbox, f"{i}.txt") for i in range(3)]
        token = CancellationToken()

        results = await coordinator.batch_move(
            [MoveRequest(f, "11.01") for f in files],
            on_file_complete=lambda result: token.cancel(),
            cancel_token=token,
        )

        assert results.cancelled
        assert len(results.operations) == 1
        assert files[1].exists() and files[2].exists()

    @pytest.mark.asyncio
    async def test_empty_batch(self, coordinator):
        results = await coordinator.batch_move([])
        assert (results.total, results.success, results.failed, results.operations) == (0, 0, 0, [])

    @pytest.mark.asyncio
    async def test_unexpected_error_is_collected(self, coordinator, ledger, inbox, make_file):
        ledger.record_move = MagicMock(side_effect=RuntimeError("disk I/O error"))
        files = [make_file(inbox, "a.txt"), make_file(inbox, "b.txt")]

        results = await coordinator.batch_move([MoveRequest(f, "11.01") for f in files])

        assert results.failed == 2
        assert "disk I/O error" in results.operations[0].reason
