"""Tests for rolling back recorded moves."""

import errno
from unittest.mock import MagicMock

import pytest

from jd_organizer.core.cancellation import CancellationToken
from jd_organizer.core.mover import FileMover
from jd_organizer.core.rollback import RollbackService
from jd_organizer.exceptions import ConflictError, InvalidStateError, NotFoundError
from jd_organizer.infrastructure.adapters.filesystem_adapter import FilesystemAdapter
from jd_organizer.models.operations import MoveRequest, RecordStatus


@pytest.fixture
def service(ledger, mover):
    service = RollbackService(ledger, mover)
    yield service
    service.close()


@pytest.fixture
def moved(mover, inbox, make_file):
    """Move three files into 11.01 and return their ledger record ids."""
    record_ids = []
    for name in ("a.txt", "b.txt", "c.txt"):
        source = make_file(inbox, name, name)
        record_ids.append(mover.move_file(MoveRequest(source, "11.01")).value().record_id)
    return record_ids


class TestRollback:
    """Test RollbackService.rollback."""

    def test_rollback_restores_file(self, service, ledger, moved, inbox, documents_dir):
        result = service.rollback(moved[0])

        assert result.is_success()
        restored = result.value()
        assert restored.original_path == inbox / "a.txt"
        assert restored.from_path == documents_dir / "a.txt"
        assert (inbox / "a.txt").read_text() == "a.txt"
        assert not (documents_dir / "a.txt").exists()
        assert ledger.get_record(moved[0]).status is RecordStatus.UNDONE

    def test_unknown_record(self, service):
        assert isinstance(service.rollback(404).error(), NotFoundError)

    def test_second_rollback_is_invalid_state(self, service, moved):
        assert service.rollback(moved[0]).is_success()

        error = service.rollback(moved[0]).error()
        assert isinstance(error, InvalidStateError)
        assert "undone" in str(error)

    def test_file_missing_at_destination(self, service, ledger, moved, documents_dir):
        (documents_dir / "a.txt").unlink()

        assert isinstance(service.rollback(moved[0]).error(), NotFoundError)
        assert ledger.get_record(moved[0]).status is RecordStatus.MOVED

    def test_original_location_occupied(self, service, ledger, moved, inbox, documents_dir, make_file):
        make_file(inbox, "a.txt", "newcomer")

        error = service.rollback(moved[0]).error()

        assert isinstance(error, ConflictError)
        assert "original location already has a file" in str(error)
        assert (inbox / "a.txt").read_text() == "newcomer"
        assert (documents_dir / "a.txt").read_text() == "a.txt"
        assert ledger.get_record(moved[0]).status is RecordStatus.MOVED

    def test_original_directory_recreated(self, service, moved, inbox):
        inbox.rmdir()

        assert service.rollback(moved[0]).is_success()
        assert (inbox / "a.txt").exists()

    def test_cross_device_rollback(self, ledger, resolver, mover, moved, inbox):
        fs = MagicMock(wraps=FilesystemAdapter())
        fs.rename.side_effect = OSError(errno.EXDEV, "Invalid cross-device link")
        service = RollbackService(ledger, FileMover(resolver, ledger, fs))

        assert service.rollback(moved[1]).is_success()
        fs.copy.assert_called_once()
        fs.delete.assert_called_once()
        assert (inbox / "b.txt").read_text() == "b.txt"
        service.close()


class TestBatchRollback:
    """Test RollbackService.batch_rollback."""

    @pytest.mark.asyncio
    async def test_three_records_restored_then_invalid_state(self, service, ledger, moved, inbox):
        results = await service.batch_rollback(moved)

        assert (results.total, results.success, results.failed) == (3, 3, 0)
        assert all(item.success for item in results.operations)
        for record_id, name in zip(moved, ("a.txt", "b.txt", "c.txt")):
            assert ledger.get_record(record_id).status is RecordStatus.UNDONE
            assert (inbox / name).read_text() == name

        again = await service.batch_rollback(moved)

        assert (again.success, again.failed) == (0, 3)
        assert all(isinstance(item.error, InvalidStateError) for item in again.operations)

    @pytest.mark.asyncio
    async def test_continues_past_failures(self, service, moved, inbox, make_file):
        make_file(inbox, "b.txt", "blocker")

        results = await service.batch_rollback([moved[0], 999, moved[1], moved[2]])

        assert (results.total, results.success, results.failed) == (4, 2, 2)
        assert [item.success for item in results.operations] == [True, False, False, True]
        assert isinstance(results.operations[1].error, NotFoundError)
        assert isinstance(results.operations[2].error, ConflictError)

    @pytest.mark.asyncio
    async def test_progress_reported_per_record(self, service, moved):
        events = []

        await service.batch_rollback(moved, on_progress=events.append)

        assert [(e.current, e.total) for e in events] == [(1, 3), (2, 3), (3, 3)]
        assert events[-1].percent == 100

    @pytest.mark.asyncio
    async def test_cancellation_between_records(self, service, ledger, moved):
        token = CancellationToken()

        def cancel_after_first(info):
            if info.current == 1:
                token.cancel()

        results = await service.batch_rollback(moved, on_progress=cancel_after_first,
                                               cancel_token=token)

        assert results.cancelled
        assert len(results.operations) == 1
        assert ledger.get_record(moved[0]).status is RecordStatus.UNDONE
        assert ledger.get_record(moved[1]).status is RecordStatus.MOVED

    @pytest.mark.asyncio
    async def test_unexpected_ledger_error_is_collected(self, ledger, mover, moved):
        service = RollbackService(ledger, mover)
        ledger.update_record = MagicMock(side_effect=RuntimeError("database is locked"))

        results = await service.batch_rollback(moved[:2])

        assert results.failed == 2
        assert "database is locked" in str(results.operations[0].error)
        service.close()
