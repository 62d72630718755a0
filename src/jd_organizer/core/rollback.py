"""Reversal of recorded moves."""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional

from ..domain.repositories import OrganizedFileLedger
from ..domain.result import Result, failure, success
from ..exceptions import (
    ConflictError,
    FileOperationError,
    InvalidStateError,
    NotFoundError,
    OrganizerError,
)
from ..models.operations import (
    BatchRollbackResults,
    ProgressInfo,
    RecordStatus,
    RollbackItem,
    RollbackResult,
)
from .cancellation import CancellationToken
from .mover import FileMover

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressInfo], None]


class RollbackService:
    """Moves files back to where the ledger says they came from.

    A rollback never overwrites: an occupied original location is a
    ``ConflictError`` and the record stays ``moved``.
    """

    def __init__(self, ledger: OrganizedFileLedger, mover: FileMover):
        self.ledger = ledger
        self.mover = mover
        self.fs = mover.fs
        self.executor = ThreadPoolExecutor(max_workers=1)
        self._lock = asyncio.Lock()

    def rollback(self, record_id: int) -> Result[RollbackResult, OrganizerError]:
        """Reverse one recorded move and mark its record ``undone``."""
        try:
            return success(self._rollback(record_id))
        except OrganizerError as e:
            logger.warning(f"Rollback of record {record_id} failed: {e}")
            return failure(e)

    def _rollback_one(self, record_id: int) -> RollbackItem:
        try:
            result = self.rollback(record_id)
        except Exception as e:
            logger.exception(f"Unexpected error rolling back record {record_id}")
            return RollbackItem(record_id, error=FileOperationError(str(e), "rollback", cause=e))

        if result.is_success():
            return RollbackItem(record_id, result=result.value())
        return RollbackItem(record_id, error=result.error())

    def _rollback(self, record_id: int) -> RollbackResult:
        record = self.ledger.get_record(record_id)
        if record is None:
            raise NotFoundError(f"Record {record_id} not found")

        if record.status is not RecordStatus.MOVED:
            raise InvalidStateError(
                f"Cannot rollback record {record_id}: status is {record.status.value}"
            )

        if not self.fs.exists(record.current_path):
            raise NotFoundError(f"File no longer exists at destination: {record.current_path}")

        if self.fs.exists(record.original_path):
            raise ConflictError(f"original location already has a file: {record.original_path}")

        try:
            self.fs.make_dirs(record.original_path.parent)
        except OSError as e:
            raise FileOperationError(
                f"Cannot recreate {record.original_path.parent}: {e}",
                "mkdir", record.original_path.parent, cause=e
            ) from e

        self.mover.transfer(record.current_path, record.original_path)
        self.ledger.update_record(record_id, RecordStatus.UNDONE)

        logger.info(f"Rolled back {record.current_path} -> {record.original_path}")
        return RollbackResult(
            record_id=record_id,
            original_path=record.original_path,
            from_path=record.current_path,
        )

    async def batch_rollback(self, record_ids: List[int],
                             on_progress: Optional[ProgressCallback] = None,
                             cancel_token: Optional[CancellationToken] = None) -> BatchRollbackResults:
        """
        Roll back records one at a time, continuing past failures.

        Args:
            record_ids: Ledger record ids, processed in order
            on_progress: Called before each record
            cancel_token: Checked between records

        Returns:
            Totals plus one RollbackItem per processed record
        """
        results = BatchRollbackResults(total=len(record_ids))
        loop = asyncio.get_running_loop()

        async with self._lock:
            for i, record_id in enumerate(record_ids):
                if cancel_token and cancel_token.cancelled:
                    results.cancelled = True
                    logger.info(f"Batch rollback cancelled after {i} of {len(record_ids)}")
                    break

                if on_progress:
                    on_progress(ProgressInfo(current=i + 1, total=len(record_ids)))

                item = await loop.run_in_executor(self.executor, self._rollback_one, record_id)
                results.operations.append(item)
                if item.success:
                    results.success += 1
                else:
                    results.failed += 1

        logger.info(
            f"Batch rollback: {results.success} restored, {results.failed} failed "
            f"of {results.total}"
        )
        return results

    def close(self) -> None:
        self.executor.shutdown(wait=True)
