"""Sequential batch moves with progress reporting."""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional

from ..exceptions import FileOperationError
from ..models.operations import BatchMoveResults, MoveRequest, MoveResult, MoveStatus, ProgressInfo
from .cancellation import CancellationToken
from .mover import FileMover

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressInfo], None]
FileCompleteCallback = Callable[[MoveResult], None]


class BatchCoordinator:
    """
    Drives FileMover over a list of requests.

    Items are processed strictly one after another: unique-name generation
    reads the destination directory and then writes to it, so two moves
    into the same folder must never overlap.
    """

    def __init__(self, mover: FileMover):
        self.mover = mover
        self.executor = ThreadPoolExecutor(max_workers=1)
        self._lock = asyncio.Lock()

    def _move_one(self, request: MoveRequest) -> MoveResult:
        try:
            result = self.mover.move_file(request)
        except Exception as e:
            # Ledger or adapter failures outside the organizer error tree
            logger.exception(f"Unexpected error moving {request.source_path}")
            return MoveResult.failed(request, FileOperationError(str(e), "move", request.source_path, cause=e))

        if result.is_success():
            return result.value()
        return MoveResult.failed(request, result.error())

    async def batch_move(self, requests: List[MoveRequest],
                         on_progress: Optional[ProgressCallback] = None,
                         on_file_complete: Optional[FileCompleteCallback] = None,
                         stop_on_error: bool = False,
                         cancel_token: Optional[CancellationToken] = None) -> BatchMoveResults:
        """
        Move files in order.

        Args:
            requests: Move requests, processed in order
            on_progress: Called before each file with its 1-based position
            on_file_complete: Called with each file's MoveResult
            stop_on_error: Halt at the first failed move
            cancel_token: Checked between files

        Returns:
            Counts plus the MoveResult of every processed request; requests
            never reached after a stop or cancel are left out
        """
        results = BatchMoveResults(total=len(requests))
        loop = asyncio.get_running_loop()

        async with self._lock:
            for i, request in enumerate(requests):
                if cancel_token and cancel_token.cancelled:
                    results.cancelled = True
                    logger.info(f"Batch move cancelled after {i} of {len(requests)}")
                    break

                if on_progress:
                    on_progress(ProgressInfo(
                        current=i + 1,
                        total=len(requests),
                        current_file=str(request.source_path),
                    ))

                move_result = await loop.run_in_executor(self.executor, self._move_one, request)
                results.operations.append(move_result)

                if move_result.status is MoveStatus.SUCCESS:
                    results.success += 1
                elif move_result.status is MoveStatus.SKIPPED:
                    results.skipped += 1
                else:
                    results.failed += 1

                if on_file_complete:
                    on_file_complete(move_result)

                if move_result.status is MoveStatus.FAILED and stop_on_error:
                    logger.warning(f"Stopping batch after failure on {request.source_path}")
                    break

        logger.info(
            f"Batch move: {results.success} moved, {results.skipped} skipped, "
            f"{results.failed} failed of {results.total}"
        )
        return results

    def close(self) -> None:
        self.executor.shutdown(wait=True)
