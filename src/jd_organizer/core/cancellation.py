"""Cooperative cancellation for batch operations."""

import threading


class CancellationToken:
    """Flag polled by batch loops between items.

    Safe to set from any thread, e.g. a signal handler or UI thread.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()
