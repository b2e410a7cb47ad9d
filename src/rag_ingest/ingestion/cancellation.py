"""Cooperative cancellation shared by the orchestrator and the writer."""

from __future__ import annotations

import threading

from rag_ingest.ingestion.errors import IngestionCancelledError


class CancellationToken:
    """Thread-safe cancellation flag with an interruptible wait.

    The caller keeps a reference and calls :meth:`cancel`; the ingestion
    thread polls :attr:`cancelled` between batches and sleeps through
    :meth:`wait` between retries, which returns early on cancellation.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        """Block for up to *timeout* seconds.

        Returns ``True`` if cancellation was requested before or during
        the wait, ``False`` if the full delay elapsed.
        """
        return self._event.wait(timeout)

    def raise_if_cancelled(self, batch_index: int) -> None:
        if self.cancelled:
            raise IngestionCancelledError(batch_index)
