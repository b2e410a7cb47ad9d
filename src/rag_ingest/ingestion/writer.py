"""Batch writes with fixed-count, fixed-delay retry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from rag_ingest.ingestion.cancellation import CancellationToken
from rag_ingest.ingestion.errors import FatalWriteError, IngestionCancelledError

if TYPE_CHECKING:
    from rag_ingest.ingestion.models import Batch
    from rag_ingest.store.base import IndexStore

logger = logging.getLogger(__name__)


class RetryingWriter:
    """Submits batches to an :class:`IndexStore`, retrying failed writes.

    Parameters
    ----------
    store:
        Destination index store.
    max_retries:
        Total attempts per batch, the first one included.
    retry_delay:
        Seconds to wait between failed attempts.  The wait is interrupted
        as soon as the call's :class:`CancellationToken` is cancelled.
    """

    def __init__(self, store: IndexStore, *, max_retries: int = 3, retry_delay: float = 1.0) -> None:
        if max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {max_retries}")
        if retry_delay < 0:
            raise ValueError(f"retry_delay must be >= 0, got {retry_delay}")
        self._store = store
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    def write_batch(self, batch: Batch, cancel: CancellationToken | None = None) -> None:
        """Write *batch*, retrying up to ``max_retries`` times.

        Raises
        ------
        FatalWriteError
            After ``max_retries`` consecutive failures.  Wraps the last error.
        IngestionCancelledError
            If cancellation is observed before the first attempt or while
            waiting to retry.
        """
        cancel = cancel or CancellationToken()
        cancel.raise_if_cancelled(batch.position)

        def _sleep(seconds: float) -> None:
            if cancel.wait(seconds):
                logger.info("Retry of batch %d interrupted by cancellation", batch.position)
                raise IngestionCancelledError(batch.position)

        def _log_failure(retry_state: RetryCallState) -> None:
            logger.warning(
                "Attempt %d/%d failed to add batch %d to index store: %s",
                retry_state.attempt_number,
                self.max_retries,
                batch.position,
                retry_state.outcome.exception(),
            )

        def _log_wait(retry_state: RetryCallState) -> None:
            logger.info("Waiting %.2fs before retrying batch %d", self.retry_delay, batch.position)

        retrying = Retrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_fixed(self.retry_delay),
            retry=retry_if_exception_type(Exception),
            sleep=_sleep,
            after=_log_failure,
            before_sleep=_log_wait,
        )
        try:
            for attempt in retrying:
                with attempt:
                    self._store.add(batch.chunks)
                    if attempt.retry_state.attempt_number > 1:
                        logger.info(
                            "Batch %d written after %d failed attempt(s)",
                            batch.position,
                            attempt.retry_state.attempt_number - 1,
                        )
        except RetryError as exc:
            last = exc.last_attempt
            cause = last.exception()
            logger.error("Giving up on batch %d after %d attempts", batch.position, last.attempt_number)
            raise FatalWriteError(batch.position, last.attempt_number, cause) from cause
