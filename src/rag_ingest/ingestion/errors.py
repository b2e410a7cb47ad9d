"""Error taxonomy for the ingestion pipeline.

``IngestionError``
    Base class for everything raised out of :meth:`IngestionOrchestrator.ingest`.
``InvalidInputError``
    Caller contract violation (no document).  Never retried.
``TransientWriteError``
    Recoverable index-store failure.  Retried by the writer and never
    surfaced directly.
``FatalWriteError``
    A batch exhausted its retries.  Earlier batches stay committed.
``IngestionCancelledError``
    The caller gave up (disconnect, deadline) before ingestion finished.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rag_ingest.ingestion.models import IngestionResult


class IngestionError(Exception):
    """Base class for ingestion failures."""

    result: IngestionResult | None = None


class InvalidInputError(IngestionError, TypeError):
    """Raised when the document to ingest is missing."""


class TransientWriteError(IngestionError):
    """Raised by index stores for failures that are worth retrying."""


class FatalWriteError(IngestionError):
    """Raised when a batch could not be written after all attempts.

    Parameters
    ----------
    batch_index:
        Position of the failing batch in the batch sequence.
    attempts:
        Number of ``add`` calls made for that batch.
    cause:
        The error raised by the final attempt.
    """

    def __init__(self, batch_index: int, attempts: int, cause: BaseException | None) -> None:
        self.batch_index = batch_index
        self.attempts = attempts
        self.cause = cause
        super().__init__(
            f"Failed to add batch {batch_index} to the index store after {attempts} attempts: {cause}"
        )


class IngestionCancelledError(IngestionError):
    """Raised when cancellation is observed before or between batch attempts."""

    def __init__(self, batch_index: int) -> None:
        self.batch_index = batch_index
        super().__init__(f"Ingestion cancelled at batch {batch_index}")
