"""Ingestion orchestrator — chunk → batch → write-with-retry → summary.

Usage::

    from rag_ingest.ingestion import IngestionOrchestrator

    orchestrator = IngestionOrchestrator.from_settings()
    result = orchestrator.ingest(text)
    print(result.model_dump(by_alias=True))

Batches are written strictly in document order, one at a time.  A batch
that exhausts its retries aborts the call; batches written before it stay
committed, and the raised error carries an :class:`IngestionResult`
describing how far ingestion got.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from rag_ingest.ingestion.batcher import batch_chunks
from rag_ingest.ingestion.cancellation import CancellationToken
from rag_ingest.ingestion.chunker import chunk_text
from rag_ingest.ingestion.errors import FatalWriteError, IngestionCancelledError
from rag_ingest.ingestion.models import IngestionConfig, IngestionResult, IngestionStatus
from rag_ingest.ingestion.writer import RetryingWriter

if TYPE_CHECKING:
    from rag_ingest.config import Settings
    from rag_ingest.store.base import IndexStore

logger = logging.getLogger(__name__)


class IngestionOrchestrator:
    """Drives the end-to-end ingestion of one document at a time.

    The orchestrator holds no per-call state, so a single instance can
    serve concurrent :meth:`ingest` calls for different documents; the
    injected store is the only shared resource.

    Parameters
    ----------
    store:
        Destination index store.
    config:
        Default ingestion parameters; individual calls may override them.
    """

    def __init__(self, store: IndexStore, config: IngestionConfig | None = None) -> None:
        self._store = store
        self.config = config or IngestionConfig()

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        store: IndexStore | None = None,
    ) -> IngestionOrchestrator:
        """Build an orchestrator from environment settings.

        When *store* is ``None`` a :class:`~rag_ingest.store.chroma_store.ChromaIndexStore`
        is created from the same settings.
        """
        if settings is None:
            from rag_ingest.config import settings as default_settings

            settings = default_settings
        if store is None:
            from rag_ingest.store.chroma_store import ChromaIndexStore

            store = ChromaIndexStore(
                settings.chroma_collection,
                host=settings.chroma_host,
                port=settings.chroma_port,
                embedding_model=settings.embedding_model,
            )
        return cls(store, IngestionConfig.from_settings(settings))

    # -- public API -----------------------------------------------------------

    def ingest(
        self,
        document: str,
        config: IngestionConfig | None = None,
        *,
        cancel: CancellationToken | None = None,
    ) -> IngestionResult:
        """Chunk *document* and write every chunk to the index store.

        Parameters
        ----------
        document:
            Raw text.  An empty string succeeds with zero chunks.
        config:
            Overrides the orchestrator's default config for this call.
        cancel:
            Token checked before each batch and during retry waits.

        Returns
        -------
        IngestionResult
            Summary with status ``SUCCESS``.

        Raises
        ------
        InvalidInputError
            If *document* is ``None``.  Nothing is written.
        FatalWriteError
            If a batch exhausts its retries.  ``error.result`` reports the
            chunks committed before the failure.
        IngestionCancelledError
            If *cancel* fires before ingestion finishes.
        """
        config = config or self.config
        cancel = cancel or CancellationToken()

        chunks = chunk_text(document, config.chunk_size, config.overlap)
        logger.info(
            "Starting document ingestion. Content length: %d characters, %d chunks",
            len(document),
            len(chunks),
        )

        batches = batch_chunks(chunks, config.batch_size)
        writer = RetryingWriter(
            self._store,
            max_retries=config.max_retries,
            retry_delay=config.retry_delay,
        )

        total = len(chunks)
        committed = 0
        for batch in batches:
            try:
                cancel.raise_if_cancelled(batch.position)
                logger.info(
                    "Processing batch %d/%d (%d chunks)",
                    batch.position + 1,
                    len(batches),
                    len(batch),
                )
                writer.write_batch(batch, cancel)
            except FatalWriteError as exc:
                exc.result = self._partial_result(
                    config, total, len(batches), committed, IngestionStatus.FAILED
                )
                logger.error(
                    "Ingestion aborted at batch %d/%d; %d/%d chunks committed",
                    batch.position + 1,
                    len(batches),
                    committed,
                    total,
                )
                raise
            except IngestionCancelledError as exc:
                exc.result = self._partial_result(
                    config, total, len(batches), committed, IngestionStatus.CANCELLED
                )
                logger.warning(
                    "Ingestion cancelled at batch %d/%d; %d/%d chunks committed",
                    batch.position + 1,
                    len(batches),
                    committed,
                    total,
                )
                raise
            committed += len(batch)
            logger.info("Progress: %d/%d chunks processed", committed, total)

        logger.info("Document ingestion completed successfully. Total chunks: %d", total)
        return IngestionResult(
            chunks_count=total,
            chunk_size=config.chunk_size,
            status=IngestionStatus.SUCCESS,
            batches_count=len(batches),
            chunks_committed=committed,
        )

    async def ingest_async(
        self,
        document: str,
        config: IngestionConfig | None = None,
    ) -> IngestionResult:
        """Run :meth:`ingest` in a worker thread.

        Retry waits never block the event loop.  Cancelling the awaiting
        task (including an ``asyncio.wait_for`` deadline) cancels the
        ingestion: a pending retry wait ends immediately and no further
        batch is started.
        """
        cancel = CancellationToken()
        try:
            return await asyncio.to_thread(self.ingest, document, config, cancel=cancel)
        except asyncio.CancelledError:
            cancel.cancel()
            raise

    # -- internals ------------------------------------------------------------

    @staticmethod
    def _partial_result(
        config: IngestionConfig,
        total: int,
        batches: int,
        committed: int,
        status: IngestionStatus,
    ) -> IngestionResult:
        return IngestionResult(
            chunks_count=total,
            chunk_size=config.chunk_size,
            status=status,
            batches_count=batches,
            chunks_committed=committed,
        )
