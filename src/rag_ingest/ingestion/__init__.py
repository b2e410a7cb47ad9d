"""
Ingestion — chunking, batching and fault-tolerant writes to the index store.

This module turns a raw document into overlapping, token-bounded chunks
and writes them to an :class:`~rag_ingest.store.base.IndexStore` in
ordered batches, retrying transient failures with a fixed delay.
"""

from rag_ingest.ingestion.batcher import batch_chunks
from rag_ingest.ingestion.cancellation import CancellationToken
from rag_ingest.ingestion.chunker import chunk_text, non_overlapping_spans
from rag_ingest.ingestion.errors import (
    FatalWriteError,
    IngestionCancelledError,
    IngestionError,
    InvalidInputError,
    TransientWriteError,
)
from rag_ingest.ingestion.models import (
    Batch,
    Chunk,
    IngestionConfig,
    IngestionResult,
    IngestionStatus,
)
from rag_ingest.ingestion.orchestrator import IngestionOrchestrator
from rag_ingest.ingestion.writer import RetryingWriter

__all__ = [
    "Batch",
    "CancellationToken",
    "Chunk",
    "FatalWriteError",
    "IngestionCancelledError",
    "IngestionConfig",
    "IngestionError",
    "IngestionOrchestrator",
    "IngestionResult",
    "IngestionStatus",
    "InvalidInputError",
    "RetryingWriter",
    "TransientWriteError",
    "batch_chunks",
    "chunk_text",
    "non_overlapping_spans",
]
