"""Grouping of an ordered chunk sequence into write batches."""

from __future__ import annotations

from collections.abc import Sequence

from rag_ingest.ingestion.models import Batch, Chunk


def batch_chunks(chunks: Sequence[Chunk], batch_size: int) -> list[Batch]:
    """Partition *chunks* into consecutive batches of at most *batch_size*.

    Only the last batch may be smaller.  Order is preserved and every
    chunk lands in exactly one batch.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")

    return [
        Batch(position=position, chunks=tuple(chunks[start : start + batch_size]))
        for position, start in enumerate(range(0, len(chunks), batch_size))
    ]
