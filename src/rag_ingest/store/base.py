"""Abstract base class for index-store backends.

Adding a new backend (Pinecone, Weaviate, Qdrant …) only requires
subclassing :class:`IndexStore` and implementing :meth:`IndexStore.add`
and :meth:`IndexStore.health_check`.  The ingestion pipeline is
backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from rag_ingest.ingestion.models import Chunk


class IndexStore(ABC):
    """Backend-agnostic index-store interface.

    Parameters
    ----------
    collection_name:
        Logical name of the collection / index / namespace.
    """

    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def add(self, chunks: Sequence[Chunk]) -> None:
        """Durably store *chunks*, embedding them as the backend sees fit.

        Implementations must be safe to call again with the same chunks
        after a failure, and safe to call concurrently from independent
        ingestion calls.  Raise
        :class:`~rag_ingest.ingestion.errors.TransientWriteError` for
        failures that are worth retrying.
        """
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...
