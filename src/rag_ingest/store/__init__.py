"""
Store — destinations that durably persist ingested chunks.

Public surface
--------------
- :class:`IndexStore` — abstract backend (subclass for Pinecone, etc.).
- :class:`ChromaIndexStore` — default Chroma backend.
"""

from rag_ingest.store.base import IndexStore

__all__ = [
    "ChromaIndexStore",
    "IndexStore",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaIndexStore to avoid pulling in chromadb at import time."""
    if name == "ChromaIndexStore":
        from rag_ingest.store.chroma_store import ChromaIndexStore

        return ChromaIndexStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
