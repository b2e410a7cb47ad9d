"""Chroma implementation of the index-store abstraction."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import chromadb
from langchain_community.vectorstores import Chroma
from langchain_core.documents import Document
from langchain_huggingface import HuggingFaceEmbeddings

from rag_ingest.config import settings
from rag_ingest.ingestion.errors import TransientWriteError
from rag_ingest.ingestion.models import Chunk
from rag_ingest.store.base import IndexStore

logger = logging.getLogger(__name__)


def chunks_to_documents(chunks: Sequence[Chunk]) -> list[Document]:
    """Convert chunks to LangChain ``Document`` objects with flat metadata."""
    return [Document(page_content=chunk.text, metadata=chunk.metadata()) for chunk in chunks]


class ChromaIndexStore(IndexStore):
    """Chroma-backed index store.

    Chunks are embedded with a HuggingFace sentence-transformer model and
    upserted under their deterministic ``chunk_id``, so a retried or
    re-ingested batch overwrites its earlier copy instead of duplicating it.

    Parameters
    ----------
    collection_name:
        Name of the Chroma collection.
    host:
        Chroma server hostname.
    port:
        Chroma server port.
    embedding_model:
        HuggingFace model id used for text → embedding conversion.
    distance_metric:
        Distance function for a newly created collection (``cosine`` | ``l2`` | ``ip``).
    """

    def __init__(
        self,
        collection_name: str = settings.chroma_collection,
        *,
        host: str = settings.chroma_host,
        port: int = settings.chroma_port,
        embedding_model: str = settings.embedding_model,
        distance_metric: str = "cosine",
    ) -> None:
        super().__init__(collection_name)
        self._client = chromadb.HttpClient(host=host, port=port)
        self._vectorstore = Chroma(
            client=self._client,
            collection_name=collection_name,
            embedding_function=HuggingFaceEmbeddings(model_name=embedding_model),
            collection_metadata={"hnsw:space": distance_metric},
        )

    # -- IndexStore overrides -------------------------------------------------

    def add(self, chunks: Sequence[Chunk]) -> None:
        if not chunks:
            return
        ids = [chunk.chunk_id for chunk in chunks]
        try:
            self._vectorstore.add_documents(chunks_to_documents(chunks), ids=ids)
        except Exception as exc:
            raise TransientWriteError(
                f"Chroma write of {len(ids)} chunks to {self.collection_name!r} failed: {exc}"
            ) from exc
        logger.debug("Upserted %d chunks into collection %r", len(ids), self.collection_name)

    def health_check(self) -> bool:
        try:
            self._client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False
