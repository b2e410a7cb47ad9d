"""Domain models for chunks, batches, ingestion settings and results."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from rag_ingest.config import Settings


class Chunk(BaseModel):
    """A contiguous slice of a document's token stream.

    Attributes
    ----------
    document_id:
        Content hash of the source document.  Identical text always
        yields the same id, which makes re-ingestion idempotent.
    index:
        0-based position in the document's chunk sequence.
    text:
        The chunk's textual content, ``document[start_offset:end_offset]``.
    token_count:
        Number of tokens in ``text``; never exceeds the configured chunk size.
    start_token / end_token:
        Token window ``[start_token, end_token)`` in the document token stream.
    start_offset / end_offset:
        Character window ``[start_offset, end_offset)`` in the document.
    """

    model_config = ConfigDict(frozen=True)

    document_id: str
    index: int = Field(ge=0)
    text: str
    token_count: int = Field(ge=1)
    start_token: int = Field(ge=0)
    end_token: int = Field(ge=1)
    start_offset: int = Field(ge=0)
    end_offset: int = Field(ge=0)

    @property
    def chunk_id(self) -> str:
        """Stable primary key, ``"<document_id>_<index>"``."""
        return f"{self.document_id}_{self.index}"

    def metadata(self) -> dict[str, str | int]:
        """Flat metadata dict suitable for vector-store payloads."""
        return {
            "chunk_id": self.chunk_id,
            "document_id": self.document_id,
            "chunk_index": self.index,
            "token_count": self.token_count,
            "start_offset": self.start_offset,
            "end_offset": self.end_offset,
        }


class Batch(BaseModel):
    """An ordered group of chunks written to the index store in one call."""

    model_config = ConfigDict(frozen=True)

    position: int = Field(ge=0)
    chunks: tuple[Chunk, ...]

    def __len__(self) -> int:
        return len(self.chunks)


class IngestionStatus(str, Enum):
    """Terminal status of one ingestion call."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class IngestionResult(BaseModel):
    """Summary of one ingestion call.

    Serialises with camelCase keys (``chunksCount``, ``chunkSize``,
    ``status``, …) via ``model_dump(by_alias=True)``.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    chunks_count: int = Field(ge=0)
    chunk_size: int = Field(ge=1)
    status: IngestionStatus
    batches_count: int = Field(default=0, ge=0)
    chunks_committed: int = Field(default=0, ge=0)

    @property
    def succeeded(self) -> bool:
        return self.status is IngestionStatus.SUCCESS


class IngestionConfig(BaseModel):
    """Parameters that drive a single ingestion call.

    Attributes
    ----------
    chunk_size:
        Maximum tokens per chunk.
    overlap:
        Tokens shared between a chunk and its successor.
    batch_size:
        Maximum chunks per index-store write.
    max_retries:
        Write attempts per batch, the first attempt included.
    retry_delay:
        Seconds to wait between failed attempts.
    """

    model_config = ConfigDict(frozen=True)

    chunk_size: int = Field(default=100, ge=1)
    overlap: int = Field(default=50, ge=0)
    batch_size: int = Field(default=3, ge=1)
    max_retries: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=1.0, ge=0)

    @model_validator(mode="after")
    def _overlap_below_chunk_size(self) -> IngestionConfig:
        if self.overlap >= self.chunk_size:
            raise ValueError(
                f"overlap ({self.overlap}) must be smaller than chunk_size ({self.chunk_size})"
            )
        return self

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> IngestionConfig:
        """Build a config from :class:`~rag_ingest.config.Settings`."""
        if settings is None:
            from rag_ingest.config import settings as default_settings

            settings = default_settings
        return cls(
            chunk_size=settings.chunk_size,
            overlap=settings.chunk_overlap,
            batch_size=settings.batch_size,
            max_retries=settings.max_retries,
            retry_delay=settings.retry_delay_seconds,
        )
