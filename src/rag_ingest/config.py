"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file.

    Every field can be overridden with a ``RAG_INGEST_``-prefixed
    environment variable, e.g. ``RAG_INGEST_BATCH_SIZE=10``.
    """

    # Chunking
    chunk_size: int = Field(default=100, description="Maximum tokens per chunk")
    chunk_overlap: int = Field(
        default=50,
        description="Tokens shared between consecutive chunks (half the chunk size by default)",
    )

    # Batching / retry
    batch_size: int = Field(default=3, description="Chunks submitted per index-store write")
    max_retries: int = Field(default=3, description="Attempts per batch, first attempt included")
    retry_delay_seconds: float = Field(default=1.0, description="Fixed wait between failed attempts")

    # Vector store
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    chroma_collection: str = "documents"

    # Embedding
    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"

    model_config = SettingsConfigDict(
        env_prefix="RAG_INGEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _check_ingestion_limits(self) -> Settings:
        # Misconfiguration is fatal at startup, never a per-call failure.
        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        if not 0 <= self.chunk_overlap < self.chunk_size:
            raise ValueError("chunk_overlap must satisfy 0 <= chunk_overlap < chunk_size")
        if self.batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if self.max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        if self.retry_delay_seconds < 0:
            raise ValueError("retry_delay_seconds must be >= 0")
        return self


# Singleton — import `settings` wherever needed.
settings = Settings()
