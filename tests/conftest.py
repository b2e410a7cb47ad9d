"""Shared pytest configuration and fixtures."""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence

import pytest

from rag_ingest.ingestion.errors import TransientWriteError
from rag_ingest.ingestion.models import Chunk
from rag_ingest.store.base import IndexStore

ALWAYS = -1


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


class ScriptedStore(IndexStore):
    """In-memory store whose failures are scripted per batch.

    ``fail_plan`` maps the index of a batch's first chunk to the number of
    times ``add`` should fail for that batch before succeeding
    (``ALWAYS`` never succeeds).
    """

    def __init__(self, fail_plan: dict[int, int] | None = None) -> None:
        super().__init__("test-collection")
        self._fail_plan = dict(fail_plan or {})
        self._lock = threading.Lock()
        self.calls: list[tuple[int, ...]] = []
        self.committed: list[Chunk] = []

    def add(self, chunks: Sequence[Chunk]) -> None:
        with self._lock:
            self.calls.append(tuple(c.index for c in chunks))
            first = chunks[0].index
            remaining = self._fail_plan.get(first, 0)
            if remaining == ALWAYS:
                raise TransientWriteError(f"store unavailable for chunk {first}")
            if remaining > 0:
                self._fail_plan[first] = remaining - 1
                raise TransientWriteError(f"connection reset for chunk {first}")
            self.committed.extend(chunks)

    def health_check(self) -> bool:
        return True

    def calls_for(self, first_chunk: int) -> int:
        return sum(1 for call in self.calls if call[0] == first_chunk)


@pytest.fixture()
def make_store() -> Callable[..., ScriptedStore]:
    return ScriptedStore


@pytest.fixture()
def words() -> Callable[[int], str]:
    """Build a document of *n* whitespace-separated tokens."""

    def _words(n: int) -> str:
        return " ".join(f"w{i}" for i in range(n))

    return _words
