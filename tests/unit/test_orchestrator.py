"""Unit tests for the ingestion orchestrator — end-to-end scenarios."""

from __future__ import annotations

import asyncio
import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import MagicMock, patch

import pytest

from conftest import ALWAYS
from rag_ingest.config import Settings
from rag_ingest.ingestion.cancellation import CancellationToken
from rag_ingest.ingestion.errors import (
    FatalWriteError,
    IngestionCancelledError,
    InvalidInputError,
)
from rag_ingest.ingestion.models import IngestionConfig, IngestionStatus
from rag_ingest.ingestion.orchestrator import IngestionOrchestrator

SCENARIO = IngestionConfig(chunk_size=100, overlap=50, batch_size=3, max_retries=3, retry_delay=0)


@pytest.fixture()
def document(words) -> str:
    return words(700)


class TestScenarios:
    def test_all_batches_succeed(self, make_store, document: str) -> None:
        store = make_store()
        result = IngestionOrchestrator(store, SCENARIO).ingest(document)

        assert result.status is IngestionStatus.SUCCESS
        assert result.chunks_count == 13
        assert result.chunk_size == 100
        assert result.batches_count == 5
        assert result.chunks_committed == 13
        assert store.calls == [(0, 1, 2), (3, 4, 5), (6, 7, 8), (9, 10, 11), (12,)]

    def test_transient_failures_are_retried(self, make_store, document: str) -> None:
        store = make_store(fail_plan={6: 2})
        result = IngestionOrchestrator(store, SCENARIO).ingest(document)

        assert result.status is IngestionStatus.SUCCESS
        assert result.chunks_count == 13
        assert store.calls_for(6) == 3
        assert all(store.calls_for(first) == 1 for first in (0, 3, 9, 12))
        assert [c.index for c in store.committed] == list(range(13))

    def test_exhausted_batch_aborts_ingestion(self, make_store, document: str) -> None:
        store = make_store(fail_plan={3: ALWAYS})

        with pytest.raises(FatalWriteError) as excinfo:
            IngestionOrchestrator(store, SCENARIO).ingest(document)

        err = excinfo.value
        assert err.batch_index == 1
        assert "Failed to add batch" in str(err)
        assert [c.index for c in store.committed] == [0, 1, 2]
        assert store.calls_for(3) == 3
        assert not any(store.calls_for(first) for first in (6, 9, 12))
        assert err.result is not None
        assert err.result.status is IngestionStatus.FAILED
        assert err.result.chunks_committed == 3
        assert err.result.chunks_count == 13


class TestEdgeCases:
    def test_empty_document_succeeds_without_writes(self, make_store) -> None:
        store = make_store()
        result = IngestionOrchestrator(store, SCENARIO).ingest("")

        assert result.status is IngestionStatus.SUCCESS
        assert result.chunks_count == 0
        assert result.chunk_size == 100
        assert store.calls == []

    def test_none_document_is_rejected_before_any_write(self) -> None:
        store = MagicMock()
        with pytest.raises(InvalidInputError):
            IngestionOrchestrator(store, SCENARIO).ingest(None)  # type: ignore[arg-type]
        store.add.assert_not_called()

    def test_per_call_config_overrides_default(self, make_store, document: str) -> None:
        store = make_store()
        orchestrator = IngestionOrchestrator(store, SCENARIO)
        override = IngestionConfig(chunk_size=350, overlap=0, batch_size=10, max_retries=1, retry_delay=0)

        result = orchestrator.ingest(document, override)

        assert result.chunks_count == 2
        assert result.chunk_size == 350
        assert store.calls == [(0, 1)]

    def test_default_config_matches_original_constants(self) -> None:
        config = IngestionOrchestrator(MagicMock()).config
        assert (config.chunk_size, config.overlap, config.batch_size, config.max_retries) == (100, 50, 3, 3)


class TestCancellation:
    def test_cancelled_before_first_batch(self, make_store, document: str) -> None:
        store = make_store()
        cancel = CancellationToken()
        cancel.cancel()

        with pytest.raises(IngestionCancelledError) as excinfo:
            IngestionOrchestrator(store, SCENARIO).ingest(document, cancel=cancel)

        assert excinfo.value.batch_index == 0
        assert excinfo.value.result.status is IngestionStatus.CANCELLED
        assert store.calls == []

    def test_cancel_between_batches_stops_further_writes(self, make_store, document: str) -> None:
        store = make_store()
        cancel = CancellationToken()
        original_add = store.add

        def add_then_cancel(chunks):
            original_add(chunks)
            if chunks[0].index == 3:
                cancel.cancel()

        store.add = add_then_cancel

        with pytest.raises(IngestionCancelledError) as excinfo:
            IngestionOrchestrator(store, SCENARIO).ingest(document, cancel=cancel)

        assert excinfo.value.batch_index == 2
        assert excinfo.value.result.chunks_committed == 6
        assert [c.index for c in store.committed] == [0, 1, 2, 3, 4, 5]

    def test_cancel_during_retry_wait_is_not_a_write_failure(self, make_store, document: str) -> None:
        store = make_store(fail_plan={0: ALWAYS})
        cancel = CancellationToken()
        config = SCENARIO.model_copy(update={"retry_delay": 30})
        timer = threading.Timer(0.05, cancel.cancel)
        timer.start()
        try:
            with pytest.raises(IngestionCancelledError):
                IngestionOrchestrator(store, config).ingest(document, cancel=cancel)
        finally:
            timer.cancel()
        assert len(store.calls) == 1


class TestAsync:
    def test_ingest_async_returns_result(self, make_store, document: str) -> None:
        store = make_store()
        orchestrator = IngestionOrchestrator(store, SCENARIO)

        result = asyncio.run(orchestrator.ingest_async(document))

        assert result.status is IngestionStatus.SUCCESS
        assert len(store.calls) == 5

    def test_deadline_cancels_pending_retry(self, make_store, document: str) -> None:
        store = make_store(fail_plan={0: ALWAYS})
        config = SCENARIO.model_copy(update={"retry_delay": 30})
        orchestrator = IngestionOrchestrator(store, config)

        async def run() -> None:
            await asyncio.wait_for(orchestrator.ingest_async(document), timeout=0.1)

        with pytest.raises(asyncio.TimeoutError):
            asyncio.run(run())

        assert len(store.calls) == 1

    def test_retry_wait_does_not_block_other_ingestions(self, make_store, words) -> None:
        slow = IngestionOrchestrator(
            make_store(fail_plan={0: 1}), SCENARIO.model_copy(update={"retry_delay": 0.5})
        )
        fast = IngestionOrchestrator(make_store(), SCENARIO)

        async def run():
            slow_task = asyncio.create_task(slow.ingest_async(words(10)))
            fast_result = await fast.ingest_async("another document entirely")
            assert not slow_task.done()
            return fast_result, await slow_task

        fast_result, slow_result = asyncio.run(run())

        assert fast_result.succeeded
        assert slow_result.succeeded


def test_concurrent_ingestions_share_one_store(make_store, words) -> None:
    store = make_store()
    orchestrator = IngestionOrchestrator(store, SCENARIO)
    docs = [words(n) for n in (120, 260, 700, 5)]

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(orchestrator.ingest, docs))

    assert all(r.succeeded for r in results)
    assert len(store.committed) == sum(r.chunks_count for r in results)


def test_from_settings_uses_chroma_by_default() -> None:
    settings = Settings(chunk_size=64, chunk_overlap=8, batch_size=5, chroma_collection="docs")
    chroma_module = MagicMock()
    with patch.dict(sys.modules, {"rag_ingest.store.chroma_store": chroma_module}):
        orchestrator = IngestionOrchestrator.from_settings(settings)

    chroma_module.ChromaIndexStore.assert_called_once_with(
        "docs",
        host=settings.chroma_host,
        port=settings.chroma_port,
        embedding_model=settings.embedding_model,
    )
    assert orchestrator.config.chunk_size == 64
    assert orchestrator.config.overlap == 8
    assert orchestrator.config.batch_size == 5


def test_from_settings_keeps_injected_store(make_store, words) -> None:
    store = make_store()
    settings = Settings(chunk_size=10, chunk_overlap=2, batch_size=2, retry_delay_seconds=0)
    chroma_module = MagicMock()
    with patch.dict(sys.modules, {"rag_ingest.store.chroma_store": chroma_module}):
        orchestrator = IngestionOrchestrator.from_settings(settings, store=store)

    chroma_module.ChromaIndexStore.assert_not_called()
    result = orchestrator.ingest(words(18))
    assert result.chunks_count == 2
    assert store.calls == [(0, 1)]
