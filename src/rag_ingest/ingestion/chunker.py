"""Token-bounded text chunking with overlap.

Tokens are whitespace-delimited words.  Each token keeps the whitespace
that follows it (and the first token also absorbs any leading
whitespace), so the token stream concatenates back to the input exactly
and every chunk is a verbatim slice of the document.  Windowing is done by
LangChain's token splitter driven by that word tokenizer.
"""

from __future__ import annotations

import hashlib
import logging
import re

from langchain_text_splitters import Tokenizer, split_text_on_tokens

from rag_ingest.ingestion.errors import InvalidInputError
from rag_ingest.ingestion.models import Chunk

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\S+\s*")


def tokenize(text: str) -> list[tuple[int, int]]:
    """Return the ``(start, end)`` character span of every token in *text*.

    Whitespace-only text has no tokens.
    """
    spans = [m.span() for m in _TOKEN_RE.finditer(text)]
    if spans and spans[0][0] > 0:
        spans[0] = (0, spans[0][1])
    return spans


def document_id_for(text: str) -> str:
    """Deterministic 16-hex-char id derived from the document content."""
    return hashlib.sha256(text.encode("utf-8", errors="surrogatepass")).hexdigest()[:16]


def chunk_text(text: str, chunk_size: int = 100, overlap: int = 50) -> list[Chunk]:
    """Split *text* into overlapping chunks of at most *chunk_size* tokens.

    Parameters
    ----------
    text:
        The full document.  An empty (or whitespace-only) string yields no
        chunks; ``None`` is rejected.
    chunk_size:
        Maximum number of tokens per chunk.
    overlap:
        Number of tokens shared between a chunk and its successor.  Must be
        smaller than *chunk_size*.

    Returns
    -------
    list[Chunk]
        Chunks in document order.  Windows start every
        ``chunk_size - overlap`` tokens and the last one ends at the final
        token.

    Raises
    ------
    InvalidInputError
        If *text* is ``None`` or not a string.
    ValueError
        If the size / overlap combination is invalid.
    """
    if text is None:
        raise InvalidInputError("Document text must not be None")
    if not isinstance(text, str):
        raise InvalidInputError(f"Document text must be a str, got {type(text).__name__}")
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
    if not 0 <= overlap < chunk_size:
        raise ValueError(f"overlap must satisfy 0 <= overlap < chunk_size, got {overlap}")

    spans = tokenize(text)
    if not spans:
        return []

    # decode() sees every token window in order; remember each one so the
    # chunks can carry token and character offsets.
    windows: list[tuple[int, int]] = []

    def _decode(ids: list[int]) -> str:
        windows.append((ids[0], ids[-1] + 1))
        return text[spans[ids[0]][0] : spans[ids[-1]][1]]

    tokenizer = Tokenizer(
        chunk_overlap=overlap,
        tokens_per_chunk=chunk_size,
        decode=_decode,
        encode=lambda _: list(range(len(spans))),
    )
    pieces = split_text_on_tokens(text=text, tokenizer=tokenizer)

    doc_id = document_id_for(text)
    chunks = [
        Chunk(
            document_id=doc_id,
            index=index,
            text=piece,
            token_count=end - start,
            start_token=start,
            end_token=end,
            start_offset=spans[start][0],
            end_offset=spans[end - 1][1],
        )
        for index, (piece, (start, end)) in enumerate(zip(pieces, windows))
    ]

    logger.debug(
        "Chunked %d tokens into %d chunks (size=%d, overlap=%d)",
        len(spans),
        len(chunks),
        chunk_size,
        overlap,
    )
    return chunks


def non_overlapping_spans(chunks: list[Chunk]) -> list[str]:
    """Return the text each chunk contributes that its successor does not repeat.

    Joining the result reproduces the original document.
    """
    spans: list[str] = []
    for current, following in zip(chunks, chunks[1:]):
        spans.append(current.text[: following.start_offset - current.start_offset])
    if chunks:
        spans.append(chunks[-1].text)
    return spans
