"""Token-bounded transcript chunking."""

import asyncio
import re
from typing import Protocol

import tiktoken

from media_pipeline.commons.settings.models import ChunkingSettings
from media_pipeline.commons.telemetry import get_logger
from media_pipeline.domain.models.chunk import TextChunk

# Preferred split points, coarsest first. Each cut falls at the end of the
# match, so separating whitespace stays with the preceding piece.
_BOUNDARIES = (
    re.compile(r"\n\s*\n"),
    re.compile(r"(?<=[.!?])\s+"),
    re.compile(r"\s+"),
)

Span = tuple[int, int]


class Tokenizer(Protocol):
    """Minimal tokenizer interface used for counting."""

    def encode(self, text: str) -> list[int]: ...

    def decode(self, tokens: list[int]) -> str: ...


class TiktokenTokenizer:
    """Tokenizer backed by a tiktoken encoding."""

    def __init__(self, encoding: str = "cl100k_base") -> None:
        self._encoding_name = encoding
        self._encoding: tiktoken.Encoding | None = None

    @property
    def encoding(self) -> tiktoken.Encoding:
        # Loaded on first use; tiktoken may fetch the BPE file.
        if self._encoding is None:
            self._encoding = tiktoken.get_encoding(self._encoding_name)
        return self._encoding

    def encode(self, text: str) -> list[int]:
        return self.encoding.encode(text, disallowed_special=())

    def decode(self, tokens: list[int]) -> str:
        return self.encoding.decode(tokens)


class TranscriptChunker:
    """Splits transcript text into contiguous, token-bounded chunks.

    Chunks never overlap and never skip text: their ``start``/``end``
    offsets tile the source. Splits prefer paragraph breaks, then sentence
    ends, then any whitespace; a single word longer than the budget is cut
    by characters. The same input always yields the same chunks.
    """

    def __init__(
        self,
        max_tokens: int = 500,
        tokenizer: Tokenizer | None = None,
        strip_whitespace: bool = True,
    ) -> None:
        """Initialize chunker.

        Args:
            max_tokens: Upper bound on tokens per chunk.
            tokenizer: Token counter; defaults to tiktoken ``cl100k_base``.
            strip_whitespace: Strip surrounding whitespace from chunk text.
        """
        if max_tokens < 1:
            raise ValueError("max_tokens must be at least 1")
        self._max_tokens = max_tokens
        self._tokenizer = tokenizer or TiktokenTokenizer()
        self._strip = strip_whitespace
        self._logger = get_logger(__name__)

    @classmethod
    def from_settings(
        cls, settings: ChunkingSettings, tokenizer: Tokenizer | None = None
    ) -> "TranscriptChunker":
        return cls(
            max_tokens=settings.max_tokens,
            tokenizer=tokenizer or TiktokenTokenizer(settings.encoding),
        )

    @property
    def max_tokens(self) -> int:
        return self._max_tokens

    def chunk(self, text: str) -> list[TextChunk]:
        """Split ``text`` into chunks.

        Args:
            text: Transcript text.

        Returns:
            Chunks in order; empty for blank input.
        """
        if not text or not text.strip():
            return []

        spans = self._fold_blank(text, self._split(text, 0, len(text), 0))
        chunks = []
        for index, (start, end) in enumerate(spans):
            piece = text[start:end]
            if self._strip:
                piece = piece.strip()
            chunks.append(
                TextChunk(
                    index=index,
                    text=piece,
                    token_count=self._count(piece),
                    start=start,
                    end=end,
                )
            )

        self._logger.debug(
            "Transcript chunked",
            extra={
                "characters": len(text),
                "chunks": len(chunks),
                "max_tokens": self._max_tokens,
            },
        )
        return chunks

    async def chunk_async(self, text: str) -> list[TextChunk]:
        """Run :meth:`chunk` on the default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.chunk, text)

    def _count(self, text: str) -> int:
        return len(self._tokenizer.encode(text))

    def _fits(self, text: str) -> bool:
        return self._count(text.strip() if self._strip else text) <= self._max_tokens

    def _split(self, text: str, start: int, end: int, level: int) -> list[Span]:
        if self._fits(text[start:end]):
            return [(start, end)]
        if level >= len(_BOUNDARIES):
            return self._hard_split(text, start, end)

        cuts = [
            match.end()
            for match in _BOUNDARIES[level].finditer(text, start, end)
            if start < match.end() < end
        ]
        if not cuts:
            return self._split(text, start, end, level + 1)

        spans: list[Span] = []
        edges = [start, *cuts, end]
        for piece_start, piece_end in zip(edges, edges[1:], strict=False):
            spans.extend(self._split(text, piece_start, piece_end, level + 1))
        return self._merge(text, spans)

    def _merge(self, text: str, spans: list[Span]) -> list[Span]:
        """Greedily join adjacent spans while the result still fits."""
        merged: list[Span] = []
        current_start, current_end = spans[0]
        for span_start, span_end in spans[1:]:
            if self._fits(text[current_start:span_end]):
                current_end = span_end
            else:
                merged.append((current_start, current_end))
                current_start, current_end = span_start, span_end
        merged.append((current_start, current_end))
        return merged

    def _hard_split(self, text: str, start: int, end: int) -> list[Span]:
        """Cut at the longest prefix that fits, by binary search on length."""
        spans: list[Span] = []
        position = start
        while position < end:
            low, high = position + 1, end
            while low < high:
                middle = (low + high + 1) // 2
                if self._fits(text[position:middle]):
                    low = middle
                else:
                    high = middle - 1
            spans.append((position, low))
            position = low
        return spans

    def _fold_blank(self, text: str, spans: list[Span]) -> list[Span]:
        """Attach whitespace-only spans to a neighbour."""
        folded: list[Span] = []
        pending_start: int | None = None
        for start, end in spans:
            if not text[start:end].strip():
                if folded:
                    folded[-1] = (folded[-1][0], end)
                elif pending_start is None:
                    pending_start = start
                continue
            if pending_start is not None:
                start, pending_start = pending_start, None
            folded.append((start, end))
        return folded
