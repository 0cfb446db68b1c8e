"""Unit tests for transcript chunking."""

import pytest

from media_pipeline.application.services.chunking import TranscriptChunker
from media_pipeline.commons.settings.models import ChunkingSettings

LECTURE = (
    "Today we look at binary search. It halves the range on every step. "
    "That gives logarithmic time.\n\n"
    "Next we compare it with linear search. Linear search checks each item. "
    "It is simpler but slower on large inputs. "
    "Finally we discuss sorted input as a precondition."
)


def _assert_tiles(text, chunks):
    assert chunks[0].start == 0
    assert chunks[-1].end == len(text)
    for previous, current in zip(chunks, chunks[1:], strict=False):
        assert previous.end == current.start


class TestTranscriptChunker:
    """Tests for TranscriptChunker."""

    def test_rejects_non_positive_budget(self, whitespace_tokenizer):
        with pytest.raises(ValueError):
            TranscriptChunker(max_tokens=0, tokenizer=whitespace_tokenizer)

    @pytest.mark.parametrize("text", ["", "   ", "\n\n\t"])
    def test_blank_text_has_no_chunks(self, whitespace_tokenizer, text):
        chunker = TranscriptChunker(max_tokens=5, tokenizer=whitespace_tokenizer)
        assert chunker.chunk(text) == []

    def test_short_text_is_one_chunk(self, whitespace_tokenizer):
        chunker = TranscriptChunker(max_tokens=50, tokenizer=whitespace_tokenizer)

        chunks = chunker.chunk("  Short lecture.  ")

        assert len(chunks) == 1
        assert chunks[0].text == "Short lecture."
        assert (chunks[0].start, chunks[0].end) == (0, 18)
        assert chunks[0].token_count == 2

    @pytest.mark.parametrize("max_tokens", [3, 7, 12, 25])
    def test_chunks_tile_source_within_budget(self, whitespace_tokenizer, max_tokens):
        chunker = TranscriptChunker(
            max_tokens=max_tokens, tokenizer=whitespace_tokenizer
        )

        chunks = chunker.chunk(LECTURE)

        _assert_tiles(LECTURE, chunks)
        assert all(chunk.token_count <= max_tokens for chunk in chunks)
        assert [chunk.index for chunk in chunks] == list(range(len(chunks)))
        words = [word for chunk in chunks for word in chunk.text.split()]
        assert words == LECTURE.split()

    def test_prefers_sentence_boundaries(self, whitespace_tokenizer):
        chunker = TranscriptChunker(max_tokens=6, tokenizer=whitespace_tokenizer)

        chunks = chunker.chunk("Alpha beta gamma. Delta epsilon zeta. Eta theta.")

        assert [chunk.text for chunk in chunks] == [
            "Alpha beta gamma. Delta epsilon zeta.",
            "Eta theta.",
        ]

    def test_prefers_paragraph_breaks(self, whitespace_tokenizer):
        chunker = TranscriptChunker(max_tokens=4, tokenizer=whitespace_tokenizer)

        chunks = chunker.chunk("First para words here.\n\nSecond para.")

        assert [chunk.text for chunk in chunks] == [
            "First para words here.",
            "Second para.",
        ]

    def test_long_word_is_cut_by_characters(self, char_tokenizer):
        chunker = TranscriptChunker(max_tokens=4, tokenizer=char_tokenizer)

        chunks = chunker.chunk("abcdefghij")

        assert [chunk.text for chunk in chunks] == ["abcd", "efgh", "ij"]
        _assert_tiles("abcdefghij", chunks)

    def test_deterministic(self, whitespace_tokenizer):
        chunker = TranscriptChunker(max_tokens=7, tokenizer=whitespace_tokenizer)
        assert chunker.chunk(LECTURE) == chunker.chunk(LECTURE)

    def test_from_settings(self, whitespace_tokenizer):
        chunker = TranscriptChunker.from_settings(
            ChunkingSettings(max_tokens=64), tokenizer=whitespace_tokenizer
        )
        assert chunker.max_tokens == 64

    async def test_chunk_async_matches_sync(self, whitespace_tokenizer):
        chunker = TranscriptChunker(max_tokens=7, tokenizer=whitespace_tokenizer)
        assert await chunker.chunk_async(LECTURE) == chunker.chunk(LECTURE)
