"""Unit tests for transcript and summary generation."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from media_pipeline.application.services.transcript import (
    SummaryService,
    TranscriptService,
    same_words,
)
from media_pipeline.commons.errors import ValidationError
from media_pipeline.commons.settings.models import LLMSettings, TranscriptionSettings
from media_pipeline.infrastructure.llm.base import LLMResponse, LLMUsage, MessageRole
from media_pipeline.infrastructure.transcription.base import TranscriptionResult


def _llm_response(content: str) -> LLMResponse:
    return LLMResponse(
        content=content,
        finish_reason="stop",
        usage=LLMUsage(prompt_tokens=10, completion_tokens=5, total_tokens=15),
        model="gpt-4o-mini",
    )


@pytest.fixture
def transcription():
    service = MagicMock()
    service.max_upload_bytes = 25 * 1024 * 1024
    service.transcribe = AsyncMock(
        return_value=TranscriptionResult(text="hello class today", model="whisper-1")
    )
    return service


@pytest.fixture
def llm():
    service = MagicMock()
    service.generate = AsyncMock(
        side_effect=lambda messages, **kwargs: _llm_response(
            messages[-1].content.split("\n\n", 1)[1]
        )
    )
    return service


@pytest.fixture
def transcript_service(toolkit, transcription, llm):
    return TranscriptService(
        toolkit,
        transcription,
        llm,
        transcription_settings=TranscriptionSettings(segment_seconds=300),
        llm_settings=LLMSettings(format_model="gpt-4o-mini"),
    )


class TestSameWords:
    """Tests for the word-sequence guard."""

    def test_whitespace_differences_are_ignored(self):
        assert same_words("one two  three", "one two\n\nthree")

    def test_changed_word(self):
        assert not same_words("one two three", "one too three")

    def test_dropped_word(self):
        assert not same_words("one two three", "one three")


class TestTranscriptService:
    """Tests for TranscriptService."""

    async def test_small_audio_is_sent_whole(
        self, transcript_service, toolkit, transcription
    ):
        text = await transcript_service.generate(b"video")

        assert text == "hello class today"
        transcription.transcribe.assert_awaited_once()
        assert [name for name, _ in toolkit.calls] == ["extract_audio"]

    async def test_large_audio_is_split_and_joined(
        self, transcript_service, toolkit, transcription
    ):
        transcription.max_upload_bytes = 2
        transcription.transcribe = AsyncMock(
            side_effect=[
                TranscriptionResult(text=text, model="whisper-1")
                for text in ("part one.", "part two.", "part three.")
            ]
        )

        text = await transcript_service.generate(b"video")

        assert text == "part one. part two. part three."
        assert ("split_audio", 300) in toolkit.calls
        paths = [call.args[0].name for call in transcription.transcribe.await_args_list]
        assert paths == ["chunk-000.mp3", "chunk-001.mp3", "chunk-002.mp3"]

    async def test_upload_limit_uses_smaller_bound(self, toolkit, transcription, llm):
        service = TranscriptService(
            toolkit,
            transcription,
            llm,
            transcription_settings=TranscriptionSettings(max_upload_bytes=1000),
        )
        assert service.upload_limit == 1000

    async def test_empty_transcription_is_rejected(
        self, transcript_service, transcription
    ):
        transcription.transcribe = AsyncMock(
            return_value=TranscriptionResult(text="  ", model="whisper-1")
        )
        with pytest.raises(ValidationError):
            await transcript_service.generate(b"video")

    async def test_formatting_keeps_paragraphs(self, transcript_service, llm):
        llm.generate = AsyncMock(return_value=_llm_response("one two.\n\nthree four."))

        formatted = await transcript_service.format_paragraphs("one two. three four.")

        assert formatted == "one two.\n\nthree four."
        kwargs = llm.generate.await_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["temperature"] == 0.0

    async def test_formatting_that_changes_words_is_discarded(
        self, transcript_service, llm
    ):
        llm.generate = AsyncMock(return_value=_llm_response("One, two. Three four!"))

        formatted = await transcript_service.format_paragraphs(" one two. three four. ")

        assert formatted == "one two. three four."


class TestSummaryService:
    """Tests for SummaryService."""

    async def test_summarize_uses_summary_settings(self, llm):
        llm.generate = AsyncMock(return_value=_llm_response("## About This Video\n..."))
        service = SummaryService(llm, LLMSettings(summary_model="gpt-4o"))

        summary = await service.summarize("A transcript about recursion.")

        assert summary.startswith("## About This Video")
        messages = llm.generate.await_args.args[0]
        assert messages[0].role == MessageRole.SYSTEM
        assert "What You'll Learn" in messages[0].content
        assert "A transcript about recursion." in messages[1].content
        assert llm.generate.await_args.kwargs["model"] == "gpt-4o"
        assert llm.generate.await_args.kwargs["temperature"] == 0.3

    async def test_blank_transcript_is_rejected(self, llm):
        with pytest.raises(ValidationError):
            await SummaryService(llm).summarize("   ")
        llm.generate.assert_not_called()
