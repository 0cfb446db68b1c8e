"""Transcript and summary generation from lecture videos."""

import logging
import tempfile
from pathlib import Path

from media_pipeline.commons.errors import ValidationError
from media_pipeline.commons.settings.models import LLMSettings, TranscriptionSettings
from media_pipeline.commons.telemetry import get_logger, timed
from media_pipeline.infrastructure.llm.base import LLMServiceBase, Message, MessageRole
from media_pipeline.infrastructure.media.base import MediaToolkitBase
from media_pipeline.infrastructure.transcription.base import TranscriptionServiceBase

FORMAT_SYSTEM_PROMPT = """You format raw speech transcripts into readable paragraphs.

Rules:
1. Keep every word exactly as given.
2. Never add, remove or substitute words.
3. Do not correct grammar or smooth out speech patterns.
4. Only insert paragraph breaks at natural pauses or topic changes.
5. Aim for 2-4 sentences per paragraph.
6. Reply with the formatted transcript only, with no commentary."""

FORMAT_USER_PROMPT = (
    "Format this transcript into paragraphs without changing any words:\n\n{transcript}"
)

SUMMARY_SYSTEM_PROMPT = """You write short, informative summaries of lecture videos for an online learning platform. Learners use them to decide whether a video covers what they need.

Use exactly these sections:

## About This Video
One or two sentences on what the video covers and why.

## What You'll Learn
- 3-5 concrete learning outcomes
- Start each bullet with an action verb (Learn, Understand, Build, Implement)

## Key Takeaways
- 3-5 of the most important ideas from the video
- Prefer practical points learners can apply right away

Keep the whole summary under 300 words. Use plain, specific language and markdown with ## headers and - bullets."""

SUMMARY_USER_PROMPT = "Summarize this video transcript:\n\n{transcript}"


def same_words(original: str, candidate: str) -> bool:
    """Whether two texts have the same whitespace-separated word sequence."""
    return original.split() == candidate.split()


class TranscriptService:
    """Turns a video into a paragraph-formatted transcript.

    Audio is extracted to MP3 and sent to the transcription provider; audio
    over the upload limit is split into fixed-length segments, transcribed
    in order and joined with single spaces. A formatting pass then adds
    paragraph breaks. Its output is used only when the word sequence is
    unchanged, otherwise the raw transcript is kept.
    """

    def __init__(
        self,
        toolkit: MediaToolkitBase,
        transcription: TranscriptionServiceBase,
        llm: LLMServiceBase,
        transcription_settings: TranscriptionSettings | None = None,
        llm_settings: LLMSettings | None = None,
    ) -> None:
        """Initialize transcript service.

        Args:
            toolkit: Local media operations.
            transcription: Speech-to-text provider.
            llm: Text generation provider used for paragraph formatting.
            transcription_settings: Upload limit, segment length and language.
            llm_settings: Formatting model and token limit.
        """
        self._toolkit = toolkit
        self._transcription = transcription
        self._llm = llm
        self._transcription_settings = transcription_settings or TranscriptionSettings()
        self._llm_settings = llm_settings or LLMSettings()
        self._logger = get_logger(__name__)

    @property
    def upload_limit(self) -> int:
        return min(
            self._transcription_settings.max_upload_bytes,
            self._transcription.max_upload_bytes,
        )

    @timed(level=logging.INFO)
    async def generate(self, video_bytes: bytes) -> str:
        """Produce a formatted transcript for a video.

        Args:
            video_bytes: Source video contents.

        Returns:
            Paragraph-formatted transcript text.

        Raises:
            CommandFailedError: If audio extraction or splitting fails.
            ValidationError: If the provider returns no speech at all.
        """
        with tempfile.TemporaryDirectory(prefix="transcript-") as tmp:
            work_dir = Path(tmp)
            video_path = work_dir / "source.mp4"
            video_path.write_bytes(video_bytes)

            audio_path = await self._toolkit.extract_audio(
                video_path, work_dir / "audio.mp3"
            )
            raw = await self.transcribe_audio(audio_path, work_dir)

        if not raw.strip():
            raise ValidationError("Transcription produced no text")
        return await self.format_paragraphs(raw)

    async def transcribe_audio(self, audio_path: Path, work_dir: Path) -> str:
        """Transcribe an audio file, splitting it when over the upload limit."""
        size = audio_path.stat().st_size
        language = self._transcription_settings.language
        if size <= self.upload_limit:
            result = await self._transcription.transcribe(audio_path, language)
            return result.text

        segment_dir = work_dir / "segments"
        segment_dir.mkdir(exist_ok=True)
        segments = await self._toolkit.split_audio(
            audio_path,
            segment_dir,
            segment_seconds=self._transcription_settings.segment_seconds,
        )
        self._logger.info(
            "Audio over upload limit, transcribing in segments",
            extra={
                "audio_bytes": size,
                "limit_bytes": self.upload_limit,
                "segments": len(segments),
            },
        )

        texts = []
        for number, segment in enumerate(segments, 1):
            self._logger.debug(
                "Transcribing segment",
                extra={"segment": number, "total": len(segments)},
            )
            result = await self._transcription.transcribe(segment, language)
            texts.append(result.text)
        return " ".join(texts)

    async def format_paragraphs(self, raw: str) -> str:
        """Add paragraph breaks without touching the words.

        Returns:
            The formatted text, or ``raw`` if the formatter changed words.
        """
        response = await self._llm.generate(
            [
                Message(role=MessageRole.SYSTEM, content=FORMAT_SYSTEM_PROMPT),
                Message(
                    role=MessageRole.USER,
                    content=FORMAT_USER_PROMPT.format(transcript=raw),
                ),
            ],
            model=self._llm_settings.format_model,
            temperature=0.0,
            max_tokens=self._llm_settings.format_max_tokens,
        )
        formatted = response.content.strip()
        if not same_words(raw, formatted):
            self._logger.warning(
                "Formatter changed transcript words, keeping raw text",
                extra={
                    "raw_words": len(raw.split()),
                    "formatted_words": len(formatted.split()),
                },
            )
            return raw.strip()
        return formatted


class SummaryService:
    """Writes the structured learner-facing summary of a transcript."""

    def __init__(
        self, llm: LLMServiceBase, settings: LLMSettings | None = None
    ) -> None:
        self._llm = llm
        self._settings = settings or LLMSettings()
        self._logger = get_logger(__name__)

    async def summarize(self, transcript: str) -> str:
        """Generate a markdown summary.

        Args:
            transcript: Transcript text.

        Returns:
            Summary with About / What You'll Learn / Key Takeaways sections.

        Raises:
            ValidationError: If the transcript is blank.
        """
        if not transcript or not transcript.strip():
            raise ValidationError("Transcript is empty")

        response = await self._llm.generate(
            [
                Message(role=MessageRole.SYSTEM, content=SUMMARY_SYSTEM_PROMPT),
                Message(
                    role=MessageRole.USER,
                    content=SUMMARY_USER_PROMPT.format(transcript=transcript),
                ),
            ],
            model=self._settings.summary_model,
            temperature=self._settings.summary_temperature,
            max_tokens=self._settings.summary_max_tokens,
        )
        self._logger.info(
            "Summary generated",
            extra={
                "transcript_chars": len(transcript),
                "summary_chars": len(response.content),
            },
        )
        return response.content
