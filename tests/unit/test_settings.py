"""Unit tests for settings models and loader."""

import json
from pathlib import Path

import pytest

from media_pipeline.commons.settings.loader import (
    ENVIRONMENT_VARIABLE,
    SettingsLoader,
    deep_merge,
    get_settings,
    parse_env_value,
    reset_settings,
)
from media_pipeline.commons.settings.models import (
    AppSettings,
    ChunkingSettings,
    LLMSettings,
    MediaSettings,
    RetrySettings,
    Settings,
    TranscriptionSettings,
    WorkerSettings,
)


class TestSettingsDefaults:
    """Defaults match the production pipeline configuration."""

    def test_app_defaults(self):
        settings = AppSettings()
        assert settings.name == "lecture-media-pipeline"
        assert settings.environment == "dev"

    def test_invalid_environment(self):
        with pytest.raises(ValueError):
            AppSettings(environment="qa")  # type: ignore[arg-type]

    def test_transcription_limits(self):
        settings = TranscriptionSettings()
        assert settings.max_upload_bytes == 20 * 1024 * 1024
        assert settings.segment_seconds == 600
        assert settings.model == "whisper-1"

    def test_llm_models(self):
        settings = LLMSettings()
        assert settings.format_model == "gpt-4o-mini"
        assert settings.summary_model == "gpt-4o"
        assert settings.summary_temperature == 0.3

    def test_media_defaults(self):
        settings = MediaSettings()
        assert settings.qualities == ["720p", "480p"]
        assert settings.thumbnail_seek_seconds == 1.0
        assert settings.thumbnail_width == 640

    def test_worker_defaults(self):
        settings = WorkerSettings()
        assert settings.poll_interval_seconds == 5.0
        assert settings.error_backoff_seconds == 10.0
        assert settings.max_concurrency == 1

    def test_worker_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            WorkerSettings(poll_interval_seconds=0)

    def test_retry_defaults(self):
        settings = RetrySettings()
        assert settings.max_attempts == 3
        assert settings.initial_delay_seconds == 1.0

    def test_chunking_defaults(self):
        settings = ChunkingSettings()
        assert settings.max_tokens == 500
        assert settings.encoding == "cl100k_base"

    def test_root_sections(self):
        settings = Settings()
        assert settings.document_db.collections.jobs == "jobs"
        assert settings.vector_db.collections.transcript_chunks == "transcript_chunks"
        assert settings.vectorization.embedding_batch_size == 20
        assert settings.embeddings.batch_size == 100


class TestLoaderHelpers:
    """Tests for merge and environment parsing helpers."""

    def test_deep_merge_recurses(self):
        merged = deep_merge(
            {"worker": {"poll_interval_seconds": 5, "max_concurrency": 1}},
            {"worker": {"poll_interval_seconds": 2}},
        )
        assert merged == {"worker": {"poll_interval_seconds": 2, "max_concurrency": 1}}

    def test_deep_merge_does_not_mutate_base(self):
        base = {"a": {"b": 1}}
        deep_merge(base, {"a": {"b": 2}})
        assert base == {"a": {"b": 1}}

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("true", True),
            ("False", False),
            ("42", 42),
            ("1.5", 1.5),
            ('["720p"]', ["720p"]),
            ("gpt-4o", "gpt-4o"),
        ],
    )
    def test_parse_env_value(self, raw, expected):
        assert parse_env_value(raw) == expected


class TestSettingsLoader:
    """Tests for layered loading."""

    def test_loads_defaults_without_files(self, tmp_path: Path):
        settings = SettingsLoader(tmp_path, "dev", environ={}).load()
        assert settings.worker.poll_interval_seconds == 5.0

    def test_environment_file_overrides_base(self, tmp_path: Path):
        (tmp_path / "appsettings.json").write_text(
            json.dumps(
                {
                    "worker": {"poll_interval_seconds": 7},
                    "media": {"qualities": ["720p"]},
                }
            )
        )
        (tmp_path / "appsettings.prod.json").write_text(
            json.dumps({"worker": {"poll_interval_seconds": 3}})
        )

        settings = SettingsLoader(tmp_path, "prod", environ={}).load()

        assert settings.worker.poll_interval_seconds == 3
        assert settings.media.qualities == ["720p"]

    def test_environment_variables_win(self, tmp_path: Path):
        (tmp_path / "appsettings.json").write_text(
            json.dumps({"retry": {"max_attempts": 5}})
        )
        environ = {
            "MEDIA_PIPELINE__RETRY__MAX_ATTEMPTS": "2",
            "MEDIA_PIPELINE__MEDIA__TRANSCODING_ENABLED": "false",
            "UNRELATED": "ignored",
        }

        settings = SettingsLoader(tmp_path, "dev", environ=environ).load()

        assert settings.retry.max_attempts == 2
        assert settings.media.transcoding_enabled is False

    def test_environment_name_from_variable(self, tmp_path: Path):
        loader = SettingsLoader(tmp_path, environ={ENVIRONMENT_VARIABLE: "staging"})
        assert loader.environment == "staging"

    def test_rejects_non_object_file(self, tmp_path: Path):
        (tmp_path / "appsettings.json").write_text("[1, 2]")
        with pytest.raises(ValueError, match="JSON object"):
            SettingsLoader(tmp_path, "dev", environ={}).load()


class TestGetSettings:
    """Tests for the cached accessor."""

    def setup_method(self):
        reset_settings()

    def teardown_method(self):
        reset_settings()

    def test_cached_between_calls(self, tmp_path: Path):
        first = get_settings(tmp_path, "dev")
        assert get_settings() is first

    def test_reload_builds_new_instance(self, tmp_path: Path):
        first = get_settings(tmp_path, "dev")
        assert get_settings(tmp_path, "dev", reload=True) is not first
