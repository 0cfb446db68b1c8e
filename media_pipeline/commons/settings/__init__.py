"""Settings management module."""

from media_pipeline.commons.settings.loader import (
    SettingsLoader,
    get_settings,
    reset_settings,
)
from media_pipeline.commons.settings.models import (
    AppSettings,
    BlobStorageSettings,
    ChunkingSettings,
    DocumentCollectionSettings,
    DocumentDBSettings,
    EmbeddingsSettings,
    LLMSettings,
    MediaSettings,
    RetrySettings,
    Settings,
    TelemetrySettings,
    TranscriptionSettings,
    VectorCollectionSettings,
    VectorDBSettings,
    VectorizationSettings,
    WorkerSettings,
)

__all__ = [
    # Loader
    "SettingsLoader",
    "get_settings",
    "reset_settings",
    # Main settings
    "Settings",
    "AppSettings",
    # Storage
    "BlobStorageSettings",
    "DocumentDBSettings",
    "DocumentCollectionSettings",
    "VectorDBSettings",
    "VectorCollectionSettings",
    # External APIs
    "TranscriptionSettings",
    "EmbeddingsSettings",
    "LLMSettings",
    "RetrySettings",
    # Processing
    "ChunkingSettings",
    "VectorizationSettings",
    "MediaSettings",
    "WorkerSettings",
    # Telemetry
    "TelemetrySettings",
]
