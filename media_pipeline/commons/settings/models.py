"""Pydantic settings models for pipeline configuration."""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseModel):
    """Application-level settings."""

    name: str = "lecture-media-pipeline"
    version: str = "0.1.0"
    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False


class BlobStorageSettings(BaseModel):
    """Object storage settings (MinIO, S3 or R2)."""

    provider: Literal["minio", "memory"] = "minio"
    endpoint: str = "localhost:9000"
    access_key: str = ""
    secret_key: str = ""
    use_ssl: bool = False
    region: str = "us-east-1"
    bucket: str = "course-media"
    presigned_url_expiry_seconds: int = 3600


class VectorCollectionSettings(BaseModel):
    """Vector DB collection names."""

    transcript_chunks: str = "transcript_chunks"


class VectorDBSettings(BaseModel):
    """Vector database settings (Qdrant)."""

    provider: Literal["qdrant"] = "qdrant"
    host: str = "localhost"
    port: int = 6333
    grpc_port: int = 6334
    api_key: str | None = None
    url: str | None = None
    prefer_grpc: bool = False
    collections: VectorCollectionSettings = Field(
        default_factory=VectorCollectionSettings
    )
    default_limit: int = Field(default=10, ge=1, le=100)


class DocumentCollectionSettings(BaseModel):
    """Document DB collection names."""

    jobs: str = "jobs"
    media_entities: str = "media_entities"


class DocumentDBSettings(BaseModel):
    """Document database settings (MongoDB)."""

    provider: Literal["mongodb"] = "mongodb"
    host: str = "localhost"
    port: int = 27017
    username: str = ""
    password: str = ""
    database: str = "course_media"
    auth_source: str = "admin"
    collections: DocumentCollectionSettings = Field(
        default_factory=DocumentCollectionSettings
    )


class TranscriptionSettings(BaseModel):
    """Speech-to-text settings."""

    provider: Literal["openai_whisper"] = "openai_whisper"
    api_key: str = ""
    model: str = "whisper-1"
    language: str | None = None
    # Whisper rejects uploads above 25 MB; split well below that.
    max_upload_bytes: int = 20 * 1024 * 1024
    segment_seconds: int = Field(default=600, ge=30)
    timeout_seconds: int = 300


class EmbeddingsSettings(BaseModel):
    """Text embedding settings."""

    provider: Literal["openai"] = "openai"
    api_key: str = ""
    endpoint: str | None = None
    model: str = "text-embedding-3-small"
    dimensions: int = 1536
    batch_size: int = Field(default=100, ge=1, le=2048)


class LLMSettings(BaseModel):
    """Text generation settings for paragraph formatting and summaries."""

    provider: Literal["openai"] = "openai"
    api_key: str = ""
    endpoint: str | None = None
    format_model: str = "gpt-4o-mini"
    summary_model: str = "gpt-4o"
    format_max_tokens: int = 16000
    summary_max_tokens: int = 1000
    summary_temperature: float = Field(default=0.3, ge=0, le=2)
    timeout_seconds: int = 120


class ChunkingSettings(BaseModel):
    """Transcript chunking settings."""

    max_tokens: int = Field(default=500, ge=8)
    encoding: str = "cl100k_base"


class VectorizationSettings(BaseModel):
    """Chunk embedding and persistence settings."""

    embedding_batch_size: int = Field(default=20, ge=1)


class MediaSettings(BaseModel):
    """External media tooling settings."""

    ffmpeg_path: str = "ffmpeg"
    transcoding_enabled: bool = True
    thumbnails_enabled: bool = True
    qualities: list[str] = Field(default_factory=lambda: ["720p", "480p"])
    thumbnail_seek_seconds: float = 1.0
    thumbnail_width: int = 640
    thumbnail_quality: int = Field(default=85, ge=1, le=95)


class WorkerSettings(BaseModel):
    """Job worker loop settings."""

    poll_interval_seconds: float = Field(default=5.0, gt=0)
    error_backoff_seconds: float = Field(default=10.0, gt=0)
    max_concurrency: int = Field(default=1, ge=1)


class RetrySettings(BaseModel):
    """Retry policy for rate-limited external APIs."""

    max_attempts: int = Field(default=3, ge=1)
    initial_delay_seconds: float = Field(default=1.0, ge=0)
    max_delay_seconds: float = Field(default=30.0, ge=0)


class TelemetrySettings(BaseModel):
    """Logging settings."""

    log_format: Literal["json", "text"] = "json"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class Settings(BaseSettings):
    """Root settings container with environment loading."""

    app: AppSettings = Field(default_factory=AppSettings)
    blob_storage: BlobStorageSettings = Field(default_factory=BlobStorageSettings)
    vector_db: VectorDBSettings = Field(default_factory=VectorDBSettings)
    document_db: DocumentDBSettings = Field(default_factory=DocumentDBSettings)
    transcription: TranscriptionSettings = Field(default_factory=TranscriptionSettings)
    embeddings: EmbeddingsSettings = Field(default_factory=EmbeddingsSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    chunking: ChunkingSettings = Field(default_factory=ChunkingSettings)
    vectorization: VectorizationSettings = Field(
        default_factory=VectorizationSettings
    )
    media: MediaSettings = Field(default_factory=MediaSettings)
    worker: WorkerSettings = Field(default_factory=WorkerSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="MEDIA_PIPELINE__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )
