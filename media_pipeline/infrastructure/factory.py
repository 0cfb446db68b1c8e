"""Infrastructure factory for creating service instances from configuration."""

from typing import Any, cast

from media_pipeline.commons.infrastructure.blob import (
    BlobStorageBase,
    InMemoryBlobStorage,
    MinioBlobStorage,
)
from media_pipeline.commons.infrastructure.documentdb import (
    DocumentDBBase,
    MongoDBDocumentDB,
)
from media_pipeline.commons.infrastructure.vectordb import QdrantVectorDB, VectorDBBase
from media_pipeline.commons.settings.models import Settings
from media_pipeline.commons.telemetry import get_logger
from media_pipeline.infrastructure.embeddings import (
    EmbeddingServiceBase,
    OpenAIEmbeddingService,
)
from media_pipeline.infrastructure.llm import LLMServiceBase, OpenAILLMService
from media_pipeline.infrastructure.media import FFmpegMediaToolkit, MediaToolkitBase
from media_pipeline.infrastructure.transcription import (
    OpenAIWhisperTranscription,
    TranscriptionServiceBase,
)


class InfrastructureFactory:
    """Creates and caches concrete providers based on settings."""

    def __init__(self, settings: Settings) -> None:
        """Initialize factory with settings.

        Args:
            settings: Application settings.
        """
        self._settings = settings
        self._instances: dict[str, Any] = {}
        self._logger = get_logger(__name__)

    @property
    def settings(self) -> Settings:
        return self._settings

    def get_blob_storage(self) -> BlobStorageBase:
        """Get object storage instance."""
        if "blob_storage" not in self._instances:
            blob = self._settings.blob_storage
            if blob.provider == "memory":
                self._instances["blob_storage"] = InMemoryBlobStorage()
            else:
                self._instances["blob_storage"] = MinioBlobStorage(
                    endpoint=blob.endpoint,
                    access_key=blob.access_key,
                    secret_key=blob.secret_key,
                    bucket=blob.bucket,
                    secure=blob.use_ssl,
                    region=blob.region,
                    presigned_expiry_seconds=blob.presigned_url_expiry_seconds,
                )
        return cast("BlobStorageBase", self._instances["blob_storage"])

    def get_document_db(self) -> DocumentDBBase:
        """Get document database instance."""
        if "document_db" not in self._instances:
            doc = self._settings.document_db
            if doc.username and doc.password:
                connection_string = (
                    f"mongodb://{doc.username}:{doc.password}"
                    f"@{doc.host}:{doc.port}/?authSource={doc.auth_source}"
                )
            else:
                connection_string = f"mongodb://{doc.host}:{doc.port}"
            self._instances["document_db"] = MongoDBDocumentDB(
                connection_string=connection_string,
                database_name=doc.database,
            )
        return cast("DocumentDBBase", self._instances["document_db"])

    def get_vector_db(self) -> VectorDBBase:
        """Get vector database instance."""
        if "vector_db" not in self._instances:
            vec = self._settings.vector_db
            self._instances["vector_db"] = QdrantVectorDB(
                host=vec.host,
                port=vec.port,
                grpc_port=vec.grpc_port,
                api_key=vec.api_key,
                url=vec.url,
                prefer_grpc=vec.prefer_grpc,
            )
        return cast("VectorDBBase", self._instances["vector_db"])

    def get_transcription_service(self) -> TranscriptionServiceBase:
        """Get speech-to-text service instance."""
        if "transcription" not in self._instances:
            trans = self._settings.transcription
            self._instances["transcription"] = OpenAIWhisperTranscription(
                api_key=trans.api_key,
                model=trans.model,
                max_upload_bytes=trans.max_upload_bytes,
                timeout_seconds=trans.timeout_seconds,
                retry_policy=self._settings.retry,
            )
        return cast("TranscriptionServiceBase", self._instances["transcription"])

    def get_embedding_service(self) -> EmbeddingServiceBase:
        """Get text embedding service instance."""
        if "embeddings" not in self._instances:
            embed = self._settings.embeddings
            self._instances["embeddings"] = OpenAIEmbeddingService(
                api_key=embed.api_key,
                model=embed.model,
                base_url=embed.endpoint,
                batch_size=embed.batch_size,
                retry_policy=self._settings.retry,
            )
        return cast("EmbeddingServiceBase", self._instances["embeddings"])

    def get_llm_service(self) -> LLMServiceBase:
        """Get text generation service instance."""
        if "llm" not in self._instances:
            llm = self._settings.llm
            self._instances["llm"] = OpenAILLMService(
                api_key=llm.api_key,
                model=llm.summary_model,
                base_url=llm.endpoint,
                timeout_seconds=llm.timeout_seconds,
                retry_policy=self._settings.retry,
            )
        return cast("LLMServiceBase", self._instances["llm"])

    def get_media_toolkit(self) -> MediaToolkitBase:
        """Get media tooling instance."""
        if "media_toolkit" not in self._instances:
            self._instances["media_toolkit"] = FFmpegMediaToolkit(
                ffmpeg_path=self._settings.media.ffmpeg_path
            )
        return cast("MediaToolkitBase", self._instances["media_toolkit"])

    async def close_all(self) -> None:
        """Close every cached provider that holds a connection."""
        for name, instance in self._instances.items():
            close = getattr(instance, "close", None)
            if close is None:
                continue
            try:
                await close()
            except Exception:
                self._logger.warning(
                    "Failed to close provider", extra={"provider": name}, exc_info=True
                )
        self._instances.clear()
