"""Object storage abstractions and implementations."""

from media_pipeline.commons.infrastructure.blob.base import (
    BlobNotFoundError,
    BlobStorageBase,
    HealthStatus,
)
from media_pipeline.commons.infrastructure.blob.keys import (
    derive_quality_key,
    derive_thumbnail_key,
)
from media_pipeline.commons.infrastructure.blob.memory_provider import (
    InMemoryBlobStorage,
)
from media_pipeline.commons.infrastructure.blob.minio_provider import MinioBlobStorage

__all__ = [
    # Base classes
    "BlobStorageBase",
    "HealthStatus",
    # Implementations
    "InMemoryBlobStorage",
    "MinioBlobStorage",
    # Key derivation
    "derive_quality_key",
    "derive_thumbnail_key",
    # Exceptions
    "BlobNotFoundError",
]
