"""Abstract base class for object storage keyed by object name."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class HealthStatus:
    """Health check result."""

    healthy: bool
    latency_ms: float
    message: str | None = None
    details: dict[str, str] | None = None


class BlobNotFoundError(Exception):
    """Raised when an object key does not exist."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Object not found: {key}")


class BlobStorageBase(ABC):
    """Object storage bound to a single bucket.

    Implementations should handle:
    - MinIO / S3 / Cloudflare R2 (S3-compatible APIs)
    - In-memory storage for local runs and tests
    """

    @property
    def supports_transcoding(self) -> bool:
        """Whether derived video variants can be written back to this store."""
        return True

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if an object exists.

        Args:
            key: Object key.

        Returns:
            True if the object exists, False otherwise.
        """

    @abstractmethod
    async def get_buffer(self, key: str) -> bytes:
        """Download an object into memory.

        Args:
            key: Object key.

        Returns:
            Object content.

        Raises:
            BlobNotFoundError: If the object doesn't exist.
        """

    @abstractmethod
    async def upload(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        """Store an object, replacing any existing one.

        Args:
            key: Object key.
            data: Object content.
            content_type: MIME type of the content.

        Returns:
            The key written.
        """

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete an object.

        Args:
            key: Object key.

        Returns:
            True if deleted, False if it didn't exist.
        """

    @abstractmethod
    async def get_presigned_url(self, key: str, expiry_seconds: int | None = None) -> str:
        """Generate a time-limited download URL.

        Args:
            key: Object key.
            expiry_seconds: URL validity. Provider default when omitted.

        Returns:
            URL string.
        """

    @abstractmethod
    async def health_check(self) -> HealthStatus:
        """Check service health.

        Returns:
            Health status with latency info.
        """
