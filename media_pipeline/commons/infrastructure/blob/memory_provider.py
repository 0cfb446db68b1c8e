"""In-memory object storage for local runs and tests."""

import time

from media_pipeline.commons.infrastructure.blob.base import (
    BlobNotFoundError,
    BlobStorageBase,
    HealthStatus,
)


class InMemoryBlobStorage(BlobStorageBase):
    """Dictionary-backed object storage.

    Presigned URLs use a fake ``memory://`` scheme. Transcoding can be switched
    off to mimic a store that cannot hold derived video variants.
    """

    def __init__(
        self,
        objects: dict[str, bytes] | None = None,
        *,
        transcoding: bool = True,
    ) -> None:
        self.objects: dict[str, bytes] = dict(objects or {})
        self.content_types: dict[str, str] = {}
        self._transcoding = transcoding

    @property
    def supports_transcoding(self) -> bool:
        return self._transcoding

    async def exists(self, key: str) -> bool:
        return key in self.objects

    async def get_buffer(self, key: str) -> bytes:
        try:
            return self.objects[key]
        except KeyError:
            raise BlobNotFoundError(key) from None

    async def upload(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        self.objects[key] = bytes(data)
        self.content_types[key] = content_type
        return key

    async def delete(self, key: str) -> bool:
        self.content_types.pop(key, None)
        return self.objects.pop(key, None) is not None

    async def get_presigned_url(self, key: str, expiry_seconds: int | None = None) -> str:
        return f"memory://{key}?expires={expiry_seconds or 3600}"

    async def health_check(self) -> HealthStatus:
        start = time.perf_counter()
        return HealthStatus(
            healthy=True,
            latency_ms=(time.perf_counter() - start) * 1000,
            message="In-memory storage",
            details={"objects": str(len(self.objects))},
        )
