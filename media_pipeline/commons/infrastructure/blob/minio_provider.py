"""MinIO implementation of object storage."""

import asyncio
import io
import time
from collections.abc import Callable
from datetime import timedelta
from typing import Any, TypeVar

from minio import Minio
from minio.error import S3Error

from media_pipeline.commons.infrastructure.blob.base import (
    BlobNotFoundError,
    BlobStorageBase,
    HealthStatus,
)

T = TypeVar("T")

_MISSING_CODES = frozenset({"NoSuchKey", "NoSuchObject", "NotFound"})


class MinioBlobStorage(BlobStorageBase):
    """S3-compatible object storage (MinIO locally, S3 or R2 in production)."""

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        bucket: str,
        secure: bool = False,
        region: str | None = None,
        presigned_expiry_seconds: int = 3600,
    ) -> None:
        """Initialize MinIO client.

        Args:
            endpoint: MinIO/S3 endpoint (e.g., "localhost:9000").
            access_key: Access key ID.
            secret_key: Secret access key.
            bucket: Bucket all keys live in.
            secure: Use HTTPS connection.
            region: Region (optional, for S3).
            presigned_expiry_seconds: Default lifetime of presigned URLs.
        """
        self._client = Minio(
            endpoint=endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
            region=region,
        )
        self._endpoint = endpoint
        self._bucket = bucket
        self._presigned_expiry = presigned_expiry_seconds

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, fn, *args)

    async def exists(self, key: str) -> bool:
        """Check if an object exists."""

        def _stat() -> bool:
            try:
                self._client.stat_object(self._bucket, key)
            except S3Error as e:
                if e.code in _MISSING_CODES:
                    return False
                raise
            return True

        return bool(await self._run(_stat))

    async def get_buffer(self, key: str) -> bytes:
        """Download an object into memory."""

        def _download() -> bytes:
            try:
                response = self._client.get_object(self._bucket, key)
            except S3Error as e:
                if e.code in _MISSING_CODES:
                    raise BlobNotFoundError(key) from e
                raise
            try:
                return bytes(response.read())
            finally:
                response.close()
                response.release_conn()

        return bytes(await self._run(_download))

    async def upload(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> str:
        """Store an object, replacing any existing one."""

        def _put() -> None:
            self._client.put_object(
                bucket_name=self._bucket,
                object_name=key,
                data=io.BytesIO(data),
                length=len(data),
                content_type=content_type,
            )

        await self._run(_put)
        return key

    async def delete(self, key: str) -> bool:
        """Delete an object."""
        if not await self.exists(key):
            return False
        await self._run(self._client.remove_object, self._bucket, key)
        return True

    async def get_presigned_url(self, key: str, expiry_seconds: int | None = None) -> str:
        """Generate a presigned GET URL."""
        expires = timedelta(seconds=expiry_seconds or self._presigned_expiry)

        def _presign() -> str:
            return str(
                self._client.presigned_get_object(
                    bucket_name=self._bucket,
                    object_name=key,
                    expires=expires,
                )
            )

        return str(await self._run(_presign))

    async def ensure_bucket(self) -> bool:
        """Create the configured bucket if missing. Returns True if created."""

        def _create() -> bool:
            if self._client.bucket_exists(self._bucket):
                return False
            self._client.make_bucket(self._bucket)
            return True

        return bool(await self._run(_create))

    async def health_check(self) -> HealthStatus:
        """Check service health."""
        start = time.perf_counter()
        try:
            await self._run(self._client.bucket_exists, self._bucket)
        except Exception as e:
            return HealthStatus(
                healthy=False,
                latency_ms=(time.perf_counter() - start) * 1000,
                message=f"Object storage health check failed: {e}",
                details={"endpoint": self._endpoint, "error": str(e)},
            )
        return HealthStatus(
            healthy=True,
            latency_ms=(time.perf_counter() - start) * 1000,
            message="Object storage is healthy",
            details={"endpoint": self._endpoint, "bucket": self._bucket},
        )
