"""MinIO implementation of object storage."""

import asyncio
import io
from collections.abc import Callable
from datetime import timedelta
from pathlib import Path
from typing import TypeVar

from minio import Minio
from minio.error import S3Error

from src.commons.infrastructure.blob.base import (
    BlobMetadata,
    BlobNotFoundError,
    BlobStorageBase,
)

T = TypeVar("T")

_MISSING_CODES = frozenset({"NoSuchKey", "NoSuchBucket", "NoSuchObject"})


class MinioBlobStorage(BlobStorageBase):
    """MinIO implementation of object storage.

    Works with both MinIO (local development) and AWS S3. The MinIO client
    is synchronous, so every call runs in the default executor.
    """

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        secure: bool = False,
        region: str | None = None,
    ) -> None:
        """Initialize MinIO client.

        Args:
            endpoint: MinIO/S3 endpoint (e.g., "localhost:9000").
            access_key: Access key ID.
            secret_key: Secret access key.
            secure: Use HTTPS connection.
            region: AWS region (optional, for S3).
        """
        self._client = Minio(
            endpoint=endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
            region=region,
        )

    async def _run(self, bucket: str, path: str, fn: Callable[[], T]) -> T:
        """Run a blocking client call, mapping missing objects."""
        loop = asyncio.get_running_loop()

        def _call() -> T:
            try:
                return fn()
            except S3Error as e:
                if e.code in _MISSING_CODES:
                    raise BlobNotFoundError(bucket, path) from e
                raise

        return await loop.run_in_executor(None, _call)

    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> BlobMetadata:
        """Upload an object, replacing any existing one at ``path``."""

        def _upload() -> BlobMetadata:
            result = self._client.put_object(
                bucket_name=bucket,
                object_name=path,
                data=io.BytesIO(data),
                length=len(data),
                content_type=content_type,
            )
            return BlobMetadata(
                path=path,
                size_bytes=len(data),
                content_type=content_type,
                etag=result.etag or "",
            )

        return await self._run(bucket, path, _upload)

    async def download(self, bucket: str, path: str) -> bytes:
        """Download an object into memory."""

        def _download() -> bytes:
            response = self._client.get_object(bucket, path)
            try:
                data: bytes = response.read()
                return data
            finally:
                response.close()
                response.release_conn()

        return await self._run(bucket, path, _download)

    async def download_to_file(
        self,
        bucket: str,
        path: str,
        local_path: Path,
    ) -> None:
        """Download an object straight to a local file."""
        await self._run(
            bucket,
            path,
            lambda: self._client.fget_object(bucket, path, str(local_path)),
        )

    async def exists(self, bucket: str, path: str) -> bool:
        """Check if an object exists."""
        try:
            await self._run(
                bucket, path, lambda: self._client.stat_object(bucket, path)
            )
        except BlobNotFoundError:
            return False
        return True

    async def generate_presigned_url(
        self,
        bucket: str,
        path: str,
        expiry_seconds: int = 3600,
    ) -> str:
        """Generate a time-limited GET URL for an object."""
        url = await self._run(
            bucket,
            path,
            lambda: self._client.presigned_get_object(
                bucket_name=bucket,
                object_name=path,
                expires=timedelta(seconds=expiry_seconds),
            ),
        )
        return str(url)

    async def ensure_bucket(self, bucket: str) -> bool:
        """Create a bucket if it is missing."""

        def _ensure() -> bool:
            if self._client.bucket_exists(bucket):
                return False
            self._client.make_bucket(bucket)
            return True

        return await self._run(bucket, "", _ensure)
