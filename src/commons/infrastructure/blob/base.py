"""Abstract base class for object storage operations."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass
class BlobMetadata:
    """Metadata for a stored object."""

    path: str
    size_bytes: int
    content_type: str
    etag: str = ""


class BlobNotFoundError(Exception):
    """Raised when an object does not exist."""

    def __init__(self, bucket: str, path: str) -> None:
        self.bucket = bucket
        self.path = path
        super().__init__(f"Blob not found: {bucket}/{path}")


class BlobStorageBase(ABC):
    """Object storage keyed by ``(bucket, path)``.

    Source videos are read from it and extracted frame images are written
    to it. Paths are opaque strings to the pipeline.
    """

    @abstractmethod
    async def upload(
        self,
        bucket: str,
        path: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> BlobMetadata:
        """Upload an object, replacing any existing one at ``path``.

        Args:
            bucket: Target bucket name.
            path: Path within the bucket.
            data: Object content.
            content_type: MIME type of the content.

        Returns:
            Metadata of the stored object.
        """

    @abstractmethod
    async def download(self, bucket: str, path: str) -> bytes:
        """Download an object into memory.

        Args:
            bucket: Source bucket name.
            path: Path within the bucket.

        Returns:
            Object content.

        Raises:
            BlobNotFoundError: If the object doesn't exist.
        """

    @abstractmethod
    async def download_to_file(
        self,
        bucket: str,
        path: str,
        local_path: Path,
    ) -> None:
        """Download an object straight to a local file.

        Used for source videos, which may be too large to hold in memory.

        Args:
            bucket: Source bucket name.
            path: Path within the bucket.
            local_path: Local filesystem path to write to.

        Raises:
            BlobNotFoundError: If the object doesn't exist.
        """

    @abstractmethod
    async def exists(self, bucket: str, path: str) -> bool:
        """Check if an object exists."""

    @abstractmethod
    async def generate_presigned_url(
        self,
        bucket: str,
        path: str,
        expiry_seconds: int = 3600,
    ) -> str:
        """Generate a time-limited GET URL for an object.

        Args:
            bucket: Bucket name.
            path: Path within the bucket.
            expiry_seconds: URL validity duration.

        Returns:
            Presigned URL string.
        """

    @abstractmethod
    async def ensure_bucket(self, bucket: str) -> bool:
        """Create a bucket if it is missing.

        Returns:
            True if the bucket was created, False if it already existed.
        """
