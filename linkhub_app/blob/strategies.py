"""
Blob storage strategies using Strategy Pattern.

Profile images are handed straight to a blob backend and addressed by a
public URL afterwards:
- Local: files on disk served by the app under /media (development)
- S3: any S3-compatible bucket (production)
- Memory: dict backed, for tests
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional
import asyncio

from botocore.exceptions import BotoCoreError, ClientError


class BlobStorageError(Exception):
    """Raised when a blob cannot be written or removed."""


class BlobStorage(ABC):
    """
    Abstract base class for blob storage strategies.

    All methods are async because uploads involve I/O.
    """

    @abstractmethod
    async def put(self, path: str, data: bytes, content_type: str = "image/jpeg") -> str:
        """
        Store a blob.

        Args:
            path: Object path, e.g. profiles/alice/profile-1700000000000.jpg
            data: Raw bytes
            content_type: MIME type of the blob

        Returns:
            Public URL of the stored blob
        """
        pass

    @abstractmethod
    async def delete(self, url: str) -> bool:
        """
        Delete a blob by the URL returned from put().

        Returns:
            True if a blob was removed, False if the URL is unknown
        """
        pass

    @staticmethod
    def _join(base: str, path: str) -> str:
        return f"{base.rstrip('/')}/{path.lstrip('/')}"

    def _path_from_url(self, base: str, url: str) -> Optional[str]:
        prefix = base.rstrip("/") + "/"
        if not url.startswith(prefix):
            return None
        return url[len(prefix):]


class LocalBlobStorage(BlobStorage):
    """
    Filesystem blob storage.

    Files live under root_dir and are served by the app itself,
    so public_base usually points at {base_url}/media.
    """

    def __init__(self, root_dir: str, public_base: str):
        self.root_dir = Path(root_dir)
        self.public_base = public_base

    def _resolve(self, path: str) -> Path:
        target = (self.root_dir / path).resolve()
        if self.root_dir.resolve() not in target.parents:
            raise BlobStorageError(f"Path escapes storage root: {path}")
        return target

    async def put(self, path: str, data: bytes, content_type: str = "image/jpeg") -> str:
        target = self._resolve(path)
        try:
            await asyncio.to_thread(self._write, target, data)
        except OSError as e:
            raise BlobStorageError(str(e)) from e
        return self._join(self.public_base, path)

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

    async def delete(self, url: str) -> bool:
        path = self._path_from_url(self.public_base, url)
        if path is None:
            return False
        target = self._resolve(path)
        try:
            await asyncio.to_thread(target.unlink)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise BlobStorageError(str(e)) from e
        return True


class S3BlobStorage(BlobStorage):
    """
    S3-compatible blob storage (AWS S3, Cloudflare R2, MinIO).

    boto3 is synchronous, so calls run in a worker thread.
    Objects are uploaded with a public-read friendly URL layout:
    {public_base}/{path}
    """

    def __init__(self, client, bucket: str, public_base: str):
        """
        Args:
            client: boto3 S3 client
            bucket: Bucket name
            public_base: Public URL prefix for objects in the bucket
        """
        self.client = client
        self.bucket = bucket
        self.public_base = public_base

    async def put(self, path: str, data: bytes, content_type: str = "image/jpeg") -> str:
        try:
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=self.bucket,
                Key=path,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            raise BlobStorageError(str(e)) from e
        return self._join(self.public_base, path)

    async def delete(self, url: str) -> bool:
        path = self._path_from_url(self.public_base, url)
        if path is None:
            return False
        try:
            await asyncio.to_thread(self.client.delete_object, Bucket=self.bucket, Key=path)
        except (BotoCoreError, ClientError) as e:
            raise BlobStorageError(str(e)) from e
        return True


class InMemoryBlobStorage(BlobStorage):
    """
    Dict backed blob storage for tests.
    Note: Async for interface consistency.
    """

    def __init__(self, public_base: str = "memory://blobs"):
        self.public_base = public_base
        self.blobs: Dict[str, bytes] = {}

    async def put(self, path: str, data: bytes, content_type: str = "image/jpeg") -> str:
        self.blobs[path] = data
        return self._join(self.public_base, path)

    async def delete(self, url: str) -> bool:
        path = self._path_from_url(self.public_base, url)
        if path is None or path not in self.blobs:
            return False
        del self.blobs[path]
        return True
