"""
Factory for creating blob storage instances.
Simple, clean factory with singleton caching.
"""

from enum import Enum

import structlog

from .strategies import BlobStorage, LocalBlobStorage, S3BlobStorage, InMemoryBlobStorage
from linkhub_app.config import settings

logger = structlog.get_logger()


class BlobBackend(Enum):
    """Available blob storage backends"""
    LOCAL = "local"
    S3 = "s3"
    MEMORY = "memory"


class BlobStorageFactory:
    """
    Simple factory for creating blob storage instances.

    Gets configuration from settings (not passed as parameters).
    """

    _instance: BlobStorage = None  # Single cached instance

    @classmethod
    def create(cls, backend: BlobBackend) -> BlobStorage:
        """
        Create or return cached blob storage instance.

        Args:
            backend: Type of blob backend (from enum)

        Returns:
            Singleton blob storage instance
        """
        if cls._instance is not None:
            return cls._instance

        if backend == BlobBackend.LOCAL:
            public_base = settings.blob_public_base or f"{settings.base_url}/media"
            cls._instance = LocalBlobStorage(settings.blob_local_dir, public_base)
            logger.info("blob_storage_initialized", backend="local", root=settings.blob_local_dir)

        elif backend == BlobBackend.S3:
            import boto3

            if not settings.s3_bucket:
                raise ValueError("s3_bucket must be set for the s3 blob backend")

            client = boto3.client(
                "s3",
                endpoint_url=settings.s3_endpoint_url,
                region_name=settings.s3_region,
                aws_access_key_id=settings.s3_access_key_id,
                aws_secret_access_key=settings.s3_secret_access_key,
            )
            public_base = settings.blob_public_base or f"https://{settings.s3_bucket}.s3.amazonaws.com"
            cls._instance = S3BlobStorage(client, settings.s3_bucket, public_base)
            logger.info("blob_storage_initialized", backend="s3", bucket=settings.s3_bucket)

        elif backend == BlobBackend.MEMORY:
            cls._instance = InMemoryBlobStorage()
            logger.info("blob_storage_initialized", backend="memory")

        else:
            raise ValueError(f"Unknown blob backend: {backend}")

        return cls._instance

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None
