"""
Blob storage module for profile images.
Implements Strategy Pattern for pluggable object storage.
"""

from .strategies import (
    BlobStorage,
    BlobStorageError,
    LocalBlobStorage,
    S3BlobStorage,
    InMemoryBlobStorage,
)
from .factory import BlobStorageFactory, BlobBackend

__all__ = [
    "BlobStorage",
    "BlobStorageError",
    "LocalBlobStorage",
    "S3BlobStorage",
    "InMemoryBlobStorage",
    "BlobStorageFactory",
    "BlobBackend",
]
