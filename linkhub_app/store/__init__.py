"""
Key-value store module for LinkHub.
Implements Strategy Pattern for flexible store backends.
"""

from .strategies import (
    KeyValueStore,
    RedisKeyValueStore,
    InMemoryKeyValueStore,
    StoreError,
)
from .factory import KeyValueStoreFactory, StoreBackend

__all__ = [
    "KeyValueStore",
    "RedisKeyValueStore",
    "InMemoryKeyValueStore",
    "StoreError",
    "KeyValueStoreFactory",
    "StoreBackend",
]
