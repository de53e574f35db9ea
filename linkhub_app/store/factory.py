"""
Factory for creating key-value store instances.
Simple, clean factory with singleton caching.
"""

from enum import Enum

import structlog

from .strategies import KeyValueStore, RedisKeyValueStore, InMemoryKeyValueStore
from linkhub_app.config import settings

logger = structlog.get_logger()


class StoreBackend(Enum):
    """Available key-value store backends"""
    REDIS = "redis"
    MEMORY = "memory"


class KeyValueStoreFactory:
    """
    Simple factory for creating key-value store instances.

    Uses Singleton Pattern - creates instance once, reuses it.
    Gets configuration from settings (not passed as parameters).
    """

    _instance: KeyValueStore = None  # Single cached instance

    @classmethod
    def create(cls, backend: StoreBackend) -> KeyValueStore:
        """
        Create or return cached store instance.

        Args:
            backend: Type of store backend (from enum)

        Returns:
            Singleton store instance

        Raises:
            ValueError: If backend is unknown
        """
        if cls._instance is not None:
            return cls._instance

        if backend == StoreBackend.REDIS:
            import redis.asyncio as aioredis

            # Connection is lazy, the app pings it during startup
            redis_client = aioredis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_connect_timeout=settings.redis_socket_timeout,
                socket_timeout=settings.redis_socket_timeout,
            )
            cls._instance = RedisKeyValueStore(redis_client)
            logger.info("store_initialized", backend="redis")

        elif backend == StoreBackend.MEMORY:
            cls._instance = InMemoryKeyValueStore()
            logger.info("store_initialized", backend="memory")

        else:
            raise ValueError(f"Unknown store backend: {backend}")

        return cls._instance

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None
