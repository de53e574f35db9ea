"""
Key-value store strategies using Strategy Pattern.
Allows switching between different store backends (Redis, In-Memory).

The data layer only talks to the KeyValueStore interface, so the same
service code runs against a managed Redis in production and a plain
dict in development and tests.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from fnmatch import fnmatchcase
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Union
import json
import time

from redis.exceptions import RedisError


Score = Union[float, str]


class StoreError(Exception):
    """Raised when the underlying store cannot complete an operation."""


def encode_value(value: Any) -> str:
    """Encode a hash field value (JSON keeps bools, ints and dicts intact)"""
    return json.dumps(value)


def decode_value(raw: Optional[str]) -> Any:
    """Decode a hash field value written by encode_value()"""
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        # Plain strings written by other clients
        return raw


class KeyValueStore(ABC):
    """
    Abstract base class for key-value stores.

    This is the Strategy Pattern interface - the services never know
    which backend they are talking to.

    Covers exactly the primitives the data layer needs:
    - strings with optional TTL and set-if-not-exists
    - hashes (field values JSON encoded)
    - sets
    - sorted sets (used as timestamped event logs)

    All methods are async because store operations involve I/O (network for Redis).
    Backend failures are raised as StoreError.
    """

    # Strings

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Get a string value, None if missing or expired"""
        pass

    @abstractmethod
    async def set(
        self,
        key: str,
        value: str,
        ttl: Optional[int] = None,
        nx: bool = False
    ) -> bool:
        """
        Set a string value.

        Args:
            key: Store key
            value: Value to store
            ttl: Optional time to live in seconds
            nx: Only set if the key does not exist yet

        Returns:
            True if the value was written, False if nx prevented it
        """
        pass

    @abstractmethod
    async def delete(self, *keys: str) -> int:
        """Delete keys, returns the number of keys removed"""
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if key exists"""
        pass

    # Hashes

    @abstractmethod
    async def hget(self, key: str, field: str) -> Any:
        """Get a single decoded hash field"""
        pass

    @abstractmethod
    async def hgetall(self, key: str) -> Optional[Dict[str, Any]]:
        """Get all decoded hash fields, None if the hash does not exist"""
        pass

    @abstractmethod
    async def hset(self, key: str, mapping: Mapping[str, Any]) -> None:
        """Write (merge) fields into a hash"""
        pass

    @abstractmethod
    async def hsetnx(self, key: str, field: str, value: Any) -> bool:
        """Set a hash field only if it is absent. True if it was written."""
        pass

    @abstractmethod
    async def hset_missing(self, key: str, mapping: Mapping[str, Any]) -> bool:
        """
        Atomically write every field of mapping that is not yet present.

        Returns:
            True if at least one field was created
        """
        pass

    @abstractmethod
    async def hincrby(self, key: str, field: str, amount: int = 1) -> int:
        """Atomically increment an integer hash field"""
        pass

    # Sets

    @abstractmethod
    async def sadd(self, key: str, *members: str) -> int:
        pass

    @abstractmethod
    async def srem(self, key: str, *members: str) -> int:
        pass

    @abstractmethod
    async def smembers(self, key: str) -> Set[str]:
        pass

    # Sorted sets

    @abstractmethod
    async def zadd(self, key: str, mapping: Mapping[str, float]) -> int:
        """Add members with scores, returns number of new members"""
        pass

    @abstractmethod
    async def zrangebyscore(
        self,
        key: str,
        min_score: Score,
        max_score: Score,
        withscores: bool = False
    ) -> List[Any]:
        """
        Members with min_score <= score <= max_score, ascending by score.

        With withscores=True, returns (member, score) pairs instead.
        """
        pass

    @abstractmethod
    async def zcard(self, key: str) -> int:
        pass

    # Maintenance

    @abstractmethod
    async def keys(self, pattern: str = "*") -> List[str]:
        """All keys matching a glob pattern"""
        pass

    @abstractmethod
    async def flush(self) -> bool:
        """Remove every key (use with caution!)"""
        pass

    @abstractmethod
    async def ping(self) -> bool:
        pass

    async def close(self) -> None:
        """Release backend resources"""
        return None


@contextmanager
def _translate_errors():
    try:
        yield
    except RedisError as e:
        raise StoreError(str(e)) from e


class RedisKeyValueStore(KeyValueStore):
    """
    Redis store implementation with async operations.

    Production-ready store with:
    - Shared state across every app server
    - Atomic single-key primitives (HINCRBY, SET NX, HSETNX)
    - TTL support for sessions
    - Non-blocking I/O (redis.asyncio)
    """

    def __init__(self, redis_client):
        """
        Initialize Redis store.

        Args:
            redis_client: redis.asyncio.Redis instance created with decode_responses=True
        """
        self.redis = redis_client

    async def get(self, key: str) -> Optional[str]:
        with _translate_errors():
            return await self.redis.get(key)

    async def set(self, key: str, value: str, ttl: Optional[int] = None, nx: bool = False) -> bool:
        with _translate_errors():
            return bool(await self.redis.set(key, value, ex=ttl, nx=nx))

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        with _translate_errors():
            return await self.redis.delete(*keys)

    async def exists(self, key: str) -> bool:
        with _translate_errors():
            return bool(await self.redis.exists(key))

    async def hget(self, key: str, field: str) -> Any:
        with _translate_errors():
            return decode_value(await self.redis.hget(key, field))

    async def hgetall(self, key: str) -> Optional[Dict[str, Any]]:
        with _translate_errors():
            raw = await self.redis.hgetall(key)
        if not raw:
            return None
        return {field: decode_value(value) for field, value in raw.items()}

    async def hset(self, key: str, mapping: Mapping[str, Any]) -> None:
        if not mapping:
            return
        encoded = {field: encode_value(value) for field, value in mapping.items()}
        with _translate_errors():
            await self.redis.hset(key, mapping=encoded)

    async def hsetnx(self, key: str, field: str, value: Any) -> bool:
        with _translate_errors():
            return bool(await self.redis.hsetnx(key, field, encode_value(value)))

    async def hset_missing(self, key: str, mapping: Mapping[str, Any]) -> bool:
        if not mapping:
            return False
        with _translate_errors():
            # MULTI/EXEC so concurrent creators never interleave field writes
            async with self.redis.pipeline(transaction=True) as pipe:
                for field, value in mapping.items():
                    pipe.hsetnx(key, field, encode_value(value))
                results = await pipe.execute()
        return any(results)

    async def hincrby(self, key: str, field: str, amount: int = 1) -> int:
        with _translate_errors():
            return int(await self.redis.hincrby(key, field, amount))

    async def sadd(self, key: str, *members: str) -> int:
        if not members:
            return 0
        with _translate_errors():
            return await self.redis.sadd(key, *members)

    async def srem(self, key: str, *members: str) -> int:
        if not members:
            return 0
        with _translate_errors():
            return await self.redis.srem(key, *members)

    async def smembers(self, key: str) -> Set[str]:
        with _translate_errors():
            return set(await self.redis.smembers(key))

    async def zadd(self, key: str, mapping: Mapping[str, float]) -> int:
        with _translate_errors():
            return await self.redis.zadd(key, dict(mapping))

    async def zrangebyscore(
        self,
        key: str,
        min_score: Score,
        max_score: Score,
        withscores: bool = False
    ) -> List[Any]:
        with _translate_errors():
            result = await self.redis.zrangebyscore(key, min_score, max_score, withscores=withscores)
        if withscores:
            return [(member, float(score)) for member, score in result]
        return list(result)

    async def zcard(self, key: str) -> int:
        with _translate_errors():
            return await self.redis.zcard(key)

    async def keys(self, pattern: str = "*") -> List[str]:
        with _translate_errors():
            return [key async for key in self.redis.scan_iter(match=pattern)]

    async def flush(self) -> bool:
        with _translate_errors():
            await self.redis.flushdb()
        return True

    async def ping(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except RedisError:
            return False

    async def close(self) -> None:
        await self.redis.aclose()


class InMemoryKeyValueStore(KeyValueStore):
    """
    In-memory store implementation using Python dicts.

    Pros:
    - Very fast (no network overhead)
    - Simple (no external services)
    - Good for development and testing

    Cons:
    - Not shared between processes
    - Lost on restart

    Values are kept in the same encoded form Redis would hold, and TTLs
    are enforced lazily on access.
    Note: Async for interface consistency, but operations are instant.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """
        Args:
            clock: Seconds source used for TTLs (injectable for tests)
        """
        self._clock = clock
        self._data: Dict[str, Any] = {}
        self._types: Dict[str, str] = {}
        self._expires: Dict[str, float] = {}

    def _expire_if_needed(self, key: str) -> None:
        deadline = self._expires.get(key)
        if deadline is not None and deadline <= self._clock():
            self._remove(key)

    def _remove(self, key: str) -> bool:
        self._expires.pop(key, None)
        self._types.pop(key, None)
        return self._data.pop(key, None) is not None

    def _lookup(self, key: str, kind: str) -> Any:
        self._expire_if_needed(key)
        if key not in self._data:
            return None
        if self._types[key] != kind:
            raise StoreError("WRONGTYPE Operation against a key holding the wrong kind of value")
        return self._data[key]

    def _ensure(self, key: str, kind: str, factory) -> Any:
        value = self._lookup(key, kind)
        if value is None:
            value = factory()
            self._data[key] = value
            self._types[key] = kind
        return value

    def _drop_if_empty(self, key: str) -> None:
        if key in self._data and not self._data[key]:
            self._remove(key)

    async def get(self, key: str) -> Optional[str]:
        return self._lookup(key, "string")

    async def set(self, key: str, value: str, ttl: Optional[int] = None, nx: bool = False) -> bool:
        self._expire_if_needed(key)
        if nx and key in self._data:
            return False
        self._remove(key)
        self._data[key] = value
        self._types[key] = "string"
        if ttl is not None:
            self._expires[key] = self._clock() + ttl
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            self._expire_if_needed(key)
            if self._remove(key):
                removed += 1
        return removed

    async def exists(self, key: str) -> bool:
        self._expire_if_needed(key)
        return key in self._data

    async def hget(self, key: str, field: str) -> Any:
        fields = self._lookup(key, "hash")
        if fields is None:
            return None
        return decode_value(fields.get(field))

    async def hgetall(self, key: str) -> Optional[Dict[str, Any]]:
        fields = self._lookup(key, "hash")
        if not fields:
            return None
        return {field: decode_value(value) for field, value in fields.items()}

    async def hset(self, key: str, mapping: Mapping[str, Any]) -> None:
        if not mapping:
            return
        fields = self._ensure(key, "hash", dict)
        for field, value in mapping.items():
            fields[field] = encode_value(value)

    async def hsetnx(self, key: str, field: str, value: Any) -> bool:
        fields = self._ensure(key, "hash", dict)
        if field in fields:
            return False
        fields[field] = encode_value(value)
        return True

    async def hset_missing(self, key: str, mapping: Mapping[str, Any]) -> bool:
        if not mapping:
            return False
        fields = self._ensure(key, "hash", dict)
        created = False
        for field, value in mapping.items():
            if field not in fields:
                fields[field] = encode_value(value)
                created = True
        return created

    async def hincrby(self, key: str, field: str, amount: int = 1) -> int:
        fields = self._ensure(key, "hash", dict)
        try:
            current = int(fields.get(field, "0"))
        except ValueError:
            raise StoreError("ERR hash value is not an integer")
        current += amount
        fields[field] = str(current)
        return current

    async def sadd(self, key: str, *members: str) -> int:
        if not members:
            return 0
        current = self._ensure(key, "set", set)
        before = len(current)
        current.update(members)
        return len(current) - before

    async def srem(self, key: str, *members: str) -> int:
        current = self._lookup(key, "set")
        if not current:
            return 0
        before = len(current)
        current.difference_update(members)
        removed = before - len(current)
        self._drop_if_empty(key)
        return removed

    async def smembers(self, key: str) -> Set[str]:
        current = self._lookup(key, "set")
        return set(current) if current else set()

    async def zadd(self, key: str, mapping: Mapping[str, float]) -> int:
        if not mapping:
            return 0
        scores = self._ensure(key, "zset", dict)
        added = sum(1 for member in mapping if member not in scores)
        for member, score in mapping.items():
            scores[str(member)] = float(score)
        return added

    async def zrangebyscore(
        self,
        key: str,
        min_score: Score,
        max_score: Score,
        withscores: bool = False
    ) -> List[Any]:
        scores = self._lookup(key, "zset")
        if not scores:
            return []
        low, high = float(min_score), float(max_score)
        matching = sorted(
            (score, member) for member, score in scores.items() if low <= score <= high
        )
        if withscores:
            return [(member, score) for score, member in matching]
        return [member for _, member in matching]

    async def zcard(self, key: str) -> int:
        scores = self._lookup(key, "zset")
        return len(scores) if scores else 0

    async def keys(self, pattern: str = "*") -> List[str]:
        for key in list(self._data):
            self._expire_if_needed(key)
        return [key for key in self._data if fnmatchcase(key, pattern)]

    async def flush(self) -> bool:
        self._data.clear()
        self._types.clear()
        self._expires.clear()
        return True

    async def ping(self) -> bool:
        return True
