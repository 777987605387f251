"""
Key-value backends for sessions and booking records.

Both backends store JSON strings under plain string keys and offer only
single-key get/set/delete. There are no transactions.
"""

import logging
from typing import Optional, Protocol

import redis.asyncio as redis_async
from redis.exceptions import RedisError

from src.config import StoreConfig

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the backing store cannot complete an operation."""


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def close(self) -> None: ...


class InMemoryKeyValueStore:
    """Process-local store for development, the console demo and tests.

    TTLs are accepted and ignored.
    """

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def close(self) -> None:
        pass

    def keys(self) -> list[str]:
        return list(self._data)


class RedisKeyValueStore:
    """Redis-backed store. Redis errors surface as StoreError."""

    def __init__(self, client: redis_async.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str, socket_timeout_seconds: float = 2.0) -> "RedisKeyValueStore":
        client = redis_async.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=socket_timeout_seconds,
            socket_timeout=socket_timeout_seconds,
        )
        return cls(client)

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self._client.get(key)
        except RedisError as exc:
            raise StoreError(f"Redis GET {key!r} failed: {exc}") from exc

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        try:
            await self._client.set(key, value, ex=ttl_seconds or None)
        except RedisError as exc:
            raise StoreError(f"Redis SET {key!r} failed: {exc}") from exc

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(key)
        except RedisError as exc:
            raise StoreError(f"Redis DEL {key!r} failed: {exc}") from exc

    async def close(self) -> None:
        await self._client.aclose()


def build_store(config: StoreConfig) -> KeyValueStore:
    """Create the backend named by STORE_BACKEND."""
    if config.backend == "redis":
        logger.info("Using Redis store")
        return RedisKeyValueStore.from_url(config.redis_url)
    logger.info("Using in-memory store; sessions are lost on restart")
    return InMemoryKeyValueStore()
