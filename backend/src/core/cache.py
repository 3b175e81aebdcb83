"""
Expiring key/value caches used by the AggieTime client.

Values must be JSON-compatible so that both backends behave the same way.
`ttl=None` stores a value without expiry.
"""
import json
import logging
import time
from collections.abc import Callable
from typing import Any, Protocol

from core.redis import RedisClient

logger = logging.getLogger(__name__)


class Cache(Protocol):
    """Minimal async cache interface."""

    async def get(self, key: str) -> Any | None:
        """Return the value for `key`, or None if missing or expired."""
        ...

    async def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store `value` under `key`, expiring after `ttl` seconds if given."""
        ...

    async def remove(self, key: str) -> None:
        """Remove `key` if present."""
        ...


class MemoryCache:
    """In-process cache; one instance per client."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[Any, float | None]] = {}

    async def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        if ttl is not None and ttl <= 0:
            raise ValueError("ttl must be positive")
        expires_at = None if ttl is None else self._clock() + ttl
        self._entries[key] = (value, expires_at)

    async def remove(self, key: str) -> None:
        self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)


class RedisCache:
    """
    Redis-backed cache, shareable between processes.

    Keys are namespaced with `prefix`. When Redis is unavailable every read is
    a miss and writes are dropped, so callers fall back to hitting the remote
    service.
    """

    def __init__(self, client: RedisClient, prefix: str = "aggietime:") -> None:
        self._client = client
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> Any | None:
        raw = await self._client.get(self._key(key))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("cache_entry_corrupt", extra={"key": key})
            await self._client.delete(self._key(key))
            return None

    async def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        if ttl is not None and ttl <= 0:
            raise ValueError("ttl must be positive")
        payload = json.dumps(value)
        if ttl is None:
            stored = await self._client.set(self._key(key), payload)
        else:
            # SETEX only accepts whole seconds
            stored = await self._client.setex(self._key(key), max(1, round(ttl)), payload)
        if not stored:
            logger.warning("cache_write_skipped", extra={"key": key})

    async def remove(self, key: str) -> None:
        await self._client.delete(self._key(key))
