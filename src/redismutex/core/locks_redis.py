"""Redis-backed mutex store using SET NX EX semantics."""

from __future__ import annotations

import os
import time
from typing import Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from .errors import StoreError


# Delete the key only if it still holds the caller's token.
RELEASE_SCRIPT = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


class RedisMutexStore:
    """MutexStore over a ``redis.asyncio`` client."""

    def __init__(self, redis: Redis, *, key_prefix: str = "") -> None:
        self._redis = redis
        self._prefix = key_prefix

    @classmethod
    def from_url(cls, url: Optional[str] = None, *, key_prefix: str = "") -> "RedisMutexStore":
        redis = Redis.from_url(url or os.getenv("REDIS_URL", "redis://localhost:6379/0"))
        return cls(redis, key_prefix=key_prefix)

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def set_if_absent_with_expiry(self, key: str, value: str, ttl: int) -> bool:
        try:
            return bool(await self._redis.set(self._key(key), value, ex=ttl, nx=True))
        except RedisError as exc:
            raise StoreError(f"SET NX failed for {key!r}: {exc}") from exc

    async def compare_and_delete(self, key: str, expected: str) -> bool:
        try:
            deleted = await self._redis.eval(RELEASE_SCRIPT, 1, self._key(key), expected)
        except RedisError as exc:
            raise StoreError(f"Release script failed for {key!r}: {exc}") from exc
        return bool(deleted)

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self._redis.exists(self._key(key)))
        except RedisError as exc:
            raise StoreError(f"EXISTS failed for {key!r}: {exc}") from exc

    def clock(self) -> float:
        return time.monotonic()

    async def close(self) -> None:
        await self._redis.aclose()
