"""In-process mutex store honouring the same atomicity and expiry rules as Redis."""

from __future__ import annotations

import asyncio
import time
from typing import Callable, Dict, Optional, Tuple


class InMemoryMutexStore:
    """MutexStore kept in a dict; entries past their expiry count as absent."""

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or time.monotonic
        self._entries: Dict[str, Tuple[str, float]] = {}  # key -> (value, expires_at)
        self._lock = asyncio.Lock()

    def clock(self) -> float:
        return self._clock()

    def _live_value(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    async def set_if_absent_with_expiry(self, key: str, value: str, ttl: int) -> bool:
        async with self._lock:
            if self._live_value(key) is not None:
                return False
            self._entries[key] = (value, self._clock() + ttl)
            return True

    async def compare_and_delete(self, key: str, expected: str) -> bool:
        async with self._lock:
            if self._live_value(key) != expected:
                return False
            del self._entries[key]
            return True

    async def exists(self, key: str) -> bool:
        async with self._lock:
            return self._live_value(key) is not None

    async def close(self) -> None:
        async with self._lock:
            self._entries.clear()
