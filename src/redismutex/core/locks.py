"""Abstract interfaces for distributed locks."""

from __future__ import annotations

from typing import Protocol


class AsyncLock(Protocol):
    async def __aenter__(self) -> bool: ...
    async def __aexit__(self, exc_type, exc, tb) -> None: ...


class MutexStore(Protocol):
    """Primitives a shared key-value store must offer to back a mutex.

    Both mutating operations must be atomic on the store side.
    """

    async def set_if_absent_with_expiry(self, key: str, value: str, ttl: int) -> bool:
        """Set ``key`` to ``value`` expiring after ``ttl`` seconds unless it already exists."""
        ...

    async def compare_and_delete(self, key: str, expected: str) -> bool:
        """Delete ``key`` only if it currently holds ``expected``."""
        ...

    async def exists(self, key: str) -> bool:
        ...

    def clock(self) -> float:
        """Seconds from a monotonic reference."""
        ...

    async def close(self) -> None:
        ...
