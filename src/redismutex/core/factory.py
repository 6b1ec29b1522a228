"""Factory handing out mutexes that share one store and TTL."""

from __future__ import annotations

from typing import Awaitable, Callable, TypeVar

from .errors import MutexLockedError
from .locks import MutexStore
from .locks_redis import RedisMutexStore
from .mutex import DEFAULT_RETRY_DELAY, DEFAULT_TTL, Mutex, validate_retry_delay, validate_ttl
from .settings import MutexSettings
from redismutex.utils.logging import configure_logger, get_logger


T = TypeVar("T")


class MutexFactory:
    """Creates :class:`Mutex` objects bound to a shared store."""

    def __init__(
        self,
        store: MutexStore,
        ttl: int = DEFAULT_TTL,
        *,
        retry_delay: float = DEFAULT_RETRY_DELAY,
    ) -> None:
        self.store = store
        self.ttl = validate_ttl(ttl)
        self.retry_delay = validate_retry_delay(retry_delay)
        self.logger = get_logger("MutexFactory")

    @classmethod
    def from_settings(cls, settings: MutexSettings) -> "MutexFactory":
        # Mutexes created earlier share these loggers, so they pick up the new level too.
        configure_logger("Mutex", settings.log_level, rich=settings.rich_logs)
        configure_logger("MutexFactory", settings.log_level, rich=settings.rich_logs)
        store = RedisMutexStore.from_url(settings.redis_url, key_prefix=settings.key_prefix)
        return cls(store, settings.ttl_seconds, retry_delay=settings.retry_delay_seconds)

    def create(self, name: str) -> Mutex:
        return Mutex(name, self.store, self.ttl, retry_delay=self.retry_delay)

    async def create_and_acquire(self, name: str, timeout: float = 0) -> Mutex:
        """Create a mutex and acquire it, raising :class:`MutexLockedError` if busy."""
        mutex = self.create(name)
        if not await mutex.acquire(timeout):
            raise MutexLockedError(name)
        return mutex

    async def execute(self, name: str, callback: Callable[[], Awaitable[T]], timeout: float = 0) -> T:
        """Run ``callback`` while holding the ``name`` mutex."""
        async with self.create(name).locked(timeout) as acquired:
            if not acquired:
                self.logger.info("Mutex %s is held elsewhere; skipping callback", name)
                raise MutexLockedError(name)
            return await callback()

    async def close(self) -> None:
        await self.store.close()
