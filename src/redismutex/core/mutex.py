"""Lease-based distributed mutex over a shared key-value store.

A mutex owns one key in the store. Acquiring writes a fresh random token
under that key with an expiry, but only if the key is absent; releasing
deletes the key only if it still holds that token. Both steps are single
atomic store operations, so a lease that expired and was taken over by
another process is never deleted by its previous holder.

See https://redis.io/docs/latest/develop/use/patterns/distributed-locks/
"""

from __future__ import annotations

import asyncio
import copy
import hashlib
import secrets
import time
from typing import Optional

from .errors import ConfigError, MutexLockedError, ReleaseError
from .locks import AsyncLock, MutexStore
from redismutex.utils.logging import get_logger


KEY_NAMESPACE = "redismutex.Mutex"
TOKEN_BYTES = 20
DEFAULT_TTL = 30
DEFAULT_RETRY_DELAY = 0.05


def derive_key(name: str) -> str:
    """Store key shared by every process locking ``name``."""
    return hashlib.md5(f"{KEY_NAMESPACE}{name}".encode("utf-8")).hexdigest()


def generate_token() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


def validate_ttl(ttl: int) -> int:
    # Redis only accepts whole seconds for EX.
    if isinstance(ttl, bool) or not isinstance(ttl, int) or ttl < 1:
        raise ConfigError(f'TTL must be a positive number greater than zero, "{ttl}" is received.')
    return ttl


def validate_retry_delay(retry_delay: float) -> float:
    if isinstance(retry_delay, bool) or not isinstance(retry_delay, (int, float)) or retry_delay <= 0:
        raise ConfigError(f'Retry delay must be greater than zero, "{retry_delay}" is received.')
    return retry_delay


class Mutex:
    """Named mutex backed by a :class:`MutexStore` lease.

    An instance is not safe for concurrent ``acquire`` calls from several
    tasks; serialize access externally if it must be shared.
    """

    def __init__(
        self,
        name: str,
        store: MutexStore,
        ttl: int = DEFAULT_TTL,
        *,
        retry_delay: float = DEFAULT_RETRY_DELAY,
    ) -> None:
        self._name = name
        self._store = store
        self._key = derive_key(name)
        self._ttl = validate_ttl(ttl)
        self._retry_delay = validate_retry_delay(retry_delay)
        self._token: Optional[str] = None
        self._expires_at: Optional[float] = None
        self.logger = get_logger("Mutex")

    @property
    def name(self) -> str:
        return self._name

    @property
    def key(self) -> str:
        return self._key

    @property
    def ttl(self) -> int:
        return self._ttl

    @property
    def retry_delay(self) -> float:
        return self._retry_delay

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def is_acquired(self) -> bool:
        return not self.is_expired()

    def with_retry_delay(self, retry_delay: float) -> "Mutex":
        """Return a copy polling every ``retry_delay`` seconds, with no lease held."""
        new = copy.copy(self)
        new._retry_delay = validate_retry_delay(retry_delay)
        new._clear()
        return new

    def is_expired(self) -> bool:
        """True when no lease is held or the local estimate says it lapsed.

        Advisory only; the store's own expiry is authoritative.
        """
        return self._expires_at is None or self._expires_at <= self._store.clock()

    async def acquire(self, timeout: float = 0) -> bool:
        """Try to take the lease, polling until ``timeout`` seconds have passed.

        ``timeout=0`` performs exactly one conditional write. Returns False when
        the mutex is held elsewhere, or already held by this instance.
        """
        if timeout < 0:
            raise ConfigError(f'Timeout must not be negative, "{timeout}" is received.')
        if not self.is_expired():
            self.logger.debug("Mutex %s is already held by this instance", self._name)
            return False

        self._clear()
        # The deadline runs on the same clock as asyncio.sleep, not the store clock.
        start = time.monotonic()
        while True:
            token = generate_token()
            attempted_at = self._store.clock()
            if await self._store.set_if_absent_with_expiry(self._key, token, self._ttl):
                self._token = token
                self._expires_at = attempted_at + self._ttl
                self.logger.debug("Acquired mutex %s (ttl=%ds)", self._name, self._ttl)
                return True

            remaining = timeout - (time.monotonic() - start)
            if remaining <= 0:
                self.logger.debug("Mutex %s is busy; giving up after %.2fs", self._name, timeout)
                return False
            await asyncio.sleep(min(self._retry_delay, remaining))

    async def release(self) -> None:
        """Delete the lease if this instance still owns it.

        No-op when nothing was acquired. Raises :class:`ReleaseError` when the
        store no longer holds our token. A lease whose local expiry estimate has
        lapsed is still checked against the store, so it raises ReleaseError
        instead of being silently skipped.
        """
        if self._token is None:
            return

        released = await self._store.compare_and_delete(self._key, self._token)
        self._clear()
        if not released:
            raise ReleaseError(self._name)
        self.logger.debug("Released mutex %s", self._name)

    async def aclose(self) -> None:
        """Disposal hook: release without raising on a lost lease."""
        try:
            await self.release()
        except ReleaseError as exc:
            self.logger.warning("%s Lease expired before release.", exc)

    def locked(self, timeout: float = 0) -> AsyncLock:
        """Context manager yielding whether the mutex was acquired."""
        return _ScopedMutex(self, timeout)

    async def __aenter__(self) -> "Mutex":
        if not await self.acquire():
            raise MutexLockedError(self._name)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await _release_on_exit(self, exc)

    def _clear(self) -> None:
        self._token = None
        self._expires_at = None

    def __repr__(self) -> str:
        state = "acquired" if self.is_acquired else "free"
        return f"<Mutex name={self._name!r} ttl={self._ttl} {state}>"


class _ScopedMutex:
    def __init__(self, mutex: Mutex, timeout: float) -> None:
        self._mutex = mutex
        self._timeout = timeout
        self._acquired = False

    async def __aenter__(self) -> bool:
        self._acquired = await self._mutex.acquire(self._timeout)
        return self._acquired

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if not self._acquired:
            return
        try:
            await _release_on_exit(self._mutex, exc)
        finally:
            self._acquired = False


async def _release_on_exit(mutex: Mutex, exc: Optional[BaseException]) -> None:
    # A failing block keeps its own exception; a lost lease is only logged then.
    if exc is None:
        await mutex.release()
    else:
        await mutex.aclose()
