"""Core mutex primitives and store adapters."""

from .errors import ConfigError, MutexError, MutexLockedError, ReleaseError, StoreError
from .factory import MutexFactory
from .locks import AsyncLock, MutexStore
from .locks_redis import RedisMutexStore
from .memory import InMemoryMutexStore
from .mutex import Mutex
from .settings import MutexSettings

__all__ = [
    "AsyncLock",
    "ConfigError",
    "InMemoryMutexStore",
    "Mutex",
    "MutexError",
    "MutexFactory",
    "MutexLockedError",
    "MutexSettings",
    "MutexStore",
    "RedisMutexStore",
    "ReleaseError",
    "StoreError",
]
