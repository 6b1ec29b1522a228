"""Distributed mutex backed by Redis leases."""

from .core import (
    ConfigError,
    InMemoryMutexStore,
    Mutex,
    MutexError,
    MutexFactory,
    MutexLockedError,
    MutexSettings,
    MutexStore,
    RedisMutexStore,
    ReleaseError,
    StoreError,
)

__all__ = [
    "__version__",
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

__version__ = "0.1.0"
