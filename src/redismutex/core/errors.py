"""Exception hierarchy for mutex operations."""

from __future__ import annotations


class MutexError(Exception):
    """Base class for all mutex errors."""


class ConfigError(MutexError, ValueError):
    """Invalid construction parameters or settings."""


class ReleaseError(MutexError, RuntimeError):
    """The store no longer holds this mutex's token."""

    def __init__(self, name: str) -> None:
        super().__init__(f'Unable to release the "{name}" mutex.')
        self.name = name


class MutexLockedError(MutexError):
    """A scoped helper could not acquire the mutex in time."""

    def __init__(self, name: str) -> None:
        super().__init__(f'Unable to acquire the "{name}" mutex.')
        self.name = name


class StoreError(MutexError):
    """The backing store could not be reached or answered with an error."""
