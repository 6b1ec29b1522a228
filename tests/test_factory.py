from __future__ import annotations

import logging

import pytest
from rich.logging import RichHandler

from redismutex.core.errors import ConfigError, MutexLockedError
from redismutex.core.factory import MutexFactory
from redismutex.core.locks_redis import RedisMutexStore
from redismutex.core.memory import InMemoryMutexStore
from redismutex.core.mutex import Mutex
from redismutex.core.settings import MutexSettings
from redismutex.utils.logging import configure_logger


@pytest.mark.asyncio
async def test_create_and_acquire():
    store = InMemoryMutexStore()
    factory = MutexFactory(store, 60)
    mutex = await factory.create_and_acquire("import")

    assert isinstance(mutex, Mutex)
    assert mutex.ttl == 60
    assert await store.exists(mutex.key) is True
    assert await mutex.acquire() is False

    await mutex.release()
    assert await store.exists(mutex.key) is False
    assert await mutex.acquire() is True
    assert await store.exists(mutex.key) is True

    await mutex.release()
    assert await store.exists(mutex.key) is False


@pytest.mark.asyncio
async def test_create_and_acquire_raises_when_busy():
    factory = MutexFactory(InMemoryMutexStore())
    await factory.create_and_acquire("import")

    with pytest.raises(MutexLockedError):
        await factory.create_and_acquire("import")


def test_factory_shares_settings_between_mutexes():
    store = InMemoryMutexStore()
    factory = MutexFactory(store, 15, retry_delay=0.2)
    first = factory.create("a")
    second = factory.create("a")

    assert first is not second
    assert first.key == second.key
    assert first.ttl == second.ttl == 15
    assert first.retry_delay == 0.2


def test_factory_rejects_invalid_ttl():
    with pytest.raises(ConfigError):
        MutexFactory(InMemoryMutexStore(), 0)


@pytest.mark.asyncio
async def test_execute_runs_callback_under_mutex():
    store = InMemoryMutexStore()
    factory = MutexFactory(store)
    seen = []

    async def callback():
        seen.append(await store.exists(factory.create("report").key))
        return "done"

    assert await factory.execute("report", callback) == "done"
    assert seen == [True]
    assert await store.exists(factory.create("report").key) is False


@pytest.mark.asyncio
async def test_execute_skips_callback_when_busy():
    factory = MutexFactory(InMemoryMutexStore())
    holder = await factory.create_and_acquire("report")
    calls = []

    async def callback():
        calls.append(1)

    with pytest.raises(MutexLockedError):
        await factory.execute("report", callback, timeout=0.1)
    assert calls == []
    await holder.release()


@pytest.mark.asyncio
async def test_execute_releases_when_callback_fails():
    store = InMemoryMutexStore()
    factory = MutexFactory(store)

    async def callback():
        raise RuntimeError("job failed")

    with pytest.raises(RuntimeError, match="job failed"):
        await factory.execute("report", callback)
    assert await store.exists(factory.create("report").key) is False


@pytest.mark.asyncio
async def test_from_settings_builds_redis_store():
    settings = MutexSettings(redis_url="redis://example.invalid:6379/1", key_prefix="app:", ttl_seconds=12)
    factory = MutexFactory.from_settings(settings)

    assert isinstance(factory.store, RedisMutexStore)
    assert factory.ttl == 12
    assert factory.create("x").retry_delay == settings.retry_delay_seconds
    await factory.close()


@pytest.mark.parametrize("kwargs", [{"retry_delay": 0}, {"retry_delay": -1}, {"ttl": 1.5}])
def test_factory_rejects_invalid_arguments_up_front(kwargs):
    with pytest.raises(ConfigError):
        MutexFactory(InMemoryMutexStore(), **kwargs)


@pytest.mark.asyncio
async def test_from_settings_reconfigures_existing_loggers():
    early = Mutex("early", InMemoryMutexStore())
    assert early.logger.level == logging.INFO

    factory = MutexFactory.from_settings(MutexSettings(log_level="DEBUG", rich_logs=False))
    try:
        assert early.logger.level == logging.DEBUG
        assert factory.create("late").logger is early.logger
        assert len(early.logger.handlers) == 1
        assert not isinstance(early.logger.handlers[0], RichHandler)
    finally:
        await factory.close()
        configure_logger("Mutex")
        configure_logger("MutexFactory")
