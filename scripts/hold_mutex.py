"""CLI entrypoint to take a named mutex, hold it for a while and release it."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from redismutex.core.factory import MutexFactory
from redismutex.core.settings import MutexSettings
from redismutex.utils.logging import configure_logger


async def main() -> int:
    parser = argparse.ArgumentParser(description="Acquire a Redis-backed mutex and hold it.")
    parser.add_argument("name", help="Mutex name")
    parser.add_argument("--config", type=Path, default=None, help="Path to settings YAML (defaults to environment)")
    parser.add_argument("--timeout", type=float, default=0, help="Seconds to wait for the mutex")
    parser.add_argument("--hold", type=float, default=5, help="Seconds to hold the mutex before releasing")
    args = parser.parse_args()

    settings = MutexSettings.from_file(args.config) if args.config else MutexSettings.from_env()
    logger = configure_logger("MutexCLI", settings.log_level, rich=settings.rich_logs)
    factory = MutexFactory.from_settings(settings)
    mutex = factory.create(args.name)
    try:
        async with mutex.locked(args.timeout) as acquired:
            if not acquired:
                logger.warning("Mutex %s is busy", args.name)
                return 1
            logger.info("Holding mutex %s for %.1fs (ttl=%ds)", args.name, args.hold, mutex.ttl)
            await asyncio.sleep(args.hold)
        logger.info("Released mutex %s", args.name)
        return 0
    finally:
        await factory.close()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
