"""Logging helpers with consistent formatting."""

from __future__ import annotations

import logging
import sys
from typing import Union

from rich.logging import RichHandler


def _qualified(name: str) -> str:
    return name if name.startswith("redismutex") else f"redismutex.{name}"


def get_logger(name: str, level: Union[int, str] = logging.INFO, *, rich: bool = True) -> logging.Logger:
    """Configure and return a logger under the ``redismutex`` namespace.

    A logger that already has handlers is returned untouched; use
    :func:`configure_logger` to change it afterwards.
    """
    logger = logging.getLogger(_qualified(name))
    if logger.handlers:
        return logger
    return configure_logger(name, level, rich=rich)


def configure_logger(name: str, level: Union[int, str] = logging.INFO, *, rich: bool = True) -> logging.Logger:
    """(Re)configure a logger, replacing any handler it already has."""
    logger = logging.getLogger(_qualified(name))
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)

    if rich:
        handler: logging.Handler = RichHandler(
            level=level,
            markup=False,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            show_time=True,
            show_path=False,
        )
    else:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s %(name)s %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    logger.addHandler(handler)
    logger.propagate = False
    return logger
