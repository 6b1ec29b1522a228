"""Mutex settings loader."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigError
from redismutex.utils.env import get_bool_env, get_str_env


class MutexSettings(BaseModel):
    redis_url: str = "redis://localhost:6379/0"
    key_prefix: str = ""  # prepended to every store key
    ttl_seconds: int = Field(default=30, ge=1)
    retry_delay_seconds: float = Field(default=0.05, gt=0)
    log_level: str = "INFO"
    rich_logs: bool = True

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "MutexSettings":
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(f"Invalid mutex settings: {exc}") from exc

    @classmethod
    def from_file(cls, path: Path) -> "MutexSettings":
        data = yaml.safe_load(path.read_text()) or {}
        if not isinstance(data, dict):
            raise ConfigError(f"Invalid mutex settings in {path}: expected a mapping")
        return cls.from_mapping(data)

    @classmethod
    def from_env(cls) -> "MutexSettings":
        """Read ``REDISMUTEX_*`` variables; unset ones keep their defaults."""
        raw = {
            "redis_url": get_str_env("REDISMUTEX_REDIS_URL", "REDIS_URL"),
            "key_prefix": get_str_env("REDISMUTEX_KEY_PREFIX"),
            "ttl_seconds": get_str_env("REDISMUTEX_TTL"),
            "retry_delay_seconds": get_str_env("REDISMUTEX_RETRY_DELAY"),
            "log_level": get_str_env("REDISMUTEX_LOG_LEVEL"),
        }
        data: Dict[str, Any] = {key: value for key, value in raw.items() if value is not None}
        data["rich_logs"] = get_bool_env("REDISMUTEX_RICH_LOGS", default=True)
        return cls.from_mapping(data)
