"""
Logger configuration, built in code or from the environment.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Optional

_TRUTHY = ("1", "true", "yes")


def _env_flag(name: str, default: str = "true") -> bool:
    return os.environ.get(name, default).strip().lower() in _TRUTHY


@dataclass(frozen=True)
class LoggerConfig:
    """
    Configuration for the inkform logger.

    Use LoggerConfig.from_env() for env-based config, or build explicitly.
    """

    # DEBUG, INFO, WARNING, ERROR, CRITICAL
    level: str = "INFO"
    # Rotating JSON file is only written when a directory is given
    log_dir: Optional[str] = None
    log_file_basename: str = "inkform"
    max_bytes: int = 5 * 1024 * 1024
    backup_count: int = 5
    # Handlers are attached here; module loggers inherit
    root_name: str = "inkform"
    console: bool = True
    file_rotating: bool = True

    @classmethod
    def from_env(cls) -> "LoggerConfig":
        """
        Env:
            LOG_LEVEL, LOG_DIR, LOG_FILE_BASENAME, LOG_MAX_BYTES,
            LOG_BACKUP_COUNT, LOG_ROOT_NAME, LOG_CONSOLE, LOG_FILE_ROTATING
        """
        return cls(
            level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            log_dir=os.environ.get("LOG_DIR") or None,
            log_file_basename=os.environ.get("LOG_FILE_BASENAME", "inkform"),
            max_bytes=int(os.environ.get("LOG_MAX_BYTES", str(5 * 1024 * 1024))),
            backup_count=int(os.environ.get("LOG_BACKUP_COUNT", "5")),
            root_name=os.environ.get("LOG_ROOT_NAME", "inkform"),
            console=_env_flag("LOG_CONSOLE"),
            file_rotating=_env_flag("LOG_FILE_ROTATING"),
        )

    def with_overrides(self, **overrides: object) -> "LoggerConfig":
        """Return a copy with the given non-None fields replaced."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
