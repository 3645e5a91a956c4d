"""
Logger setup: attach console and rotating JSON file handlers from config.
"""
from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from inkform.core.logger.config import LoggerConfig
from inkform.core.logger.formatters import JsonFormatter, PlainConsoleFormatter

_default_config: Optional[LoggerConfig] = None


def _level(config: LoggerConfig) -> int:
    return getattr(logging, config.level.upper(), logging.INFO)


def configure(config: Optional[LoggerConfig] = None) -> logging.Logger:
    """
    Configure the inkform root logger. Uses LoggerConfig.from_env() when no
    config is given. Safe to call again (handlers are replaced, not stacked).
    """
    global _default_config
    if config is None:
        config = LoggerConfig.from_env()
    _default_config = config

    root = logging.getLogger(config.root_name or "inkform")
    root.setLevel(_level(config))
    root.handlers.clear()

    if config.console:
        console = logging.StreamHandler()
        console.setLevel(_level(config))
        console.setFormatter(PlainConsoleFormatter())
        root.addHandler(console)

    if config.file_rotating and config.log_dir and config.log_dir.strip():
        try:
            os.makedirs(config.log_dir, exist_ok=True)
        except OSError:
            root.warning("Could not create log dir %s, skipping file handler", config.log_dir)
        else:
            root.addHandler(
                build_rotating_file_handler(
                    config.log_dir,
                    basename=config.log_file_basename,
                    max_bytes=config.max_bytes,
                    backup_count=config.backup_count,
                    level=config.level,
                )
            )

    root.propagate = False
    return root


def get_logger(name: str, config: Optional[LoggerConfig] = None) -> logging.Logger:
    """Return a logger, configuring the root on first use."""
    if _default_config is None:
        configure(config)
    return logging.getLogger(name)


def build_rotating_file_handler(
    log_dir: str,
    basename: str = "inkform",
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 5,
    level: str = "INFO",
) -> RotatingFileHandler:
    """Rotating file handler with the JSON formatter."""
    os.makedirs(log_dir, exist_ok=True)
    handler = RotatingFileHandler(
        os.path.join(log_dir, f"{basename}.log"),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    handler.setFormatter(JsonFormatter())
    return handler
