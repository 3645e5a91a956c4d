"""
Inkform logger: console + rotating JSON file.

Usage:
    from inkform.core.logger import configure, LoggerConfig

    configure(LoggerConfig(level="DEBUG", log_dir="/var/log/inkform"))
    # or configure() to read LOG_LEVEL, LOG_DIR, ... from the environment

    logger = logging.getLogger(__name__)
    logger.info("checked in", extra={"appointment_id": appt.id})
"""
from inkform.core.logger.config import LoggerConfig
from inkform.core.logger.formatters import JsonFormatter, PlainConsoleFormatter
from inkform.core.logger.setup import build_rotating_file_handler, configure, get_logger

__all__ = [
    "LoggerConfig",
    "JsonFormatter",
    "PlainConsoleFormatter",
    "configure",
    "get_logger",
    "build_rotating_file_handler",
]
