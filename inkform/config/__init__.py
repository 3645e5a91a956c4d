"""
Inkform config: load from env.

Load from env: load_postgres_config(), load_notification_config().
"""
from inkform.config.notifications import NotificationConfig, load_notification_config
from inkform.config.postgres import PostgresConfig, load_postgres_config

__all__ = [
    "PostgresConfig",
    "load_postgres_config",
    "NotificationConfig",
    "load_notification_config",
]
