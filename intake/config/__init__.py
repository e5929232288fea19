"""
Configuration Module

Application configuration loaded from environment variables.

Usage:
======
    from intake.config.settings import settings

    db_url = settings.DATABASE_URL
    batch = settings.WORKER_BATCH_SIZE
"""

from intake.config.settings import settings, get_settings, Settings

__all__ = [
    "settings",
    "get_settings",
    "Settings",
]
