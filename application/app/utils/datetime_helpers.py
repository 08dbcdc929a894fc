"""
Utility functions for date and time handling.
"""

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

# Settings
from app.config.settings import SFAConfigs
configs = SFAConfigs()

APP_TZ = ZoneInfo(configs.APP_TIMEZONE)


def get_now() -> datetime:
    """Current time in the service timezone."""
    return datetime.now(APP_TZ)


def ensure_aware(dt: Optional[datetime]) -> Optional[datetime]:
    """Attach the service timezone to naive datetimes; aware ones are converted to it."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=APP_TZ)
    return dt.astimezone(APP_TZ)


def start_of_month(dt: datetime) -> datetime:
    return dt.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
