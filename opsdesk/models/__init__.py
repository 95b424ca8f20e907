from __future__ import annotations
import os
from datetime import datetime, timezone, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import tzdata  # noqa: F401  IANA database for hosts without one (Windows)

# Sync timestamps are stored as naive local time of the plant running the ERP.
LOCAL_TZ_NAME = os.getenv("APP_TIMEZONE", "Asia/Ho_Chi_Minh")

try:
    LOCAL_TZ = ZoneInfo(LOCAL_TZ_NAME)
except ZoneInfoNotFoundError:
    LOCAL_TZ = timezone(timedelta(hours=7))


def now_local() -> datetime:
    """Return current time in the configured plant timezone as timezone-aware datetime."""
    return datetime.now(LOCAL_TZ)

def now_local_naive() -> datetime:
    """Return current time in the plant timezone as naive datetime (no tzinfo) for DB storage."""
    return now_local().replace(tzinfo=None)

__all__ = ["now_local", "now_local_naive", "LOCAL_TZ"]
