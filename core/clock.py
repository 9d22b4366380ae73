from datetime import date, datetime
from zoneinfo import ZoneInfo

from core.config import settings


def local_tz() -> ZoneInfo:
    return ZoneInfo(settings.timezone)


def local_now() -> datetime:
    """Wall-clock time in the configured timezone, without tzinfo.

    Timestamps are stored naive in local time so that day windows compare
    directly against the database columns.
    """
    return datetime.now(local_tz()).replace(tzinfo=None)


def local_today() -> date:
    return local_now().date()
