"""
Timezone conversion for NEM12 timestamps.

NEM12 interval timestamps are market local time. The warehouse stores UTC.
"""

from datetime import datetime, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo

DEFAULT_SOURCE_TIMEZONE = "Australia/Sydney"


@lru_cache(maxsize=8)
def _zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def local_to_utc(timestamp: datetime, source_timezone: str = DEFAULT_SOURCE_TIMEZONE) -> datetime:
    """
    Convert a naive local timestamp to a naive UTC timestamp.

    Args:
        timestamp: Naive timestamp in source_timezone
        source_timezone: IANA zone name of the file's timestamps

    Returns:
        Naive datetime in UTC
    """
    aware = timestamp.replace(tzinfo=_zone(source_timezone))
    return aware.astimezone(timezone.utc).replace(tzinfo=None)
