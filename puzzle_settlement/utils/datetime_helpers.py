"""
Date/Time Handling Utilities

Settlement timestamps always come from the server clock and are stored as
timezone-aware UTC datetimes.
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo


def now_utc() -> datetime:
    """
    Get current datetime in UTC (timezone-aware)

    Returns:
        Current datetime in UTC with timezone info
    """
    return datetime.now(ZoneInfo("UTC"))


def local_date(moment: datetime, tz_name: str) -> date:
    """Calendar date of a timestamp in the given zone (naive input is treated as UTC)"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=ZoneInfo("UTC"))
    return moment.astimezone(ZoneInfo(tz_name)).date()
