"""
Timestamp helpers

Timestamps are stored as ISO-8601 UTC strings so that string comparison
orders them chronologically.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """Format a moment (default: now) as a second-precision UTC ISO string"""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="seconds")

def cutoff_timestamp(hours: int, now: Optional[datetime] = None) -> str:
    """Timestamp `hours` before now, for purging retained logs"""
    now = now or datetime.now(timezone.utc)
    return utc_timestamp(now - timedelta(hours=hours))
