from datetime import datetime
from typing import Optional


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Stored datetimes are naive UTC; convert aware request values to match."""
    if value is not None and value.tzinfo is not None:
        return value.replace(tzinfo=None) - value.utcoffset()
    return value
