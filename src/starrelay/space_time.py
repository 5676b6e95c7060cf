"""Time helpers shared by the Horizons parsers and the caches.

Cache bookkeeping uses epoch milliseconds throughout; timestamps that leave the
process are ISO-8601 UTC strings with millisecond precision.
"""

import time
from datetime import datetime, timezone

# Julian date of the Unix epoch
UNIX_EPOCH_JD = 2440587.5
SECONDS_PER_DAY = 86400


def now_ms() -> float:
    """Current wall-clock time in epoch milliseconds."""
    return time.time() * 1000.0


def ensure_utc(dt: datetime) -> datetime:
    """Convert datetime to UTC, assuming UTC for naive datetimes."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def iso_utc(dt: datetime) -> str:
    """Format a datetime as e.g. 2025-03-19T20:00:00.000Z."""
    dt = ensure_utc(dt)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def iso_from_ms(epoch_ms: float) -> str:
    """Format epoch milliseconds as an ISO-8601 UTC string."""
    return iso_utc(datetime.fromtimestamp(epoch_ms / 1000.0, tz=timezone.utc))


def datetime_from_julian(jd: float) -> datetime:
    """Convert a Julian date to a UTC datetime.

    Args:
        jd: Julian date

    Returns:
        datetime: UTC datetime
    """
    return datetime.fromtimestamp((jd - UNIX_EPOCH_JD) * SECONDS_PER_DAY, timezone.utc)
