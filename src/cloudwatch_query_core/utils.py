"""
Time and interval utility functions for CloudWatch query building.
"""

import math
import re
from datetime import datetime, timezone

from .exceptions import InvalidPeriodError


MILLISECONDS_PER_SECOND = 1000
SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = SECONDS_PER_MINUTE * 60
SECONDS_PER_DAY = SECONDS_PER_HOUR * 24

INTERVAL_UNITS_IN_SECONDS = {
    "y": SECONDS_PER_DAY * 365,
    "M": SECONDS_PER_DAY * 30,
    "w": SECONDS_PER_DAY * 7,
    "d": SECONDS_PER_DAY,
    "h": SECONDS_PER_HOUR,
    "m": SECONDS_PER_MINUTE,
    "s": 1,
    "ms": 0.001,
}

_INTERVAL_PATTERN = re.compile(r"(\d+(?:\.\d+)?)(ms|[Mwdhmsy])")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def datetime_to_ms(value: datetime) -> int:
    """
    Convert a datetime to Unix milliseconds.

    Naive datetimes are interpreted as UTC.

    Args:
        value: Datetime to convert.

    Returns:
        Timestamp in milliseconds.
    """
    return round(_as_utc(value).timestamp() * MILLISECONDS_PER_SECOND)


def ms_to_datetime(milliseconds: int) -> datetime:
    """
    Convert Unix milliseconds to an aware UTC datetime.

    Args:
        milliseconds: Unix timestamp in milliseconds.

    Returns:
        Datetime in UTC.
    """
    return datetime.fromtimestamp(milliseconds / MILLISECONDS_PER_SECOND, tz=timezone.utc)


def to_epoch_seconds(value: datetime, round_up: bool = False) -> int:
    """
    Convert a datetime to whole Unix seconds.

    Args:
        value: Datetime to convert.
        round_up: Round partial seconds up instead of down.

    Returns:
        Timestamp in whole seconds.
    """
    milliseconds = datetime_to_ms(value)
    if round_up:
        return -(-milliseconds // MILLISECONDS_PER_SECOND)
    return milliseconds // MILLISECONDS_PER_SECOND


def to_iso_string(value: datetime) -> str:
    """
    Format a datetime as an ISO-8601 UTC string with millisecond precision.

    Example: 2024-01-01T00:00:00.000Z

    Args:
        value: Datetime to format.

    Returns:
        ISO-8601 string ending in "Z".
    """
    utc = _as_utc(value).astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def parse_iso_to_ms(value: str) -> int:
    """
    Parse an ISO-8601 timestamp (optionally ending in "Z") into Unix milliseconds.

    Args:
        value: Timestamp string.

    Returns:
        Timestamp in milliseconds.
    """
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime_to_ms(datetime.fromisoformat(value))


def interval_to_seconds(interval: str) -> float:
    """
    Convert a duration expression such as "5m" or "1.5h" into seconds.

    Supported units: ms, s, m, h, d, w, M (30 days), y (365 days). The count
    is truncated to a whole number, so "1.5h" is one hour.

    Args:
        interval: Duration expression.

    Returns:
        Number of seconds (fractional only for millisecond intervals).

    Raises:
        InvalidPeriodError: If the expression is not a number followed by a unit.
    """
    match = _INTERVAL_PATTERN.fullmatch(interval.strip())
    if not match:
        raise InvalidPeriodError(
            f"Invalid interval string '{interval}', expecting a number "
            f'followed by one of "Mwdhmsy"'
        )
    count = math.floor(float(match.group(1)))
    return count * INTERVAL_UNITS_IN_SECONDS[match.group(2)]
