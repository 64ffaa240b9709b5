"""
TimeRange model representing the absolute window of a query.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from ..utils import datetime_to_ms, ms_to_datetime, to_iso_string


@dataclass(frozen=True)
class TimeRange:
    """
    Absolute time window for a query.

    The caller is responsible for ensuring to_time is not before from_time.

    Attributes:
        from_time: Start of the window.
        to_time: End of the window.
    """

    from_time: datetime
    to_time: datetime

    @property
    def from_ms(self) -> int:
        """Start of the window as Unix milliseconds."""
        return datetime_to_ms(self.from_time)

    @property
    def to_ms(self) -> int:
        """End of the window as Unix milliseconds."""
        return datetime_to_ms(self.to_time)

    def to_dict(self) -> dict:
        """
        Convert to dictionary for serialization.

        Returns:
            Dictionary with ISO-8601 from and to strings.
        """
        return {
            "from": to_iso_string(self.from_time),
            "to": to_iso_string(self.to_time)
        }

    @classmethod
    def from_ms_range(cls, from_ms: int, to_ms: int) -> "TimeRange":
        """
        Create TimeRange from Unix millisecond timestamps.

        Args:
            from_ms: Start timestamp in milliseconds.
            to_ms: End timestamp in milliseconds.

        Returns:
            TimeRange instance.
        """
        return cls(from_time=ms_to_datetime(from_ms), to_time=ms_to_datetime(to_ms))

    @classmethod
    def last(cls, hours: int = 6, now: Optional[datetime] = None) -> "TimeRange":
        """
        Create a TimeRange covering the last N hours.

        Args:
            hours: Number of hours to look back.
            now: Optional end of the window; defaults to the current time.

        Returns:
            TimeRange instance.
        """
        end = now or datetime.now(timezone.utc)
        return cls(from_time=end - timedelta(hours=hours), to_time=end)
