"""
Series model representing one display-ready CloudWatch time series.
"""

from dataclasses import dataclass, field
from typing import Optional

CONSOLE_LINK_TITLE = "View in CloudWatch console"


@dataclass(frozen=True)
class DataLink:
    """
    A link attached to a series' fields.

    Attributes:
        url: Target URL.
        title: Link text.
        target_blank: Whether the link opens in a new tab.
    """

    url: str
    title: str = CONSOLE_LINK_TITLE
    target_blank: bool = True

    def to_dict(self) -> dict:
        """
        Convert to dictionary for serialization.

        Returns:
            Dictionary with url, title and targetBlank.
        """
        return {
            "url": self.url,
            "title": self.title,
            "targetBlank": self.target_blank
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DataLink":
        """
        Create DataLink from dictionary.

        Args:
            data: Dictionary with url, title and targetBlank keys.

        Returns:
            DataLink instance.
        """
        return cls(
            url=data["url"],
            title=data.get("title", CONSOLE_LINK_TITLE),
            target_blank=bool(data.get("targetBlank", True))
        )


@dataclass
class Series:
    """
    A named series of (timestamp, value) points.

    Attributes:
        name: Series label as returned by the backend.
        points: (Unix milliseconds, value) pairs in backend order; value may be None.
        links: Links attached to every field of the series.
    """

    name: str
    points: list[tuple[int, Optional[float]]]
    links: list[DataLink] = field(default_factory=list)

    def to_dict(self) -> dict:
        """
        Convert to dictionary for serialization.

        Returns:
            Dictionary with name, points and links.
        """
        return {
            "name": self.name,
            "points": [[ts, value] for ts, value in self.points],
            "links": [link.to_dict() for link in self.links]
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Series":
        """
        Create Series from dictionary.

        Args:
            data: Dictionary with name, points and links keys.

        Returns:
            Series instance.
        """
        return cls(
            name=data["name"],
            points=[(int(ts), value) for ts, value in data.get("points", [])],
            links=[DataLink.from_dict(link) for link in data.get("links", [])]
        )

    @classmethod
    def from_tsdb_series(cls, data: dict) -> "Series":
        """
        Create Series from the backend's time series format.

        Backend points are [value, timestamp_ms] pairs; they are flipped to
        (timestamp_ms, value).

        Args:
            data: Dictionary with 'name' and 'points'.

        Returns:
            Series instance without links.
        """
        points = []
        for value, timestamp in data.get("points") or []:
            points.append((int(timestamp), None if value is None else float(value)))
        return cls(name=data.get("name", ""), points=points)
