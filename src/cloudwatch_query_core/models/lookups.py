"""
Models for metadata lookup suggestions and annotation events.
"""

from dataclasses import dataclass, field
from typing import Any

from ..utils import parse_iso_to_ms


@dataclass(frozen=True)
class MetricFindValue:
    """
    A suggestion returned by a metadata lookup.

    Attributes:
        text: Display text.
        value: Value to use when selected.
    """

    text: str
    value: Any

    def to_dict(self) -> dict:
        return {"text": self.text, "value": self.value}

    @classmethod
    def from_row(cls, row: list) -> "MetricFindValue":
        """
        Create MetricFindValue from a [text, value] table row.

        Args:
            row: Two-element table row.

        Returns:
            MetricFindValue instance.
        """
        return cls(text=row[0], value=row[1])


@dataclass
class AnnotationEvent:
    """
    An alarm history event returned by an annotation query.

    Attributes:
        time: Event time in Unix milliseconds.
        title: Event title (alarm name).
        tags: Event tags.
        text: Event description.
    """

    time: int
    title: str
    tags: list[str] = field(default_factory=list)
    text: str = ""

    def to_dict(self) -> dict:
        return {
            "time": self.time,
            "title": self.title,
            "tags": list(self.tags),
            "text": self.text
        }

    @classmethod
    def from_row(cls, row: list) -> "AnnotationEvent":
        """
        Create AnnotationEvent from a [time, title, tag, text] table row.

        Args:
            row: Four-element table row with an ISO-8601 time.

        Returns:
            AnnotationEvent instance.
        """
        return cls(time=parse_iso_to_ms(row[0]), title=row[1], tags=[row[2]], text=row[3])
