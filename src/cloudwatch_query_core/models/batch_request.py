"""
BatchRequest model: one outbound request carrying every query of a call.
"""

from dataclasses import dataclass, field

from .resolved_query import ResolvedQuery
from .time_range import TimeRange


@dataclass
class BatchRequest:
    """
    Queries and time range sent to the backend in a single call.

    Attributes:
        from_ms: Start of the window in Unix milliseconds.
        to_ms: End of the window in Unix milliseconds.
        queries: Resolved queries in submission order.
    """

    from_ms: int
    to_ms: int
    queries: list[ResolvedQuery] = field(default_factory=list)

    @classmethod
    def for_range(cls, time_range: TimeRange, queries: list[ResolvedQuery]) -> "BatchRequest":
        """
        Create a BatchRequest covering the given time range.

        Args:
            time_range: Absolute window for every query.
            queries: Resolved queries in submission order.

        Returns:
            BatchRequest instance.
        """
        return cls(from_ms=time_range.from_ms, to_ms=time_range.to_ms, queries=list(queries))

    def to_dict(self) -> dict:
        """
        Convert to the JSON body expected by the query endpoint.

        Returns:
            Dictionary with stringified from/to and the wire-shape queries.
        """
        return {
            "from": str(self.from_ms),
            "to": str(self.to_ms),
            "queries": [query.to_wire() for query in self.queries]
        }
