"""
QueryResult model representing one correlation id's entry in a batch response.
"""

from dataclasses import dataclass, field
from typing import Optional

from .series import Series


@dataclass
class QueryResult:
    """
    Result of a single submitted query within a batch response.

    Attributes:
        ref_id: Correlation id of the originating query.
        series: Series returned for the query.
        search_expressions: Search expressions the backend ran for the query.
        error: Error or warning reported by the backend for this query.
    """

    ref_id: str
    series: list[Series] = field(default_factory=list)
    search_expressions: list[str] = field(default_factory=list)
    error: Optional[str] = None

    def to_dict(self) -> dict:
        """
        Convert to dictionary for serialization.

        Returns:
            Dictionary with refId, series, searchExpressions and error.
        """
        return {
            "refId": self.ref_id,
            "series": [s.to_dict() for s in self.series],
            "searchExpressions": list(self.search_expressions),
            "error": self.error
        }

    @classmethod
    def from_tsdb_result(cls, ref_id: str, data: dict) -> "QueryResult":
        """
        Create QueryResult from a backend result entry.

        Format: {"series": [{"name", "points"}], "meta": {"searchExpressions": []},
        "error": "..."}. Missing sections are treated as empty.

        Args:
            ref_id: Correlation id the entry was found under.
            data: Result entry from the response's results map.

        Returns:
            QueryResult instance.
        """
        meta = data.get("meta") or {}
        return cls(
            ref_id=ref_id,
            series=[Series.from_tsdb_series(s) for s in data.get("series") or []],
            search_expressions=list(meta.get("searchExpressions") or []),
            error=data.get("error") or None,
        )

    @property
    def total_points(self) -> int:
        """
        Get total number of points across all series.

        Returns:
            Total point count.
        """
        return sum(len(series.points) for series in self.series)
