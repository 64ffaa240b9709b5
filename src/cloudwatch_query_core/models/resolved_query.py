"""
ResolvedQuery model: a fully substituted query ready for submission.
"""

from dataclasses import dataclass, field

TIME_SERIES_QUERY_TYPE = "timeSeriesQuery"


@dataclass(frozen=True)
class ResolvedQuery:
    """
    A query with templates substituted, dimensions normalized, statistics
    validated and the period fixed to whole seconds.

    Attributes:
        ref_id: Correlation id linking the query to its response entry.
        id: Substituted user-defined query id.
        region: Concrete AWS region.
        namespace: Substituted namespace.
        metric_name: Substituted metric name.
        dimensions: Dimension key to list of values.
        statistics: Substituted, validated statistics.
        period: Period in seconds as a string.
        expression: Substituted expression.
        high_resolution: High-resolution flag, forwarded unchanged.
        hide: Hidden flag, forwarded unchanged.
        alias: Legend format, forwarded unchanged.
        match_exact: Exact-dimension matching, forwarded unchanged.
        return_data: Return-data flag, forwarded unchanged.
        interval_ms: Interval shared by every query in the batch.
        max_data_points: Point cap shared by every query in the batch.
        datasource_id: Id of the datasource executing the query.
        type: Request type tag understood by the backend.
    """

    ref_id: str
    region: str
    namespace: str
    metric_name: str
    period: str
    id: str = ""
    dimensions: dict[str, list[str]] = field(default_factory=dict)
    statistics: tuple[str, ...] = ()
    expression: str = ""
    high_resolution: bool = False
    hide: bool = False
    alias: str = ""
    match_exact: bool = True
    return_data: bool = True
    interval_ms: int = 0
    max_data_points: int = 0
    datasource_id: int = 0
    type: str = TIME_SERIES_QUERY_TYPE

    def to_wire(self) -> dict:
        """
        Convert to the backend's camelCase request shape.

        Returns:
            Dictionary suitable for the queries list of a batch request.
        """
        return {
            "refId": self.ref_id,
            "intervalMs": self.interval_ms,
            "maxDataPoints": self.max_data_points,
            "datasourceId": self.datasource_id,
            "type": self.type,
            "id": self.id,
            "region": self.region,
            "namespace": self.namespace,
            "metricName": self.metric_name,
            "dimensions": {k: list(v) for k, v in self.dimensions.items()},
            "statistics": list(self.statistics),
            "period": self.period,
            "expression": self.expression,
            "highResolution": self.high_resolution,
            "hide": self.hide,
            "alias": self.alias,
            "matchExact": self.match_exact,
            "returnData": self.return_data,
        }
