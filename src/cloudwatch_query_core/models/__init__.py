"""
Data models for cloudwatch-query-core.
"""

from .batch_request import BatchRequest
from .lookups import AnnotationEvent, MetricFindValue
from .query_result import QueryResult
from .query_spec import QueryRequest, QuerySpec
from .resolved_query import ResolvedQuery
from .series import DataLink, Series
from .settings import DatasourceSettings
from .time_range import TimeRange

__all__ = [
    "AnnotationEvent",
    "BatchRequest",
    "DataLink",
    "DatasourceSettings",
    "MetricFindValue",
    "QueryRequest",
    "QueryResult",
    "QuerySpec",
    "ResolvedQuery",
    "Series",
    "TimeRange",
]
