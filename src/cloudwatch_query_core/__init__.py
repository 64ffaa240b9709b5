"""
Python library for building and running CloudWatch datasource queries
"""

from .client import CloudWatchClient
from .exceptions import (
    CloudWatchAuthError,
    CloudWatchConnectionError,
    CloudWatchError,
    CloudWatchQueryError,
    CloudWatchThrottlingError,
    CloudWatchValidationError,
    InvalidPeriodError,
    InvalidStatisticError,
)
from .models import (
    AnnotationEvent,
    BatchRequest,
    DataLink,
    DatasourceSettings,
    MetricFindValue,
    QueryRequest,
    QueryResult,
    QuerySpec,
    ResolvedQuery,
    Series,
    TimeRange,
)
from .templating import TemplateService, TemplateVariable

__version__ = "0.1.0"

__all__ = [
    "CloudWatchClient",
    "TemplateService",
    "TemplateVariable",
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
    "CloudWatchError",
    "CloudWatchConnectionError",
    "CloudWatchAuthError",
    "CloudWatchQueryError",
    "CloudWatchValidationError",
    "CloudWatchThrottlingError",
    "InvalidStatisticError",
    "InvalidPeriodError",
]
