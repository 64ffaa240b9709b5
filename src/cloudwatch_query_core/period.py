"""
Sampling period resolution for CloudWatch metric queries.

CloudWatch keeps 1-minute data for 15 days, 5-minute data for 63 days and
1-hour data for 455 days, and GetMetricData returns at most 1440 points per
series unless high resolution is requested.
"""

import math
import re
from datetime import datetime, timezone
from typing import Any, Optional

import structlog

from .models.query_spec import QuerySpec
from .models.time_range import TimeRange
from .templating import TemplateService
from .utils import (
    SECONDS_PER_DAY,
    SECONDS_PER_HOUR,
    SECONDS_PER_MINUTE,
    datetime_to_ms,
    interval_to_seconds,
    to_epoch_seconds,
)

logger = structlog.get_logger()

MAX_DATA_POINTS_PER_SERIES = 1440
EC2_NAMESPACE = "AWS/EC2"

_INTEGER_PERIOD = re.compile(r"^[0-9]+$")


def default_period(namespace: str, start: int, now: int) -> int:
    """
    Pick the finest period CloudWatch still retains for data starting at start.

    Args:
        namespace: Metric namespace; EC2 basic monitoring reports every 5 minutes.
        start: Window start in Unix seconds.
        now: Current time in Unix seconds.

    Returns:
        Period in seconds.
    """
    age = now - start
    if age <= SECONDS_PER_DAY * 15:
        if namespace == EC2_NAMESPACE:
            return SECONDS_PER_MINUTE * 5
        return SECONDS_PER_MINUTE
    if age <= SECONDS_PER_DAY * 63:
        return SECONDS_PER_MINUTE * 5
    if age <= SECONDS_PER_DAY * 455:
        return SECONDS_PER_HOUR

    logger.debug("period_beyond_retention", age_seconds=age)
    return SECONDS_PER_HOUR


def resolve_period(
    query: QuerySpec,
    time_range: TimeRange,
    templates: TemplateService,
    scoped_vars: Optional[dict[str, Any]] = None,
    now: Optional[datetime] = None,
) -> int:
    """
    Compute the sampling period in seconds for a query.

    Without an explicit period the retention-based default is used. An
    integer period is taken literally; anything else is substituted and
    parsed as a duration. The result is at least one second and, unless
    the query is high resolution, widened so the window yields fewer than
    1440 points.

    The widening step rounds to multiples of the default-period unit, which
    is 60 whenever an explicit period was given.

    Args:
        query: Query carrying period, namespace and high_resolution.
        time_range: Absolute window of the request.
        templates: Template service used for duration expressions.
        scoped_vars: Per-call variable overrides.
        now: Current time; defaults to the wall clock.

    Returns:
        Period in whole seconds.

    Raises:
        InvalidPeriodError: If an explicit period is not a valid duration.
    """
    start = to_epoch_seconds(time_range.from_time, round_up=False)
    end = to_epoch_seconds(time_range.to_time, round_up=True)
    now_seconds = round(datetime_to_ms(now or datetime.now(timezone.utc)) / 1000)
    span = end - start

    period_unit = SECONDS_PER_MINUTE
    if not query.period:
        period = period_unit = default_period(query.namespace, start, now_seconds)
    elif _INTEGER_PERIOD.match(query.period):
        period = int(query.period)
    else:
        period = interval_to_seconds(templates.replace(query.period, scoped_vars))

    if period < 1:
        period = 1

    if not query.high_resolution and span / period >= MAX_DATA_POINTS_PER_SERIES:
        period = math.ceil(span / MAX_DATA_POINTS_PER_SERIES / period_unit) * period_unit

    return int(period)
