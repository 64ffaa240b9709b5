"""
Rewriting of editor queries into the backend's batched request shape.
"""

import re
from dataclasses import replace
from datetime import datetime
from typing import Iterable, Optional

import structlog

from .dimensions import normalize_dimensions
from .exceptions import InvalidStatisticError
from .models import BatchRequest, QueryRequest, QuerySpec, ResolvedQuery, TimeRange
from .period import resolve_period
from .templating import TemplateService

logger = structlog.get_logger()

DEFAULT_REGION_SENTINEL = "default"

EXTENDED_STATISTIC_PATTERN = re.compile(r"p[0-9]{2}(?:\.[0-9]{1,2})?")


def actual_region(region: Optional[str], default_region: str) -> str:
    """
    Map the "default" sentinel (or a blank region) to the configured region.

    Args:
        region: Region as authored.
        default_region: Datasource default region.

    Returns:
        Region to substitute.
    """
    if region == DEFAULT_REGION_SENTINEL or not region:
        return default_region
    return region


def validate_statistics(statistics: Iterable[str]) -> None:
    """
    Check extended statistics such as p90 or p95.50.

    Only entries starting with "p" are checked; standard statistics and
    anything else pass through.

    Args:
        statistics: Substituted statistics of a query.

    Raises:
        InvalidStatisticError: If a "p" statistic is not p + 2 digits with
            an optional 1-2 digit fraction.
    """
    for stat in statistics:
        if stat.startswith("p") and not EXTENDED_STATISTIC_PATTERN.fullmatch(stat):
            raise InvalidStatisticError(f"Invalid extended statistics: {stat}")


def resolve_query(
    query: QuerySpec,
    request: QueryRequest,
    templates: TemplateService,
    datasource_id: int,
    default_region: str,
    now: Optional[datetime] = None,
) -> ResolvedQuery:
    """
    Substitute, normalize and validate one query.

    Args:
        query: Submittable query from the editor.
        request: Enclosing request carrying range, scope and batch options.
        templates: Template service for substitution.
        datasource_id: Id forwarded with the query.
        default_region: Region used for the "default" sentinel.
        now: Current time for period resolution; defaults to the wall clock.

    Returns:
        ResolvedQuery ready for submission.

    Raises:
        InvalidStatisticError: If an extended statistic is malformed.
        InvalidPeriodError: If an explicit period cannot be parsed.
    """
    scope = request.scoped_vars
    namespace = templates.replace(query.namespace, scope)
    statistics = tuple(templates.replace(stat, scope) for stat in query.statistics)
    validate_statistics(statistics)

    period = resolve_period(
        replace(query, namespace=namespace), request.range, templates, scope, now=now
    )

    return ResolvedQuery(
        ref_id=query.ref_id,
        id=templates.replace(query.id, scope),
        region=templates.replace(actual_region(query.region, default_region), scope),
        namespace=namespace,
        metric_name=templates.replace(query.metric_name, scope),
        dimensions=normalize_dimensions(query.dimensions, templates, scope),
        statistics=statistics,
        period=str(period),
        expression=templates.replace(query.expression, scope),
        high_resolution=query.high_resolution,
        hide=query.hide,
        alias=query.alias,
        match_exact=query.match_exact,
        return_data=query.return_data,
        interval_ms=request.interval_ms,
        max_data_points=request.max_data_points,
        datasource_id=datasource_id,
    )


def build_queries(
    request: QueryRequest,
    templates: TemplateService,
    datasource_id: int,
    default_region: str,
    now: Optional[datetime] = None,
) -> list[ResolvedQuery]:
    """
    Filter and resolve every target of a request, preserving order.

    Queries that are hidden without an id, or that carry neither a full
    metric selection nor an expression, are dropped. A single invalid
    statistic or period aborts the whole batch.

    Args:
        request: Query request from the panel.
        templates: Template service for substitution.
        datasource_id: Id forwarded with each query.
        default_region: Region used for the "default" sentinel.
        now: Current time for period resolution.

    Returns:
        Resolved queries; empty when nothing is submittable.
    """
    submittable = [q for q in request.targets if q.is_submittable]
    skipped = len(request.targets) - len(submittable)
    if skipped:
        logger.debug("queries_skipped", count=skipped)

    return [
        resolve_query(q, request, templates, datasource_id, default_region, now=now)
        for q in submittable
    ]


def build_batch_request(queries: list[ResolvedQuery], time_range: TimeRange) -> BatchRequest:
    """
    Combine resolved queries and the request window into one batch.

    Args:
        queries: Resolved queries in submission order.
        time_range: Absolute window of the request.

    Returns:
        BatchRequest for a single network call.
    """
    batch = BatchRequest.for_range(time_range, queries)
    logger.debug(
        "time_series_query_built",
        queries=len(queries),
        ref_ids=[q.ref_id for q in queries],
        from_ms=batch.from_ms,
        to_ms=batch.to_ms,
    )
    return batch

