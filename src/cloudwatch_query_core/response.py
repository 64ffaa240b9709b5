"""
Demultiplexing of batched time series responses onto submitted queries.
"""

import structlog

from .console_link import build_console_url
from .models import DataLink, QueryResult, ResolvedQuery, Series, TimeRange
from .utils import to_iso_string

logger = structlog.get_logger()


def demultiplex_response(
    queries: list[ResolvedQuery],
    response: dict,
    time_range: TimeRange,
) -> list[Series]:
    """
    Map a batch response back onto the submitted queries.

    Results are looked up by correlation id in submission order; queries
    without a result are skipped. Every series of a query carries the same
    console link, built from the backend's search expressions when present
    and from the explicit metric selection otherwise.

    Args:
        queries: Queries that were submitted in the batch.
        response: Decoded JSON body of the batch response.
        time_range: Window of the request, used for the console link.

    Returns:
        Flattened list of series; empty when the response has no results.
    """
    results = response.get("results")
    if not results:
        return []

    start = to_iso_string(time_range.from_time)
    end = to_iso_string(time_range.to_time)

    series: list[Series] = []
    for query in queries:
        entry = results.get(query.ref_id)
        if not entry:
            continue

        result = QueryResult.from_tsdb_result(query.ref_id, entry)
        logger.debug(
            "query_result_received",
            ref_id=query.ref_id,
            series=len(result.series),
            points=result.total_points,
        )
        if result.error:
            logger.warning("query_result_error", ref_id=query.ref_id, error=result.error)

        link = DataLink(
            url=build_console_url(query, start, end, query.ref_id, result.search_expressions)
        )
        for item in result.series:
            item.links = [link]
            series.append(item)

    return series
