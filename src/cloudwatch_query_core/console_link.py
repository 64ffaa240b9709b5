"""
Deep links into the CloudWatch console metrics view.
"""

import json
from typing import Optional
from urllib.parse import quote

from .models import ResolvedQuery

CONSOLE_URL_TEMPLATE = (
    "https://{region}.console.aws.amazon.com/cloudwatch/deeplink.js"
    "?region={region}#metricsV2:graph={graph}"
)

# Characters encodeURIComponent leaves unescaped besides alphanumerics.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def build_graph_descriptor(
    query: ResolvedQuery,
    start: str,
    end: str,
    title: str,
    search_expressions: Optional[list[str]] = None,
) -> dict:
    """
    Build the console's metricsV2 graph descriptor for a query.

    With search expressions each becomes an {"expression": ...} entry.
    Otherwise there is one entry per statistic of the form
    [namespace, metric, key1, value1, ..., {"stat": ..., "period": ...}],
    using the first value of each dimension.

    Args:
        query: Resolved query the link is for.
        start: Window start as an ISO-8601 string.
        end: Window end as an ISO-8601 string.
        title: Graph title.
        search_expressions: Search expressions reported by the backend.

    Returns:
        Descriptor dictionary.
    """
    descriptor = {
        "view": "timeSeries",
        "stacked": False,
        "title": title,
        "start": start,
        "end": end,
        "region": query.region,
    }

    if search_expressions:
        descriptor["metrics"] = [{"expression": expr} for expr in search_expressions]
        return descriptor

    dimension_pairs = []
    for key, values in query.dimensions.items():
        dimension_pairs.extend([key, values[0] if values else None])

    descriptor["metrics"] = [
        [
            query.namespace,
            query.metric_name,
            *dimension_pairs,
            {"stat": stat, "period": query.period},
        ]
        for stat in query.statistics
    ]
    return descriptor


def build_console_url(
    query: ResolvedQuery,
    start: str,
    end: str,
    title: str,
    search_expressions: Optional[list[str]] = None,
) -> str:
    """
    Build a CloudWatch console URL showing the query's metrics.

    Args:
        query: Resolved query the link is for.
        start: Window start as an ISO-8601 string.
        end: Window end as an ISO-8601 string.
        title: Graph title.
        search_expressions: Search expressions reported by the backend.

    Returns:
        Console deep-link URL.
    """
    descriptor = build_graph_descriptor(query, start, end, title, search_expressions)
    payload = json.dumps(descriptor, separators=(",", ":"), ensure_ascii=False)
    graph = quote(payload, safe=_URI_COMPONENT_SAFE)
    return CONSOLE_URL_TEMPLATE.format(region=query.region, graph=graph)
