"""
Parser for free-form metadata lookup queries used by template variables.

Grammar (whitespace around arguments is ignored):

    regions()
    namespaces()
    metrics(namespace[, region])
    dimension_keys(namespace[, region])
    dimension_values(region, namespace, metric, key[, filterJson])
    ebs_volume_ids(region, instanceId)
    ec2_instance_attribute(region, attribute, filterJson)
    resource_arns(region, resourceType, tagsJson)

The last argument of a call absorbs any remaining commas, so inline JSON
does not need escaping.
"""

import re
from dataclasses import dataclass
from typing import Optional, Union

_CALL_PATTERN = re.compile(r"^(\w+)\((.*)\)", re.DOTALL)


@dataclass(frozen=True)
class RegionsQuery:
    pass


@dataclass(frozen=True)
class NamespacesQuery:
    pass


@dataclass(frozen=True)
class MetricsQuery:
    namespace: str
    region: Optional[str] = None


@dataclass(frozen=True)
class DimensionKeysQuery:
    namespace: str
    region: Optional[str] = None


@dataclass(frozen=True)
class DimensionValuesQuery:
    region: str
    namespace: str
    metric_name: str
    dimension_key: str
    filter_json: Optional[str] = None


@dataclass(frozen=True)
class EbsVolumeIdsQuery:
    region: str
    instance_id: str


@dataclass(frozen=True)
class Ec2InstanceAttributeQuery:
    region: str
    attribute_name: str
    filter_json: str


@dataclass(frozen=True)
class ResourceArnsQuery:
    region: str
    resource_type: str
    tags_json: str


MetricFindQuery = Union[
    RegionsQuery,
    NamespacesQuery,
    MetricsQuery,
    DimensionKeysQuery,
    DimensionValuesQuery,
    EbsVolumeIdsQuery,
    Ec2InstanceAttributeQuery,
    ResourceArnsQuery,
]

# function name -> (query type, required args, maximum args)
_FUNCTIONS = {
    "regions": (RegionsQuery, 0, 0),
    "namespaces": (NamespacesQuery, 0, 0),
    "metrics": (MetricsQuery, 1, 2),
    "dimension_keys": (DimensionKeysQuery, 1, 2),
    "dimension_values": (DimensionValuesQuery, 4, 5),
    "ebs_volume_ids": (EbsVolumeIdsQuery, 2, 2),
    "ec2_instance_attribute": (Ec2InstanceAttributeQuery, 3, 3),
    "resource_arns": (ResourceArnsQuery, 3, 3),
}


def _split_args(raw: str, max_args: int) -> list[str]:
    if max_args == 0 or not raw.strip():
        return []
    return [arg.strip() for arg in raw.split(",", max_args - 1)]


def parse_metric_find_query(query: str) -> Optional[MetricFindQuery]:
    """
    Parse a metadata lookup query string.

    Args:
        query: Query such as "dimension_values(us-east-1,AWS/EC2,CPUUtilization,InstanceId)".

    Returns:
        The parsed lookup, or None when the string matches no known function
        or has the wrong number of arguments.
    """
    match = _CALL_PATTERN.match(query.strip())
    if not match:
        return None

    name, raw_args = match.groups()
    if name not in _FUNCTIONS:
        return None

    query_type, required, maximum = _FUNCTIONS[name]
    if maximum == 0:
        return query_type() if not raw_args.strip() else None

    args = _split_args(raw_args, maximum)
    if len(args) < required or any(arg == "" for arg in args):
        return None
    return query_type(*args)
