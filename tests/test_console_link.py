"""Tests for CloudWatch console deep links."""

import json
from urllib.parse import unquote

from cloudwatch_query_core.console_link import build_console_url, build_graph_descriptor
from cloudwatch_query_core.models import ResolvedQuery

START = "2024-01-01T00:00:00.000Z"
END = "2024-01-01T06:00:00.000Z"


def _query(**kwargs) -> ResolvedQuery:
    defaults = dict(
        ref_id="A",
        region="eu-west-1",
        namespace="AWS/EC2",
        metric_name="CPUUtilization",
        period="300",
        dimensions={"InstanceId": ["i-1", "i-2"], "ImageId": ["ami-1"]},
        statistics=("Average", "p95"),
    )
    defaults.update(kwargs)
    return ResolvedQuery(**defaults)


def _decode(url: str) -> dict:
    return json.loads(unquote(url.split("graph=", 1)[1]))


class TestBuildGraphDescriptor:
    """Test build_graph_descriptor."""

    def test_explicit_selection(self) -> None:
        descriptor = build_graph_descriptor(_query(), START, END, "A")
        assert descriptor == {
            "view": "timeSeries",
            "stacked": False,
            "title": "A",
            "start": START,
            "end": END,
            "region": "eu-west-1",
            "metrics": [
                ["AWS/EC2", "CPUUtilization", "InstanceId", "i-1", "ImageId", "ami-1",
                 {"stat": "Average", "period": "300"}],
                ["AWS/EC2", "CPUUtilization", "InstanceId", "i-1", "ImageId", "ami-1",
                 {"stat": "p95", "period": "300"}],
            ],
        }

    def test_search_expressions(self) -> None:
        expressions = [
            "SEARCH('{AWS/EC2,InstanceId} MetricName=\"CPUUtilization\"', 'Average', 300)"
        ]
        descriptor = build_graph_descriptor(_query(), START, END, "A", expressions)
        assert descriptor["metrics"] == [{"expression": expressions[0]}]

    def test_empty_search_expressions_use_selection(self) -> None:
        descriptor = build_graph_descriptor(_query(), START, END, "A", [])
        assert descriptor["metrics"][0][0] == "AWS/EC2"

    def test_no_dimensions(self) -> None:
        descriptor = build_graph_descriptor(_query(dimensions={}), START, END, "A")
        assert descriptor["metrics"][0] == [
            "AWS/EC2", "CPUUtilization", {"stat": "Average", "period": "300"}
        ]

    def test_empty_dimension_values(self) -> None:
        descriptor = build_graph_descriptor(_query(dimensions={"InstanceId": []}), START, END, "A")
        assert descriptor["metrics"][0][2:4] == ["InstanceId", None]


class TestBuildConsoleUrl:
    """Test build_console_url."""

    def test_url_prefix_encodes_region_twice(self) -> None:
        url = build_console_url(_query(region="ap-south-1"), START, END, "A")
        assert url.startswith(
            "https://ap-south-1.console.aws.amazon.com/cloudwatch/deeplink.js"
            "?region=ap-south-1#metricsV2:graph="
        )

    def test_descriptor_round_trips(self) -> None:
        url = build_console_url(_query(), START, END, "A")
        assert _decode(url) == build_graph_descriptor(_query(), START, END, "A")

    def test_descriptor_percent_encoded(self) -> None:
        url = build_console_url(_query(), START, END, "A")
        graph = url.split("graph=", 1)[1]
        assert graph.startswith("%7B%22view%22%3A%22timeSeries%22%2C%22stacked%22%3Afalse")
        assert " " not in graph
        assert "/" not in graph

    def test_non_ascii_values_percent_encoded_as_utf8(self) -> None:
        url = build_console_url(_query(dimensions={"Team": ["café"]}), START, END, "A")
        assert "caf%C3%A9" in url
        assert "%5Cu00e9" not in url
        assert _decode(url)["metrics"][0][2:4] == ["Team", "café"]
