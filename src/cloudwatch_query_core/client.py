"""
CloudWatchClient for querying a CloudWatch datasource via the platform's query API.
"""

import json
import re
from datetime import datetime
from typing import Any, Optional

import requests

from .dimensions import normalize_dimensions
from .exceptions import (
    CloudWatchAuthError,
    CloudWatchConnectionError,
    CloudWatchQueryError,
    CloudWatchThrottlingError,
    CloudWatchValidationError,
)
from .logging import bind_datasource
from .metric_find import (
    DimensionKeysQuery,
    DimensionValuesQuery,
    EbsVolumeIdsQuery,
    Ec2InstanceAttributeQuery,
    MetricsQuery,
    NamespacesQuery,
    RegionsQuery,
    ResourceArnsQuery,
    parse_metric_find_query,
)
from .models import (
    AnnotationEvent,
    DatasourceSettings,
    MetricFindValue,
    QueryRequest,
    QuerySpec,
    Series,
    TimeRange,
)
from .query_builder import actual_region, build_batch_request, build_queries
from .response import demultiplex_response
from .templating import TemplateService

QUERY_ENDPOINT = "/api/tsdb/query"

_LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)")

METRIC_FIND_REF_ID = "metricFindQuery"
ANNOTATION_REF_ID = "annotationQuery"

VALIDATION_ERROR_PREFIX = "ValidationError:"
THROTTLING_ERROR_PREFIX = "Throttling:"


def _classify_error(err: CloudWatchQueryError) -> CloudWatchQueryError:
    """Map backend validation and throttling failures to their own error types.

    Args:
        err: Error raised for a failed time series request.

    Returns:
        A CloudWatchValidationError or CloudWatchThrottlingError when the
        backend error string carries the matching prefix, else err itself.
        Non-string error payloads are never reclassified.
    """
    message = err.error if isinstance(err.error, str) else ""
    if message.startswith(VALIDATION_ERROR_PREFIX):
        return CloudWatchValidationError(message, err.status_code, err.error)
    if message.startswith(THROTTLING_ERROR_PREFIX):
        return CloudWatchThrottlingError(
            f"Please visit the AWS Service Quotas console to request a limit increase: {message}",
            err.status_code,
            err.error,
        )
    return err


def _leading_int(value: Any) -> Optional[int]:
    """Read the integer prefix of value ("5m" -> 5), or None when there is none."""
    match = _LEADING_INTEGER.match(str(value))
    return int(match.group(1)) if match else None


def _table_rows(response: dict, ref_id: str) -> list[list]:
    """Extract the rows of the first table returned for ref_id."""
    result = (response.get("results") or {}).get(ref_id) or {}
    tables = result.get("tables") or []
    if not tables:
        return []
    return tables[0].get("rows") or []


class CloudWatchClient:
    """
    Client for a CloudWatch datasource.

    Translates panel queries into one batched request, sends it to the
    platform's query endpoint and maps the answer back to display series.

    Example:
        client = CloudWatchClient(
            base_url="https://grafana.example.com",
            datasource_id=3,
            default_region="eu-west-1",
        )

        series = client.query(QueryRequest(
            targets=[QuerySpec(ref_id="A", namespace="AWS/EC2",
                               metric_name="CPUUtilization")],
            range=TimeRange.last(hours=3),
        ))
    """

    def __init__(
        self,
        base_url: str,
        datasource_id: int,
        default_region: str,
        templates: Optional[TemplateService] = None,
        auth: Optional[tuple[str, str]] = None,
        org_id: Optional[str] = None,
        ca_cert: Optional[str] = None,
        verify_ssl: bool = True,
        timeout: int = 30
    ):
        """
        Initialize the CloudWatch client.

        Args:
            base_url: Base URL of the platform (e.g., "https://grafana.example.com").
            datasource_id: Numeric id of the CloudWatch datasource.
            default_region: Region used for queries whose region is "default".
            templates: Template service for variable substitution.
            auth: Optional tuple of (username, password) for basic authentication.
            org_id: Optional X-Grafana-Org-Id header for multi-org setups.
            ca_cert: Optional path to CA certificate PEM file for self-signed certs.
            verify_ssl: Whether to verify SSL certificates. Set False to disable (insecure).
            timeout: Request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.datasource_id = datasource_id
        self.default_region = default_region
        self.templates = templates or TemplateService()
        self.auth = auth
        self.org_id = org_id
        self.ca_cert = ca_cert
        self.verify_ssl = verify_ssl
        self.timeout = timeout

        self._session: Optional[requests.Session] = None
        self._log = bind_datasource(datasource_id)

    @classmethod
    def from_settings(
        cls,
        base_url: str,
        settings: DatasourceSettings,
        **kwargs: Any
    ) -> "CloudWatchClient":
        """
        Create a client from datasource instance settings.

        Args:
            base_url: Base URL of the platform.
            settings: Datasource configuration.
            **kwargs: Further constructor arguments (templates, auth, ...).

        Returns:
            Configured CloudWatchClient.
        """
        return cls(
            base_url=base_url,
            datasource_id=settings.id,
            default_region=settings.default_region,
            **kwargs
        )

    @property
    def session(self) -> requests.Session:
        """
        Get or create HTTP session with configured authentication and SSL settings.

        Returns:
            Configured requests.Session instance.
        """
        if self._session is None:
            self._session = requests.Session()

            if self.auth:
                self._session.auth = self.auth

            if self.org_id:
                self._session.headers["X-Grafana-Org-Id"] = self.org_id

            if self.ca_cert:
                self._session.verify = self.ca_cert
            else:
                self._session.verify = self.verify_ssl

        return self._session

    def _request(self, body: dict) -> dict:
        """
        POST a batch to the query endpoint.

        Args:
            body: JSON request body.

        Returns:
            JSON response as dictionary.

        Raises:
            CloudWatchConnectionError: If connection to the platform fails.
            CloudWatchAuthError: If authentication fails (401/403).
            CloudWatchQueryError: If the request fails or returns an error.
        """
        url = f"{self.base_url}{QUERY_ENDPOINT}"

        try:
            response = self.session.request(
                method="POST",
                url=url,
                json=body,
                timeout=self.timeout
            )
        except requests.exceptions.SSLError as e:
            raise CloudWatchConnectionError(f"SSL error connecting to {url}: {e}") from e
        except requests.exceptions.ConnectionError as e:
            raise CloudWatchConnectionError(f"Failed to connect to {url}: {e}") from e
        except requests.exceptions.Timeout as e:
            raise CloudWatchConnectionError(f"Request to {url} timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            raise CloudWatchConnectionError(f"Request to {url} failed: {e}") from e

        if response.status_code == 401:
            raise CloudWatchAuthError("Authentication failed: invalid credentials")
        if response.status_code == 403:
            raise CloudWatchAuthError("Authorization failed: access denied")

        if response.status_code != 200:
            try:
                payload = response.json()
            except ValueError:
                payload = {}
            error = None
            if isinstance(payload, dict):
                error = payload.get("error") or payload.get("message")
            raise CloudWatchQueryError(
                f"Query failed with status {response.status_code}: {error or response.text}",
                status_code=response.status_code,
                error=error,
            )

        try:
            return response.json()
        except ValueError as e:
            raise CloudWatchQueryError(f"Invalid JSON response: {e}") from e

    def get_actual_region(self, region: Optional[str]) -> str:
        """Resolve the "default" sentinel (or a blank region) to the default region."""
        return actual_region(region, self.default_region)

    def query(self, request: QueryRequest, now: Optional[datetime] = None) -> list[Series]:
        """
        Execute the panel's queries in one batched request.

        Args:
            request: Targets, time range, scope and batch options.
            now: Current time for period resolution; defaults to the wall clock.

        Returns:
            Display series with console links. Empty, without a network call,
            when no target is submittable.

        Raises:
            InvalidStatisticError: If an extended statistic is malformed.
            InvalidPeriodError: If an explicit period cannot be parsed.
            CloudWatchValidationError: If the backend rejects the query.
            CloudWatchThrottlingError: If the backend is throttled.
            CloudWatchQueryError: For any other backend failure.
        """
        queries = build_queries(
            request,
            self.templates,
            datasource_id=self.datasource_id,
            default_region=self.default_region,
            now=now,
        )
        if not queries:
            return []

        batch = build_batch_request(queries, request.range)
        try:
            response = self._request(batch.to_dict())
        except CloudWatchQueryError as e:
            classified = _classify_error(e)
            self._log.error(
                "time_series_query_failed",
                error=e.error or str(e),
                notification=classified.notification,
            )
            if classified is e:
                raise
            raise classified from e

        return demultiplex_response(queries, response, request.range)

    def _metric_find_request(
        self,
        subtype: str,
        parameters: Optional[dict] = None,
        time_range: Optional[TimeRange] = None
    ) -> list[MetricFindValue]:
        """
        Send a single metadata lookup and read back its suggestion table.

        Args:
            subtype: Lookup kind understood by the backend.
            parameters: Lookup parameters merged into the query.
            time_range: Window of the lookup; defaults to the last 6 hours.

        Returns:
            Suggestions from the first returned table.
        """
        time_range = time_range or TimeRange.last(hours=6)
        query = {
            "refId": METRIC_FIND_REF_ID,
            "intervalMs": 1,
            "maxDataPoints": 1,
            "datasourceId": self.datasource_id,
            "type": "metricFindQuery",
            "subtype": subtype,
        }
        query.update(parameters or {})

        response = self._request({
            "from": str(time_range.from_ms),
            "to": str(time_range.to_ms),
            "queries": [query],
        })
        rows = _table_rows(response, METRIC_FIND_REF_ID)
        return [MetricFindValue.from_row(row) for row in rows]

    def get_regions(self, time_range: Optional[TimeRange] = None) -> list[MetricFindValue]:
        return self._metric_find_request("regions", None, time_range)

    def get_namespaces(self, time_range: Optional[TimeRange] = None) -> list[MetricFindValue]:
        return self._metric_find_request("namespaces", None, time_range)

    def get_metrics(
        self,
        namespace: str,
        region: Optional[str] = None,
        time_range: Optional[TimeRange] = None
    ) -> list[MetricFindValue]:
        """
        Get metric names available in a namespace.

        Args:
            namespace: Metric namespace.
            region: Region, "default" or None for the default region.
            time_range: Window of the lookup.

        Returns:
            Metric name suggestions.
        """
        return self._metric_find_request("metrics", {
            "region": self.templates.replace(self.get_actual_region(region)),
            "namespace": self.templates.replace(namespace),
        }, time_range)

    def get_dimension_keys(
        self,
        namespace: str,
        region: Optional[str] = None,
        time_range: Optional[TimeRange] = None
    ) -> list[MetricFindValue]:
        """
        Get dimension keys available in a namespace.

        Args:
            namespace: Metric namespace.
            region: Region, "default" or None for the default region.
            time_range: Window of the lookup.

        Returns:
            Dimension key suggestions.
        """
        return self._metric_find_request("dimension_keys", {
            "region": self.templates.replace(self.get_actual_region(region)),
            "namespace": self.templates.replace(namespace),
        }, time_range)

    def get_dimension_values(
        self,
        region: str,
        namespace: str,
        metric_name: str,
        dimension_key: str,
        filter_dimensions: Optional[dict] = None,
        time_range: Optional[TimeRange] = None
    ) -> list[MetricFindValue]:
        """
        Get values of a dimension, optionally narrowed by other dimensions.

        Args:
            region: Region or "default".
            namespace: Metric namespace.
            metric_name: Metric name.
            dimension_key: Dimension whose values are wanted.
            filter_dimensions: Other dimensions to filter on.
            time_range: Window of the lookup.

        Returns:
            Dimension value suggestions.
        """
        return self._metric_find_request("dimension_values", {
            "region": self.templates.replace(self.get_actual_region(region)),
            "namespace": self.templates.replace(namespace),
            "metricName": self.templates.replace(metric_name),
            "dimensionKey": self.templates.replace(dimension_key),
            "dimensions": normalize_dimensions(filter_dimensions or {}, self.templates, {}),
        }, time_range)

    def get_ebs_volume_ids(
        self,
        region: str,
        instance_id: str,
        time_range: Optional[TimeRange] = None
    ) -> list[MetricFindValue]:
        return self._metric_find_request("ebs_volume_ids", {
            "region": self.templates.replace(self.get_actual_region(region)),
            "instanceId": self.templates.replace(instance_id),
        }, time_range)

    def get_ec2_instance_attribute(
        self,
        region: str,
        attribute_name: str,
        filters: dict,
        time_range: Optional[TimeRange] = None
    ) -> list[MetricFindValue]:
        """
        Get an attribute of the EC2 instances matching filters.

        Args:
            region: Region or "default".
            attribute_name: Instance attribute, e.g. "InstanceId" or "Tags.Name".
            filters: EC2 filter name to list of values.
            time_range: Window of the lookup.

        Returns:
            Attribute value suggestions.
        """
        return self._metric_find_request("ec2_instance_attribute", {
            "region": self.templates.replace(self.get_actual_region(region)),
            "attributeName": self.templates.replace(attribute_name),
            "filters": filters,
        }, time_range)

    def get_resource_arns(
        self,
        region: str,
        resource_type: str,
        tags: dict,
        time_range: Optional[TimeRange] = None
    ) -> list[MetricFindValue]:
        """
        Get ARNs of resources of a type carrying the given tags.

        Args:
            region: Region or "default".
            resource_type: Resource type filter, e.g. "ec2:instance".
            tags: Tag key to list of values.
            time_range: Window of the lookup.

        Returns:
            Resource ARN suggestions.
        """
        return self._metric_find_request("resource_arns", {
            "region": self.templates.replace(self.get_actual_region(region)),
            "resourceType": self.templates.replace(resource_type),
            "tags": tags,
        }, time_range)

    def metric_find_query(
        self,
        query: str,
        time_range: Optional[TimeRange] = None
    ) -> list[MetricFindValue]:
        """
        Run a free-form metadata lookup such as "metrics(AWS/EC2)".

        Args:
            query: Lookup expression; see metric_find for the grammar.
            time_range: Window of the lookup.

        Returns:
            Suggestions, or an empty list when the expression is not recognized.

        Raises:
            json.JSONDecodeError: If an inline filter or tag argument is not valid JSON.
        """
        parsed = parse_metric_find_query(query)
        if parsed is None:
            self._log.debug("metric_find_query_unrecognized", query=query)
            return []

        if isinstance(parsed, RegionsQuery):
            return self.get_regions(time_range)
        if isinstance(parsed, NamespacesQuery):
            return self.get_namespaces(time_range)
        if isinstance(parsed, MetricsQuery):
            return self.get_metrics(parsed.namespace, parsed.region, time_range)
        if isinstance(parsed, DimensionKeysQuery):
            return self.get_dimension_keys(parsed.namespace, parsed.region, time_range)
        if isinstance(parsed, DimensionValuesQuery):
            filters = {}
            if parsed.filter_json:
                filters = json.loads(self.templates.replace(parsed.filter_json))
            return self.get_dimension_values(
                parsed.region,
                parsed.namespace,
                parsed.metric_name,
                parsed.dimension_key,
                filters,
                time_range,
            )
        if isinstance(parsed, EbsVolumeIdsQuery):
            return self.get_ebs_volume_ids(parsed.region, parsed.instance_id, time_range)
        if isinstance(parsed, Ec2InstanceAttributeQuery):
            filters = json.loads(self.templates.replace(parsed.filter_json))
            return self.get_ec2_instance_attribute(
                parsed.region, parsed.attribute_name, filters, time_range
            )
        if isinstance(parsed, ResourceArnsQuery):
            tags = json.loads(self.templates.replace(parsed.tags_json))
            return self.get_resource_arns(parsed.region, parsed.resource_type, tags, time_range)
        return []

    def annotation_query(self, annotation: dict, time_range: TimeRange) -> list[AnnotationEvent]:
        """
        Fetch alarm history events for an annotation definition.

        Args:
            annotation: Annotation settings with region, namespace, metricName,
                dimensions, statistics, period, prefixMatching, actionPrefix
                and alarmNamePrefix. The period is sent as its integer
                prefix ("5m" -> 5), or null when it has none.
            time_range: Window to fetch events for.

        Returns:
            Annotation events in backend order.
        """
        prefix_matching = bool(annotation.get("prefixMatching", False))
        period = annotation.get("period") or ("" if prefix_matching else "300")

        query = {
            "refId": ANNOTATION_REF_ID,
            "intervalMs": 1,
            "maxDataPoints": 1,
            "datasourceId": self.datasource_id,
            "type": "annotationQuery",
            "prefixMatching": prefix_matching,
            "region": self.templates.replace(self.get_actual_region(annotation.get("region"))),
            "namespace": self.templates.replace(annotation.get("namespace", "")),
            "metricName": self.templates.replace(annotation.get("metricName", "")),
            "dimensions": normalize_dimensions(
                annotation.get("dimensions") or {}, self.templates, {}
            ),
            "statistics": [self.templates.replace(s) for s in annotation.get("statistics") or []],
            "period": _leading_int(period),
            "actionPrefix": annotation.get("actionPrefix") or "",
            "alarmNamePrefix": annotation.get("alarmNamePrefix") or "",
        }

        response = self._request({
            "from": str(time_range.from_ms),
            "to": str(time_range.to_ms),
            "queries": [query],
        })
        return [AnnotationEvent.from_row(row) for row in _table_rows(response, ANNOTATION_REF_ID)]

    def target_contains_template(self, query: QuerySpec) -> bool:
        """
        Check whether a query references any declared template variable.

        Args:
            query: Query to inspect.

        Returns:
            True if region, namespace, metric name or a dimension uses a variable.
        """
        exists = self.templates.variable_exists
        if exists(query.region) or exists(query.namespace) or exists(query.metric_name):
            return True

        for key, value in query.dimensions.items():
            values = value if isinstance(value, list) else [value]
            if exists(key) or any(exists(v) for v in values):
                return True
        return False

    def test_datasource(self) -> dict:
        """
        Check connectivity with a billing metrics lookup in the default region.

        Returns:
            Status dictionary on success.

        Raises:
            CloudWatchError: If the lookup fails.
        """
        self.get_dimension_values(
            self.default_region, "AWS/Billing", "EstimatedCharges", "ServiceName", {}
        )
        return {"status": "success", "message": "Data source is working"}

    def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> "CloudWatchClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - closes session."""
        self.close()
