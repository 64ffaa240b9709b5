"""Tests for logging setup."""

import logging

import structlog
from structlog.testing import capture_logs

from cloudwatch_query_core.logging import bind_datasource, configure_logging


class TestConfigureLogging:
    """Test configure_logging."""

    def setup_method(self) -> None:
        self._saved = structlog.get_config()

    def teardown_method(self) -> None:
        structlog.configure(**self._saved)
        logging.getLogger().setLevel(logging.WARNING)

    def test_configures_json_output(self) -> None:
        configure_logging("DEBUG")

        config = structlog.get_config()
        assert isinstance(config["processors"][-1], structlog.processors.JSONRenderer)
        assert config["wrapper_class"] is structlog.stdlib.BoundLogger
        assert isinstance(config["logger_factory"], structlog.stdlib.LoggerFactory)


class TestBindDatasource:
    """Test bind_datasource."""

    def test_events_carry_datasource_id(self) -> None:
        with capture_logs() as logs:
            bind_datasource(7, region="eu-west-1").warning("lookup_failed")

        assert logs == [{
            "event": "lookup_failed",
            "log_level": "warning",
            "datasource_id": 7,
            "region": "eu-west-1",
        }]
