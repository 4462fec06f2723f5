"""
Unit Tests: Configuration, Errors and Logging

Tests:
    - Environment configuration loading and validation
    - Result types and Order parsing
    - Error serialization
    - JSON log formatting and context fields
"""

import io
import json
import logging

import pytest

from timerecords.analysis.interpolation import interpolate
from timerecords.core.config import CollectorConfig, InterpolationConfig, TimeRecordsConfig
from timerecords.core.errors import ConfigurationError, ErrorCode, InvalidArgumentError, OutOfOrderError
from timerecords.core.types import Err, Ok, Order
from timerecords.series.timeseries import TimeSeries
from timerecords.observability.logging import (
    JsonFormatter,
    LogLevel,
    StructuredLogger,
    log_context,
    setup_logging,
)


class TestConfig:
    """Tests for TimeRecordsConfig."""

    def test_defaults_are_valid(self):
        config = TimeRecordsConfig()
        assert config.validate().is_ok()
        assert config.interpolation.default_order == 0
        assert config.integration.warn_before
        assert not config.integration.warn_after_hold

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("TIMERECORDS_COLLECTOR_INTERVAL", "2.5")
        monkeypatch.setenv("TIMERECORDS_COLLECTOR_DELAY", "0.5")
        monkeypatch.setenv("TIMERECORDS_WARN_AFTER_HOLD", "yes")
        monkeypatch.setenv("TIMERECORDS_LOG_LEVEL", "debug")
        result = TimeRecordsConfig.from_env()
        assert result.is_ok()
        config = result.unwrap()
        assert config.collector.interval == 2.5
        assert config.collector.delay == 0.5
        assert config.integration.warn_after_hold
        assert config.observability.log_level == "DEBUG"

    def test_from_env_bad_number(self, monkeypatch):
        monkeypatch.setenv("TIMERECORDS_COLLECTOR_INTERVAL", "soon")
        result = TimeRecordsConfig.from_env()
        assert result.is_err()
        assert "Configuration error" in result.error

    def test_from_env_bad_bool(self, monkeypatch):
        monkeypatch.setenv("TIMERECORDS_LOG_JSON", "maybe")
        assert TimeRecordsConfig.from_env().is_err()

    def test_default_order_from_env(self, monkeypatch):
        monkeypatch.setenv("TIMERECORDS_DEFAULT_ORDER", "1")
        config = TimeRecordsConfig.load()
        assert config.interpolation.order is Order.LINEAR
        series = TimeSeries([1, 2], [1.0, 2.0])
        assert interpolate(series, 1.5, config.interpolation.order) == 1.5

    def test_load_raises_on_invalid_values(self, monkeypatch):
        monkeypatch.setenv("TIMERECORDS_DEFAULT_ORDER", "2")
        assert TimeRecordsConfig.from_env().is_ok()
        with pytest.raises(ConfigurationError) as exc_info:
            TimeRecordsConfig.load()
        assert exc_info.value.code == ErrorCode.INTERNAL_CONFIGURATION_ERROR
        assert "default_order" in exc_info.value.message

    def test_load_raises_on_unparseable_env(self, monkeypatch):
        monkeypatch.setenv("TIMERECORDS_COLLECTOR_DELAY", "later")
        with pytest.raises(ConfigurationError):
            TimeRecordsConfig.load()

    @pytest.mark.parametrize(
        "config",
        [
            TimeRecordsConfig(interpolation=InterpolationConfig(default_order=2)),
            TimeRecordsConfig(collector=CollectorConfig(interval=-1.0)),
            TimeRecordsConfig(collector=CollectorConfig(delay=-1.0)),
            TimeRecordsConfig(collector=CollectorConfig(max_workers=0)),
        ],
    )
    def test_validate_rejects(self, config):
        assert config.validate().is_err()


class TestTypes:
    """Tests for Result and Order."""

    def test_ok(self):
        result = Ok(3).map(lambda v: v + 1)
        assert result.is_ok()
        assert result.unwrap() == 4
        assert result.unwrap_or(0) == 4

    def test_err(self):
        result = Err("boom").map(lambda v: v + 1)
        assert result.is_err()
        assert result.unwrap_or(0) == 0
        with pytest.raises(RuntimeError):
            result.unwrap()

    def test_order_parse(self):
        assert Order.parse(0) is Order.HOLD
        assert Order.parse(1) is Order.LINEAR
        assert Order.parse(Order.LINEAR) is Order.LINEAR
        with pytest.raises(InvalidArgumentError):
            Order.parse(2)


class TestErrors:
    """Tests for error types."""

    def test_to_dict(self):
        error = InvalidArgumentError.unsorted_times("times")
        data = error.to_dict()
        assert data["code"] == "ARGUMENT_UNSORTED_TIMES"
        assert data["code_value"] == ErrorCode.ARGUMENT_UNSORTED_TIMES.value
        assert data["context"] == {"argument": "times"}

    def test_value_error_compatible(self):
        with pytest.raises(ValueError):
            raise InvalidArgumentError.unsupported_order(7)

    def test_out_of_order_hierarchy(self):
        error = OutOfOrderError.for_assignment(1, 10.0, 1.0, 3.0)
        assert isinstance(error, InvalidArgumentError)
        assert error.code == ErrorCode.SERIES_OUT_OF_ORDER

    def test_with_context(self):
        error = InvalidArgumentError.empty_series("interpolate").with_context(tag="a")
        assert isinstance(error, InvalidArgumentError)
        assert error.context == {"operation": "interpolate", "tag": "a"}


class TestLogging:
    """Tests for structured logging."""

    @pytest.fixture
    def json_logger(self):
        stream = io.StringIO()
        logger = logging.getLogger("timerecords.tests.json")
        handler = logging.StreamHandler(stream)
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        yield StructuredLogger("timerecords.tests.json"), stream
        logger.removeHandler(handler)

    def test_json_fields(self, json_logger):
        log, stream = json_logger
        log.info("window released", tags=3)
        data = json.loads(stream.getvalue())
        assert data["message"] == "window released"
        assert data["level"] == "INFO"
        assert data["logger"] == "timerecords.tests.json"
        assert data["tags"] == 3

    def test_context_fields(self, json_logger):
        log, stream = json_logger
        with log_context(window_start=10.0):
            log.info("inside")
        log.info("outside")
        inside, outside = (json.loads(line) for line in stream.getvalue().splitlines())
        assert inside["window_start"] == 10.0
        assert "window_start" not in outside

    def test_with_extra(self, json_logger):
        log, stream = json_logger
        log.with_extra(collector="main").info("hello")
        assert json.loads(stream.getvalue())["collector"] == "main"

    def test_setup_logging_plain(self):
        stream = io.StringIO()
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        try:
            setup_logging("warning", json_output=False, stream=stream)
            logging.getLogger("timerecords.tests.plain").warning("plain text")
            assert "WARNING" in stream.getvalue()
            assert "plain text" in stream.getvalue()
            assert root.level == LogLevel.WARNING
        finally:
            root.handlers[:] = handlers
            root.setLevel(level)
