"""Tests for geodata.util_logger."""

import json
import logging

import pytest

from geodata.util_logger import (
    ComponentType,
    JSONFormatter,
    LogContext,
    LoggerFactory,
    log_exceptions,
)


class TestLogContext:
    def test_to_dict_drops_unset_fields(self):
        context = LogContext(request_id="abc", path="/info")
        assert context.to_dict() == {"request_id": "abc", "path": "/info"}


class TestJSONFormatter:
    def test_formats_record_as_json(self):
        record = logging.LogRecord("geodata.test", logging.WARNING, __file__, 10, "hello %s", ("world",), None)
        record.custom_dimensions = {"path": "/info"}

        payload = json.loads(JSONFormatter().format(record))

        assert payload["level"] == "WARNING"
        assert payload["message"] == "hello world"
        assert payload["customDimensions"] == {"path": "/info"}


class TestLoggerFactory:
    def test_injects_component_dimensions(self, caplog):
        logger = LoggerFactory.create_logger(
            ComponentType.SERVICE, "UnitTest", context=LogContext(request_id="r1")
        )

        with caplog.at_level(logging.INFO, logger=logger.name):
            logger.info("dispatch", extra={"custom_dimensions": {"path": "/value"}})

        record = caplog.records[-1]
        assert logger.name == "geodata.service.UnitTest"
        assert record.custom_dimensions == {
            "request_id": "r1",
            "component_type": "service",
            "component_name": "UnitTest",
            "path": "/value",
        }

    def test_no_duplicate_handlers(self):
        LoggerFactory.create_logger(ComponentType.ADAPTER, "Twice")
        logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "Twice")
        assert len(logger.handlers) == 1


class TestLogExceptions:
    def test_logs_and_reraises(self, caplog):
        logger = LoggerFactory.create_logger(ComponentType.SERVICE, "CallbackTest")

        @log_exceptions(logger=logger)
        def failing(data, error):
            raise ValueError("bad callback")

        with caplog.at_level(logging.ERROR, logger=logger.name):
            with pytest.raises(ValueError, match="bad callback"):
                failing(None, None)

        record = caplog.records[-1]
        assert record.getMessage() == "Exception in failing"
        assert record.custom_dimensions["exception_type"] == "ValueError"

    def test_passes_return_value_through(self):
        @log_exceptions(ComponentType.SERVICE, "Passthrough")
        def ok():
            return 5

        assert ok() == 5
