"""Tests for structured logging configuration."""

from __future__ import annotations

import io
import json
import logging

from xcresult_json.logging import PACKAGE_LOGGER, configure_logging, get_logger


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_console_format(self):
        stream = io.StringIO()
        configure_logging("INFO", stream=stream)

        logging.getLogger("xcresult_json.core.parser").info("bundle_parsed: bundle=%s", "a")

        output = stream.getvalue()
        assert "bundle_parsed: bundle=a" in output
        assert "info" in output.lower()

    def test_json_format(self):
        stream = io.StringIO()
        configure_logging("DEBUG", json_format=True, stream=stream)

        logging.getLogger("xcresult_json.reports.registry").debug("parser_attempt: parser=%s", "x")

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert record["event"] == "parser_attempt: parser=x"
        assert record["level"] == "debug"
        assert record["logger"] == "xcresult_json.reports.registry"
        assert "timestamp" in record

    def test_level_filters_records(self):
        stream = io.StringIO()
        configure_logging("WARNING", stream=stream)

        logging.getLogger("xcresult_json.cache").info("quiet")

        assert stream.getvalue() == ""

    def test_unknown_level_defaults_to_warning(self):
        configure_logging("LOUD", stream=io.StringIO())
        assert logging.getLogger(PACKAGE_LOGGER).level == logging.WARNING

    def test_reconfigure_replaces_handler(self):
        configure_logging(stream=io.StringIO())
        configure_logging(stream=io.StringIO())
        assert len(logging.getLogger(PACKAGE_LOGGER).handlers) == 1

    def test_structlog_logger_shares_handler(self):
        stream = io.StringIO()
        configure_logging("INFO", json_format=True, stream=stream)

        get_logger("xcresult_json.cli.app").info("unexpected_error", bundle="b.xcresult")

        record = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert record["event"] == "unexpected_error"
        assert record["bundle"] == "b.xcresult"
