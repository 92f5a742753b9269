"""Tests for logging configuration, formatters and the component adapter."""

import json
import logging
import sys
from datetime import datetime, timezone

import pytest

from gamewatch.logging import ComponentLoggerAdapter, get_logger
from gamewatch.logging.config import (
    SERVICE_NAME,
    ContextualFilter,
    JSONFormatter,
    KeyValueFormatter,
    configure_logging,
)
from gamewatch.logging.context import log_context


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way the test found it."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("apscheduler").setLevel(logging.NOTSET)


def _record(message="Feed fetched", level=logging.INFO, **extra):
    logger = logging.getLogger("gamewatch.test")
    return logger.makeRecord("gamewatch.test", level, "test.py", 1, message, (), None, extra=extra)


def _key_value_formatter():
    return KeyValueFormatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")


class TestJSONFormatter:
    """One JSON document per record."""

    def test_mandatory_fields(self):
        document = json.loads(JSONFormatter().format(_record()))

        assert document["level"] == "INFO"
        assert document["logger"] == "gamewatch.test"
        assert document["message"] == "Feed fetched"
        assert "name" not in document
        assert "levelno" not in document

    def test_timestamp_is_utc_with_milliseconds(self):
        timestamp = json.loads(JSONFormatter().format(_record()))["timestamp"]
        # e.g. 2026-10-01T12:00:00.123Z
        assert len(timestamp) == 24
        assert timestamp.endswith("Z")
        assert timestamp[10] == "T"

    def test_extra_fields(self):
        record = _record(event="release_sync.feed.fetched", release_count=42, dry_run=False)
        document = json.loads(JSONFormatter().format(record))

        assert document["event"] == "release_sync.feed.fetched"
        assert document["release_count"] == 42
        assert document["dry_run"] is False

    def test_non_json_values_rendered(self):
        moment = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)
        record = _record(published_at=moment, error=ValueError("bad"))
        document = json.loads(JSONFormatter().format(record))

        assert document["published_at"] == "2026-10-01T12:00:00+00:00"
        assert document["error"] == "bad"

    def test_exception_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.getLogger("gamewatch.test").makeRecord(
                "gamewatch.test", logging.ERROR, "test.py", 1, "failed", (), sys.exc_info()
            )
        document = json.loads(JSONFormatter().format(record))
        assert "RuntimeError: boom" in document["exc_info"]


class TestKeyValueFormatter:
    """Readable ``key=value`` lines."""

    def test_basic_line(self):
        output = _key_value_formatter().format(_record())
        assert "[INFO] gamewatch.test: Feed fetched" in output

    def test_fields_sorted_and_rendered(self):
        record = _record(event="update_check.update_found", entry_id=2, version=None, dry_run=True)
        output = _key_value_formatter().format(record)

        assert output.endswith("dry_run=true entry_id=2 event=update_check.update_found version=null")

    def test_values_with_spaces_quoted(self):
        output = _key_value_formatter().format(_record(title="Baldur's Gate 3"))
        assert "title=\"Baldur's Gate 3\"" in output

    def test_service_metadata_omitted(self):
        record = _record()
        ContextualFilter(environment="test").filter(record)
        output = _key_value_formatter().format(record)

        assert "service=" not in output
        assert "environment=" not in output


class TestContextualFilter:
    """Service metadata and context fields on records."""

    def test_static_fields(self):
        record = _record()
        assert ContextualFilter(environment="production").filter(record) is True

        assert record.service == SERVICE_NAME
        assert record.environment == "production"

    def test_context_fields(self):
        record = _record()
        with log_context(job="release_sync", run_id="4f2a"):
            ContextualFilter().filter(record)

        assert record.job == "release_sync"
        assert record.run_id == "4f2a"

    def test_explicit_extra_wins(self):
        record = _record(entry_id=5)
        with log_context(entry_id=1):
            ContextualFilter().filter(record)

        assert record.entry_id == 5

    def test_full_pipeline(self):
        with log_context(job="wanted_search", entry_id=3):
            record = _record("No qualifying release", event="wanted_search.entry.not_found")
            ContextualFilter(environment="test").filter(record)
            document = json.loads(JSONFormatter().format(record))

        assert document["service"] == "gamewatch"
        assert document["environment"] == "test"
        assert document["job"] == "wanted_search"
        assert document["entry_id"] == 3
        assert document["event"] == "wanted_search.entry.not_found"


class TestComponentLogger:
    """``get_logger`` and the component adapter."""

    def test_plain_logger_without_component(self):
        assert isinstance(get_logger("gamewatch.plain"), logging.Logger)

    def test_component_stamped(self, caplog):
        logger = get_logger("gamewatch.adapter_test", component="prowlarr")
        assert isinstance(logger, ComponentLoggerAdapter)

        with caplog.at_level(logging.INFO, logger="gamewatch.adapter_test"):
            logger.info("fetched", extra={"event": "prowlarr.recent.fetched"})

        record = caplog.records[-1]
        assert record.component == "prowlarr"
        assert record.event == "prowlarr.recent.fetched"

    def test_call_may_override_component(self, caplog):
        logger = get_logger("gamewatch.adapter_test", component="prowlarr")

        with caplog.at_level(logging.INFO, logger="gamewatch.adapter_test"):
            logger.info("override", extra={"component": "health"})

        assert caplog.records[-1].component == "health"


class TestConfigureLogging:
    """Root logger setup."""

    def test_invalid_level(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(level="LOUD")

    def test_invalid_format(self):
        with pytest.raises(ValueError, match="Invalid log format"):
            configure_logging(format_type="xml")

    @pytest.mark.parametrize(
        "format_type, formatter_class",
        [("json", JSONFormatter), ("key-value", KeyValueFormatter)],
    )
    def test_installs_single_handler(self, restore_root_logger, format_type, formatter_class):
        configure_logging(level="debug", format_type=format_type, environment="test")

        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        handler = root.handlers[0]
        assert isinstance(handler.formatter, formatter_class)
        assert any(isinstance(f, ContextualFilter) for f in handler.filters)

    def test_apscheduler_quieted(self, restore_root_logger):
        configure_logging(level="INFO")
        assert logging.getLogger("apscheduler").level == logging.WARNING

    def test_writes_json_to_stdout(self, restore_root_logger, capsys):
        configure_logging(level="INFO", format_type="json")
        capsys.readouterr()

        with log_context(job="release_sync"):
            get_logger("gamewatch.stdout_test", component="release_sync").info(
                "run finished", extra={"event": "job.run.summary"}
            )

        line = capsys.readouterr().out.strip().splitlines()[-1]
        document = json.loads(line)
        assert document["event"] == "job.run.summary"
        assert document["component"] == "release_sync"
        assert document["job"] == "release_sync"
