"""Unit tests for logging configuration and correlation IDs."""
import json
import logging
import threading

import pytest

from solarscan.config.settings import Config
from solarscan.core.logging_config import (
    CorrelationContext, CorrelationIDFilter, LoggingManager, StructuredFormatter,
    configure_logging_from_config, get_correlation_id, log_stage, logging_manager,
    with_correlation_id,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    logging_manager.shutdown()
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(message="hello"):
    return logging.LogRecord("solarscan.test", logging.INFO, __file__, 10, message, None, None)


class TestCorrelationIDs:
    """Test suite for correlation ID scoping."""

    def test_context_sets_and_restores(self):
        assert get_correlation_id() is None
        with CorrelationContext("outer") as outer:
            assert outer == "outer"
            with CorrelationContext() as inner:
                assert get_correlation_id() == inner != "outer"
            assert get_correlation_id() == "outer"
        assert get_correlation_id() is None

    def test_decorator(self):
        @with_correlation_id("req-1")
        def work():
            return get_correlation_id()

        assert work() == "req-1"
        assert get_correlation_id() is None

    def test_threads_do_not_share_ids(self):
        seen = {}

        def worker(name):
            with CorrelationContext(name):
                seen[name] = get_correlation_id()

        threads = [threading.Thread(target=worker, args=(f"t{i}",)) for i in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert seen == {"t0": "t0", "t1": "t1", "t2": "t2"}

    def test_filter_stamps_record(self):
        record = _record()
        with CorrelationContext("abc"):
            CorrelationIDFilter().filter(record)
        assert record.correlation_id == "abc"

        record = _record()
        CorrelationIDFilter().filter(record)
        assert record.correlation_id == "no-correlation-id"


class TestFormatters:
    def test_structured_output_is_json(self):
        record = _record("analysis done")
        record.correlation_id = "abc"
        record.finding_count = 3

        entry = json.loads(StructuredFormatter().format(record))

        assert entry["message"] == "analysis done"
        assert entry["correlation_id"] == "abc"
        assert entry["extra"] == {"finding_count": 3}


class TestLoggingManager:
    """Test suite for handler setup."""

    def test_file_logging(self, temp_dir, restore_root_logger):
        manager = LoggingManager()
        manager.configure(log_level="DEBUG", log_dir=temp_dir, enable_file_logging=True,
                          enable_console_logging=False, application_name="scan")
        try:
            assert manager.is_configured
            logging.getLogger("solarscan.test").error("bad panel")
            for handler in logging.getLogger().handlers:
                handler.flush()
            assert "bad panel" in (temp_dir / "scan.log").read_text()
            assert "bad panel" in (temp_dir / "scan-errors.log").read_text()
        finally:
            manager.shutdown()
        assert not manager.is_configured

    def test_configure_twice_is_noop(self, restore_root_logger):
        manager = LoggingManager()
        manager.configure(enable_console_logging=True)
        handlers = list(logging.getLogger().handlers)
        manager.configure(log_level="DEBUG")
        assert logging.getLogger().handlers == handlers
        manager.shutdown()

    def test_configure_from_config(self, temp_dir, restore_root_logger):
        cfg = Config(log_level="WARNING", log_dir=str(temp_dir / "logs"),
                     enable_file_logging=True, structured_logging=True)
        configure_logging_from_config(cfg)

        assert logging_manager.is_configured
        assert logging.getLogger().level == logging.WARNING
        assert (temp_dir / "logs").is_dir()

    def test_unknown_level_rejected(self, restore_root_logger):
        with pytest.raises(ValueError):
            LoggingManager().configure(log_level="LOUD")


class TestLogStage:
    def test_debug_timing_line(self, caplog):
        logger = logging.getLogger("solarscan.test.stage")
        with caplog.at_level(logging.DEBUG, logger="solarscan.test.stage"):
            with log_stage(logger, "encode"):
                pass
        assert any(r.getMessage().startswith("encode took ") for r in caplog.records)

    def test_logs_even_when_stage_fails(self, caplog):
        logger = logging.getLogger("solarscan.test.stage")
        with caplog.at_level(logging.DEBUG, logger="solarscan.test.stage"):
            with pytest.raises(RuntimeError):
                with log_stage(logger, "classify"):
                    raise RuntimeError("boom")
        assert any("classify took" in r.getMessage() for r in caplog.records)
