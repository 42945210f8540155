"""
Tests for logging configuration.
"""

import sys

import pytest
from loguru import logger

from kodon.config import LoggingSettings
from kodon.monitoring import LogContext, configure_from_settings, configure_logging, get_logger


@pytest.fixture
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)
    logger.configure(extra={})


class TestConfigureLogging:
    """Test sink setup."""

    def test_writes_to_file(self, tmp_path, restore_logger):
        log_file = tmp_path / "logs" / "kodon.log"
        configure_logging(log_level="info", log_file=log_file)

        logger.debug("hidden")
        logger.info("visible")
        logger.complete()

        content = log_file.read_text()
        assert "visible" in content
        assert "hidden" not in content

    def test_from_settings(self, tmp_path, restore_logger):
        log_file = tmp_path / "kodon.jsonl"
        configure_from_settings(LoggingSettings(level="warning", log_file=log_file, serialize=True))

        logger.warning("serialized")
        logger.complete()

        assert '"serialized"' in log_file.read_text()


class TestContext:
    """Test bound and contextual fields."""

    def test_get_logger_binds_component(self, log_records):
        get_logger("selection").info("hello")
        assert log_records[-1]["extra"]["component"] == "selection"

    def test_log_context(self, log_records):
        with LogContext(seed=42):
            logger.info("inside")
        logger.info("outside")

        assert log_records[-2]["extra"]["seed"] == 42
        assert "seed" not in log_records[-1]["extra"]

    def test_engine_logs_seed(self, make_engine, log_records):
        ga = make_engine(max_generation=1, seed=5)
        ga.solve()
        stopped = [r for r in log_records if r["message"].startswith("Stopped on")]
        assert stopped and stopped[-1]["extra"]["seed"] == 5
