"""Tests for configure_logging."""

import json
import logging
from logging.handlers import RotatingFileHandler

import pytest

from mco.config.models import LoggingConfig
from mco.logging.config import configure_logging
from mco.logging.handlers import JSONFormatter


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_default_stderr_only(self):
        configure_logging(LoggingConfig())

        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "mco.log"
        configure_logging(LoggingConfig(level="debug", file=log_file, format="json"))

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        handler = root.handlers[0]
        assert isinstance(handler, RotatingFileHandler)
        assert isinstance(handler.formatter, JSONFormatter)

        logging.getLogger("mco.test").info("hello %s", "file")
        handler.flush()
        entry = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert entry["message"] == "hello file"

    def test_file_and_stderr(self, tmp_path):
        configure_logging(
            LoggingConfig(file=tmp_path / "mco.log", include_stderr=True)
        )
        assert len(logging.getLogger().handlers) == 2

    def test_text_format_has_job_tag(self, tmp_path):
        log_file = tmp_path / "mco.log"
        configure_logging(LoggingConfig(file=log_file))

        logging.getLogger("mco.test").warning("plain")
        logging.getLogger().handlers[0].flush()

        line = log_file.read_text().strip()
        assert line.endswith("mco.test - WARNING - plain")

    def test_unopenable_file_falls_back_to_stderr(self, tmp_path, capsys):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("")
        configure_logging(LoggingConfig(file=blocker / "mco.log"))

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0], RotatingFileHandler)
        assert "Could not open log file" in capsys.readouterr().err
