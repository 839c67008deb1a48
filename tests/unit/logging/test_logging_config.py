"""Tests for configure_logging()."""

import json
import logging
from logging.handlers import RotatingFileHandler

import pytest

from tunecast.config.models import LoggingConfig
from tunecast.logging.config import configure_logging
from tunecast.logging.context import PlaybackContextFilter, playback_context
from tunecast.logging.handlers import JSONFormatter


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Put the root logger back the way pytest configured it."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_stderr_default(self):
        """Without a file, a single stderr handler is installed."""
        configure_logging(LoggingConfig(level="warning"))

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        handler = root.handlers[0]
        assert isinstance(handler, logging.StreamHandler)
        assert any(isinstance(f, PlaybackContextFilter) for f in handler.filters)

    def test_file_handler(self, tmp_path):
        """A log file gets a rotating handler and no stderr handler."""
        log_file = tmp_path / "logs" / "tunecast.log"

        configure_logging(
            LoggingConfig(file=log_file, max_bytes=1024, backup_count=2)
        )

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], RotatingFileHandler)
        assert handlers[0].maxBytes == 1024
        assert handlers[0].backupCount == 2
        assert log_file.parent.is_dir()

    def test_file_and_stderr(self, tmp_path):
        """include_stderr adds a stderr handler next to the file."""
        configure_logging(
            LoggingConfig(file=tmp_path / "tunecast.log", include_stderr=True)
        )

        assert len(logging.getLogger().handlers) == 2

    def test_unopenable_file_falls_back_to_stderr(self, tmp_path, capsys):
        """If the log file cannot be opened, stderr is used instead."""
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("", encoding="utf-8")

        configure_logging(LoggingConfig(file=blocker / "tunecast.log"))

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert not isinstance(handlers[0], RotatingFileHandler)
        assert "Could not open log file" in capsys.readouterr().err

    def test_json_format(self):
        """The json format installs JSONFormatter."""
        configure_logging(LoggingConfig(format="json"))

        assert isinstance(logging.getLogger().handlers[0].formatter, JSONFormatter)

    def test_text_output_tagged(self, tmp_path):
        """Text lines carry the playback tag."""
        log_file = tmp_path / "tunecast.log"
        configure_logging(LoggingConfig(file=log_file))

        with playback_context("dev-1", "ms-1"):
            logging.getLogger("tunecast.test").info("Computing policy")
        for handler in logging.getLogger().handlers:
            handler.flush()

        line = log_file.read_text(encoding="utf-8").strip()
        assert "[dev-1/ms-1] tunecast.test - INFO - Computing policy" in line

    def test_json_output_has_context(self, tmp_path):
        """JSON lines carry the playback ids under context."""
        log_file = tmp_path / "tunecast.jsonl"
        configure_logging(LoggingConfig(file=log_file, format="json"))

        with playback_context("dev-1"):
            logging.getLogger("tunecast.test").warning("Slow decision")
        for handler in logging.getLogger().handlers:
            handler.flush()

        entry = json.loads(log_file.read_text(encoding="utf-8").strip())
        assert entry["message"] == "Slow decision"
        assert entry["context"] == {"device_id": "dev-1"}
