"""Tests for JSONFormatter."""

import json
import logging
import sys

from tunecast.logging.handlers import JSONFormatter


def _record(name="tunecast.decision", msg="Computed %s", args=("policy",), exc_info=None):
    return logging.LogRecord(name, logging.INFO, __file__, 10, msg, args, exc_info)


class TestJSONFormatter:
    """Tests for JSONFormatter.format()."""

    def test_basic_fields(self):
        """Every entry has timestamp, level, message and logger."""
        entry = json.loads(JSONFormatter().format(_record()))

        assert entry["level"] == "INFO"
        assert entry["message"] == "Computed policy"
        assert entry["logger"] == "tunecast.decision"
        assert entry["timestamp"].endswith("+00:00")
        assert "context" not in entry
        assert "exception" not in entry

    def test_root_logger_omitted(self):
        """Records from the root logger carry no logger key."""
        entry = json.loads(JSONFormatter().format(_record(name="root")))

        assert "logger" not in entry

    def test_context_from_extra_attributes(self):
        """Extra attributes land under context; None values are dropped."""
        record = _record()
        record.device_id = "dev-1"
        record.media_source_id = None
        record.playback_tag = "[dev-1] "
        record.confidence = 0.55

        entry = json.loads(JSONFormatter().format(record))

        assert entry["context"] == {"device_id": "dev-1", "confidence": 0.55}

    def test_exception(self):
        """exc_info is rendered as a traceback string."""
        try:
            raise ValueError("bad rule")
        except ValueError:
            record = _record(exc_info=sys.exc_info())

        entry = json.loads(JSONFormatter().format(record))

        assert "ValueError: bad rule" in entry["exception"]

    def test_unserializable_values_stringified(self):
        """Values json cannot encode are converted with str()."""
        record = _record()
        record.path = object()

        entry = json.loads(JSONFormatter().format(record))

        assert entry["context"]["path"].startswith("<object object")
