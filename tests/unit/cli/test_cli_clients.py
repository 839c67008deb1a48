"""Tests for the clients CLI commands."""

import json
from datetime import timedelta

from tunecast.cli import main
from tunecast.core.datetime_utils import utc_now
from tunecast.domain.enums import ClientType
from tunecast.domain.models import ClientProfile


def _seed(store):
    now = utc_now()
    store.upsert_client(
        ClientProfile(
            device_id="roku-1",
            client_type=ClientType.ROKU,
            client_name="Roku",
            codec_confidence={"hevc": 0.6, "h264": 0.95},
            container_confidence={"mkv": 0.1},
            max_bitrate=20_000_000,
            last_updated=now - timedelta(hours=1),
        )
    )
    store.upsert_client(
        ClientProfile(device_id="web-1", client_type=ClientType.WEB_BROWSER, last_updated=now)
    )


class TestClientsList:
    """Tests for 'tunecast clients list'."""

    def test_empty(self, runner, cli_obj):
        """An empty store prints a friendly message."""
        result = runner.invoke(main, ["clients", "list"], obj=cli_obj)

        assert result.exit_code == 0
        assert "No clients recorded yet." in result.output

    def test_table(self, runner, cli_obj, store):
        """Clients are listed most recently updated first."""
        _seed(store)

        result = runner.invoke(main, ["clients", "list"], obj=cli_obj)

        lines = result.output.splitlines()
        assert lines[0].startswith("DEVICE ID")
        assert lines[1].startswith("web-1")
        assert lines[2].startswith("roku-1")

    def test_json(self, runner, cli_obj, store):
        """JSON output is a list of client objects."""
        _seed(store)

        result = runner.invoke(main, ["clients", "list", "--format", "json"], obj=cli_obj)

        data = json.loads(result.stdout)
        assert [c["device_id"] for c in data] == ["web-1", "roku-1"]
        assert data[1]["codec_confidence"] == {"h264": 0.95, "hevc": 0.6}


class TestClientsShow:
    """Tests for 'tunecast clients show'."""

    def test_text(self, runner, cli_obj, store):
        """Text output shows the profile and both confidence maps."""
        _seed(store)

        result = runner.invoke(main, ["clients", "show", "roku-1"], obj=cli_obj)

        assert result.exit_code == 0, result.output
        assert "Type:         roku" in result.output
        assert "Max Bitrate:  20.0 Mbps" in result.output
        assert "hevc           0.600" in result.output
        assert "mkv            0.100" in result.output

    def test_json(self, runner, cli_obj, store):
        """JSON output carries the confidence maps."""
        _seed(store)

        result = runner.invoke(main, ["clients", "show", "web-1", "-f", "json"], obj=cli_obj)

        data = json.loads(result.stdout)
        assert data["client_type"] == "web_browser"
        assert data["codec_confidence"] == {}
        assert data["max_bitrate"] is None

    def test_unknown_client(self, runner, cli_obj):
        """Unknown device ids are an error."""
        result = runner.invoke(main, ["clients", "show", "nope"], obj=cli_obj)

        assert result.exit_code == 1
        assert "Unknown client: nope" in result.output
