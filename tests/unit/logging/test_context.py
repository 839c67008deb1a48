"""Tests for playback logging context."""

import logging
import threading

from tunecast.logging.context import (
    PlaybackContextFilter,
    get_playback_context,
    playback_context,
)


def _record() -> logging.LogRecord:
    return logging.LogRecord("tunecast.test", logging.INFO, __file__, 1, "msg", None, None)


class TestPlaybackContext:
    """Tests for playback_context()."""

    def test_default_empty(self):
        """Outside any block there is no context."""
        assert get_playback_context() == (None, None)

    def test_binds_and_restores(self):
        """Values are visible inside the block and cleared after it."""
        with playback_context("dev-1", "ms-1"):
            assert get_playback_context() == ("dev-1", "ms-1")

        assert get_playback_context() == (None, None)

    def test_nested(self):
        """Inner contexts shadow outer ones and restore them on exit."""
        with playback_context("dev-1", "ms-1"):
            with playback_context("dev-2"):
                assert get_playback_context() == ("dev-2", None)
            assert get_playback_context() == ("dev-1", "ms-1")

    def test_restored_after_exception(self):
        """An exception inside the block still resets the context."""
        try:
            with playback_context("dev-1", "ms-1"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        assert get_playback_context() == (None, None)

    def test_empty_strings_are_unset(self):
        """Empty ids are stored as None."""
        with playback_context("", ""):
            assert get_playback_context() == (None, None)

    def test_isolated_per_thread(self):
        """A new thread does not see another thread's context."""
        seen = []

        def worker():
            seen.append(get_playback_context())

        with playback_context("dev-1", "ms-1"):
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join()

        assert seen == [(None, None)]


class TestPlaybackContextFilter:
    """Tests for PlaybackContextFilter."""

    def test_tag_with_both_ids(self):
        """Device and media source appear in the tag."""
        record = _record()
        with playback_context("dev-1", "ms-1"):
            assert PlaybackContextFilter().filter(record) is True

        assert record.device_id == "dev-1"
        assert record.media_source_id == "ms-1"
        assert record.playback_tag == "[dev-1/ms-1] "

    def test_tag_with_device_only(self):
        """Without a media source the tag holds only the device."""
        record = _record()
        with playback_context("dev-1"):
            PlaybackContextFilter().filter(record)

        assert record.playback_tag == "[dev-1] "

    def test_no_context(self):
        """Records outside a context get an empty tag and are kept."""
        record = _record()

        assert PlaybackContextFilter().filter(record) is True
        assert record.playback_tag == ""
        assert record.device_id is None
