"""Tests for MediaRegistry."""

from tunecast.domain.enums import TranscodeCost
from tunecast.intelligence.media import MediaRegistry


class TestMediaRegistry:
    """Tests for MediaRegistry."""

    def test_resolve_annotates_and_caches(self, make_media):
        """Resolved media gets a cost tier and is cached by source id."""
        registry = MediaRegistry()
        media = make_media(video_codec="h264", container="mkv")

        resolved = registry.resolve(media)

        assert resolved.transcode_cost_estimate == TranscodeCost.REMUX
        assert registry.get("ms-1") is media
        assert len(registry) == 1

    def test_cached_entry_wins(self, make_media):
        """A second resolve for the same source returns the cached entry."""
        registry = MediaRegistry()
        first = registry.resolve(make_media(video_codec="h264"))

        second = registry.resolve(make_media(video_codec="av1"))

        assert second is first
        assert second.video_codec == "h264"

    def test_empty_id_not_cached(self, make_media):
        """Media without a source id is annotated but not cached."""
        registry = MediaRegistry()

        media = registry.resolve(make_media(media_source_id="", video_codec="hevc"))

        assert media.transcode_cost_estimate == TranscodeCost.LOW
        assert len(registry) == 0

    def test_invalidate(self, make_media):
        """Entries can be dropped singly or all at once."""
        registry = MediaRegistry()
        registry.resolve(make_media(media_source_id="a"))
        registry.resolve(make_media(media_source_id="b"))

        registry.invalidate("a")
        assert registry.get("a") is None
        assert len(registry) == 1

        registry.invalidate_all()
        assert len(registry) == 0
