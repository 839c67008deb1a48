"""Domain enums for TuneCast.

This module contains the enums shared by the decision engine, the learning
component and the persistence layer.
"""

from enum import Enum, IntEnum


class ClientType(Enum):
    """Client application category.

    Rule tables are keyed by this value, so adding a category is a data
    change rather than a code change.
    """

    UNKNOWN = "unknown"
    WEB_BROWSER = "web_browser"
    ANDROID_TV = "android_tv"
    ANDROID_MOBILE = "android_mobile"
    ROKU = "roku"
    FIRE_TV = "fire_tv"
    SWIFTFIN_IOS = "swiftfin_ios"
    SWIFTFIN_TVOS = "swiftfin_tvos"
    DESKTOP = "desktop"
    XBOX = "xbox"
    KODI = "kodi"
    DLNA = "dlna"

    @classmethod
    def from_string(cls, value: str | None) -> "ClientType":
        """Parse a stored or user-supplied category, defaulting to UNKNOWN."""
        if not value:
            return cls.UNKNOWN
        key = value.strip().lower().replace("-", "_").replace(" ", "_")
        for member in cls:
            if key in (member.value, member.name.lower()):
                return member
        return cls.UNKNOWN


class RuleSeverity(IntEnum):
    """How strongly a rule finding should be enforced.

    Ordered: SUGGEST < RECOMMEND < REQUIRE.
    """

    SUGGEST = 0  # Advisory only, refinements may override
    RECOMMEND = 1  # Raises confidence moderately
    REQUIRE = 2  # Known incompatibility, never overridden by refinement


class TranscodeCost(IntEnum):
    """Estimated server cost of converting a media item.

    Ordered: REMUX < LOW < MEDIUM < HIGH < EXTREME. An item that has not been
    estimated carries None instead of a member.
    """

    REMUX = 1  # Repackage only, streams copied
    LOW = 2
    MEDIUM = 3
    HIGH = 4
    EXTREME = 5  # e.g. 4K HDR tone-mapping


class PlaybackResult(Enum):
    """Observed or inferred outcome of a playback session."""

    UNKNOWN = "unknown"
    SUCCESS = "success"
    FAILURE = "failure"
    SUSPECTED_FAILURE = "suspected_failure"  # Inferred from a very short session
    TRANSCODED = "transcoded"


class PlayMethod(Enum):
    """Delivery method the host chose for a session."""

    DIRECT_PLAY = "direct_play"
    DIRECT_STREAM = "direct_stream"
    TRANSCODE = "transcode"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: "str | PlayMethod | None") -> "PlayMethod":
        """Parse a host-reported play method, case-insensitively.

        Accepts "DirectPlay", "direct_play", "DIRECT-PLAY" and so on.
        Anything unrecognized maps to UNKNOWN.
        """
        if isinstance(value, PlayMethod):
            return value
        if not value:
            return cls.UNKNOWN
        key = value.strip().lower().replace("_", "").replace("-", "").replace(" ", "")
        return _PLAY_METHOD_KEYS.get(key, cls.UNKNOWN)


_PLAY_METHOD_KEYS = {
    member.value.replace("_", ""): member for member in PlayMethod
}
