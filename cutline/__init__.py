"""Top-level package exports.

Public API surface (keep minimal):
 - TimelineStore (editing + playback state)
 - PlaybackController (real-time tick driver)
 - data model types and the error taxonomy
 - format_time / parse_time helpers
"""

from .config import EditorConfig  # noqa: F401
from .core.errors import (  # noqa: F401
    DegenerateInterval,
    InvalidDuration,
    NotFound,
    OutOfRange,
    TimelineError,
)
from .core.models import (  # noqa: F401
    AudioTrack,
    Clip,
    ClipKind,
    ImageOverlay,
    LibraryItem,
    Subtitle,
    SubtitlePosition,
    TrimEdge,
)
from .logging_config import configure_logging  # noqa: F401
from .core.store import TimelineStore  # noqa: F401
from .media.playback import PlaybackController  # noqa: F401
from .utils.timefmt import format_time, parse_time  # noqa: F401

__version__ = "0.1.0"

__all__ = [
    "EditorConfig",
    "TimelineError",
    "InvalidDuration",
    "NotFound",
    "DegenerateInterval",
    "OutOfRange",
    "AudioTrack",
    "Clip",
    "ClipKind",
    "ImageOverlay",
    "LibraryItem",
    "Subtitle",
    "SubtitlePosition",
    "TrimEdge",
    "configure_logging",
    "TimelineStore",
    "PlaybackController",
    "format_time",
    "parse_time",
]
