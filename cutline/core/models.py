"""Timeline data model.

Plain dataclasses with no Qt dependency. Times are seconds (floats) on the
global timeline; ``media_ref`` is an opaque handle (path or URL) owned by
whoever imported the media.
"""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


class ClipKind(str, Enum):
    VIDEO = "video"
    IMAGE = "image"


class TrimEdge(str, Enum):
    START = "start"
    END = "end"


class SubtitlePosition(str, Enum):
    TOP = "top"
    MIDDLE = "middle"
    BOTTOM = "bottom"


@dataclass
class Position:
    x: float = 50.0  # percent of frame width
    y: float = 50.0  # percent of frame height


@dataclass
class Size:
    width: float = 200.0  # px
    height: float = 200.0  # px


@dataclass
class OverlayTransform:
    """Placement of an image drawn over the frame (also carried by image clips)."""

    position: Position = field(default_factory=Position)
    size: Size = field(default_factory=Size)
    opacity: float = 1.0  # 0..1
    rotation: float = 0.0  # degrees


@dataclass
class Clip:
    """A placed piece of media on the single video track.

    ``local_duration`` is the native length of the media behind the clip and
    ``source_in`` the point in that media shown at ``start_time``; together
    they bound how far a video clip can be trimmed.
    """

    media_ref: str
    name: str = ""
    start_time: float = 0.0
    end_time: float = 0.0
    kind: ClipKind = ClipKind.VIDEO
    local_duration: float = 0.0
    source_in: float = 0.0
    overlay: Optional[OverlayTransform] = None
    id: str = field(default_factory=lambda: new_id("clip"))

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    def copy(self) -> "Clip":
        return copy.deepcopy(self)


@dataclass
class AudioTrack:
    media_ref: str
    name: str = ""
    start_time: float = 0.0
    end_time: float = 0.0
    volume: float = 80.0  # 0..100
    muted: bool = False
    fade_in: float = 0.0  # seconds
    fade_out: float = 0.0  # seconds
    id: str = field(default_factory=lambda: new_id("audio"))

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


@dataclass
class SubtitleStyle:
    font_family: str = "sans"
    font_size: int = 24  # px
    color: str = "#ffffff"
    background_color: str = "rgba(0, 0, 0, 0.5)"


@dataclass
class Subtitle:
    text: str
    start_time: float = 0.0
    end_time: float = 0.0
    position: SubtitlePosition = SubtitlePosition.BOTTOM
    style: SubtitleStyle = field(default_factory=SubtitleStyle)
    id: str = field(default_factory=lambda: new_id("subtitle"))


@dataclass
class ImageOverlay:
    media_ref: str
    start_time: float = 0.0
    end_time: float = 0.0
    position: Position = field(default_factory=Position)
    size: Size = field(default_factory=Size)
    opacity: float = 1.0
    rotation: float = 0.0
    id: str = field(default_factory=lambda: new_id("overlay"))

    def transform(self) -> OverlayTransform:
        return OverlayTransform(
            position=copy.copy(self.position),
            size=copy.copy(self.size),
            opacity=self.opacity,
            rotation=self.rotation,
        )


@dataclass(frozen=True)
class LibraryItem:
    """Imported media available for placement; immutable once added."""

    name: str
    media_ref: str
    native_duration: float
    kind: ClipKind = ClipKind.VIDEO
    id: str = field(default_factory=lambda: new_id("media"))

    @property
    def duration(self) -> float:
        return self.native_duration


@dataclass
class PlaybackState:
    cursor_time: float = 0.0
    total_duration: float = 0.0
    zoom: float = 1.0
    is_playing: bool = False
    selected_clip_id: Optional[str] = None


__all__ = [
    "new_id",
    "ClipKind",
    "TrimEdge",
    "SubtitlePosition",
    "Position",
    "Size",
    "OverlayTransform",
    "Clip",
    "AudioTrack",
    "SubtitleStyle",
    "Subtitle",
    "ImageOverlay",
    "LibraryItem",
    "PlaybackState",
]
