"""Media probing for ingestion.

Resolves the native duration (and basic geometry) of a file before it becomes
a library item. Video and audio go through MoviePy; still images through
Pillow, which have no intrinsic length and receive a configurable one.

Decoder failures surface as ``InvalidDuration`` so ingestion has one error to
handle for "this media cannot be placed".
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

from moviepy import AudioFileClip, VideoFileClip
from PIL import Image, UnidentifiedImageError

from ..core.errors import InvalidDuration
from ..core.intervals import is_valid_duration
from ..core.models import ClipKind

IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp"}
AUDIO_SUFFIXES = {".mp3", ".wav", ".ogg", ".m4a", ".aac", ".flac"}


@dataclass
class ProbeResult:
    path: str
    media_type: str  # 'video' | 'image' | 'audio'
    duration: float
    fps: Optional[float] = None
    size: Optional[Tuple[int, int]] = None

    @property
    def clip_kind(self) -> ClipKind:
        return ClipKind.IMAGE if self.media_type == "image" else ClipKind.VIDEO


class MediaProbe:
    def __init__(self, image_duration: float = 5.0):
        self.image_duration = image_duration

    def probe(self, path: Union[str, Path]) -> ProbeResult:
        p = Path(path)
        if not p.is_file():
            raise InvalidDuration(f"media not found: {p}")
        suffix = p.suffix.lower()
        if suffix in IMAGE_SUFFIXES:
            result = self._probe_image(p)
        elif suffix in AUDIO_SUFFIXES:
            result = self._probe_audio(p)
        else:
            result = self._probe_video(p)
        if not is_valid_duration(result.duration):
            raise InvalidDuration(f"{p.name}: unusable duration {result.duration!r}")
        return result

    def _probe_image(self, p: Path) -> ProbeResult:
        try:
            with Image.open(p) as img:
                size = img.size
        except (UnidentifiedImageError, OSError) as e:
            raise InvalidDuration(f"{p.name}: unreadable image ({e})") from e
        return ProbeResult(str(p), "image", float(self.image_duration), size=size)

    def _probe_video(self, p: Path) -> ProbeResult:
        try:
            clip = VideoFileClip(str(p), audio=False)
        except (OSError, KeyError, IndexError, ValueError) as e:
            raise InvalidDuration(f"{p.name}: cannot decode video ({e})") from e
        try:
            duration = float(getattr(clip, "duration", 0.0) or 0.0)
            fps = float(getattr(clip, "fps", 0.0) or 0.0) or None
            size = tuple(clip.size) if getattr(clip, "size", None) else None
        finally:
            clip.close()
        return ProbeResult(str(p), "video", duration, fps=fps, size=size)

    def _probe_audio(self, p: Path) -> ProbeResult:
        try:
            clip = AudioFileClip(str(p))
        except (OSError, KeyError, IndexError, ValueError) as e:
            raise InvalidDuration(f"{p.name}: cannot decode audio ({e})") from e
        try:
            duration = float(getattr(clip, "duration", 0.0) or 0.0)
        finally:
            clip.close()
        return ProbeResult(str(p), "audio", duration)


__all__ = ["MediaProbe", "ProbeResult", "IMAGE_SUFFIXES", "AUDIO_SUFFIXES"]
