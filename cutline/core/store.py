"""TimelineStore: the single owner of editing and playback state.

All mutation goes through named operations. Clip edits are computed by
``ClipEditingEngine`` on copies and committed in one step, after which the
total duration is recomputed and the cursor re-validated. Readers get deep
copies (``snapshot()``, ``clips()``) and Qt signals announcing commits.

Rejection policy at this boundary:
    InvalidDuration      raised to the caller (ingestion must handle it)
    NotFound             logged, operation returns False/None
    DegenerateInterval   logged, operation returns False/None
    OutOfRange           logged, operation returns False/None (seeks clamp)
"""

from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple, TypeVar, Union

from PySide6.QtCore import QObject, Signal

from ..config import EditorConfig
from ..media import clock
from ..media.probe import MediaProbe
from .audio import AudioTrackManager
from .editing import ClipEditingEngine, recalc_duration
from .errors import DegenerateInterval, NotFound, OutOfRange
from .intervals import clamp, contains, is_finite_number
from .library import MediaLibrary
from .models import (
    AudioTrack,
    Clip,
    ClipKind,
    ImageOverlay,
    LibraryItem,
    PlaybackState,
    Subtitle,
    TrimEdge,
)
from .overlays import ImageOverlayManager, SubtitleManager

logger = logging.getLogger(__name__)

R = TypeVar("R")

_REJECTIONS = (NotFound, DegenerateInterval, OutOfRange)


@dataclass(frozen=True)
class TimelineSnapshot:
    clips: Tuple[Clip, ...]
    audio_tracks: Tuple[AudioTrack, ...]
    subtitles: Tuple[Subtitle, ...]
    overlays: Tuple[ImageOverlay, ...]
    library: Tuple[LibraryItem, ...]
    playback: PlaybackState
    active_audio_track_id: Optional[str] = None


class TimelineStore(QObject):
    clipsChanged = Signal()
    durationChanged = Signal(float)
    cursorChanged = Signal(float)
    playingChanged = Signal(bool)
    selectionChanged = Signal(object)  # clip id or None
    zoomChanged = Signal(float)
    audioChanged = Signal()
    subtitlesChanged = Signal()
    overlaysChanged = Signal()
    libraryChanged = Signal()

    def __init__(self, parent: Optional[QObject] = None, *, config: Optional[EditorConfig] = None):
        super().__init__(parent)
        self.config = config or EditorConfig()
        self._engine = ClipEditingEngine(self.config.min_clip_length)
        self._clips: List[Clip] = []
        self._state = PlaybackState()
        self.probe = MediaProbe(self.config.image_duration)
        self.library = MediaLibrary(self.libraryChanged.emit, probe=self.probe)
        self.audio = AudioTrackManager(
            self.audioChanged.emit,
            min_length=self.config.min_clip_length,
            default_duration=self.config.default_audio_duration,
            default_volume=self.config.default_audio_volume,
        )
        self.subtitles = SubtitleManager(self.subtitlesChanged.emit)
        self.overlays = ImageOverlayManager(
            self.overlaysChanged.emit,
            default_duration=self.config.default_overlay_duration,
        )

    # --- Read API ---
    @property
    def cursor_time(self) -> float:
        return self._state.cursor_time

    @property
    def total_duration(self) -> float:
        return self._state.total_duration

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    @property
    def zoom(self) -> float:
        return self._state.zoom

    @property
    def selected_clip_id(self) -> Optional[str]:
        return self._state.selected_clip_id

    def playback_state(self) -> PlaybackState:
        return dataclasses.replace(self._state)

    def clips(self) -> List[Clip]:
        return [c.copy() for c in self._clips]

    def get_clip(self, clip_id: str) -> Optional[Clip]:
        for clip in self._clips:
            if clip.id == clip_id:
                return clip.copy()
        return None

    def snapshot(self) -> TimelineSnapshot:
        return TimelineSnapshot(
            clips=tuple(self.clips()),
            audio_tracks=tuple(self.audio.items()),
            subtitles=tuple(self.subtitles.items()),
            overlays=tuple(self.overlays.items()),
            library=tuple(self.library.items()),
            playback=self.playback_state(),
            active_audio_track_id=self.audio.active_track_id,
        )

    def active_clip(self) -> Optional[clock.ActiveClip]:
        active = clock.resolve(self._clips, self._state.cursor_time)
        if active is None:
            return None
        return clock.ActiveClip(active.clip.copy(), active.local_offset)

    def frame(self) -> clock.PlaybackFrame:
        """Everything the render surface needs at the current cursor."""
        t = self._state.cursor_time
        audible = [(track, self.audio.gain_at(track, t)) for track in self.audio.active_at(t)]
        return clock.build_frame(
            self.playback_state(),
            self.active_clip(),
            subtitles=self.subtitles.active_at(t),
            overlays=self.overlays.active_at(t),
            audio=audible,
        )

    # --- Ingestion ---
    def import_media(self, path: Union[str, Path], name: Optional[str] = None) -> LibraryItem:
        """Probe a video or image file and add it to the library."""
        return self.library.import_path(path, name)

    def import_audio(self, path: Union[str, Path], start_time: float = 0.0) -> AudioTrack:
        """Probe an audio file and lay it on a new audio track at ``start_time``."""
        result = self.probe.probe(path)
        return self.audio.create(Path(path).stem, str(path), result.duration, start_time)

    # --- Clip operations ---
    def add_clip(
        self, item: Union[LibraryItem, str], insert_at: Optional[float] = None
    ) -> Optional[Clip]:
        """Instantiate a library item (or item id) on the video track.

        Raises ``InvalidDuration`` for media without a usable length.
        """
        if isinstance(item, str):
            found = self.library.get(item)
            if found is None:
                logger.debug("add_clip ignored: library item %r not found", item)
                return None
            item = found
        result = self._attempt("add_clip", lambda: self._engine.add_clip(self._clips, item, insert_at))
        if result is None:
            return None
        clips, clip = result
        self._commit_clips(clips)
        logger.info("Added clip %s (%s) at [%.3f, %.3f)", clip.id, clip.name, clip.start_time, clip.end_time)
        return clip.copy()

    def add_overlay_clip(
        self, overlay: ImageOverlay, insert_at: Optional[float] = None, name: str = ""
    ) -> Optional[Clip]:
        """Place an image overlay draft on the video track as an image clip."""
        item = LibraryItem(
            name=name or "overlay",
            media_ref=overlay.media_ref,
            native_duration=(overlay.end_time - overlay.start_time)
            if overlay.end_time > overlay.start_time
            else self.config.default_overlay_duration,
            kind=ClipKind.IMAGE,
        )
        result = self._attempt(
            "add_overlay_clip",
            lambda: self._engine.add_clip(
                self._clips, item, insert_at, kind=ClipKind.IMAGE, overlay=overlay.transform()
            ),
        )
        if result is None:
            return None
        clips, clip = result
        self._commit_clips(clips)
        logger.info("Added overlay clip %s at [%.3f, %.3f)", clip.id, clip.start_time, clip.end_time)
        return clip.copy()

    def remove_clip(self, clip_id: str) -> bool:
        """Delete a clip and reflow the clips after it.

        If the clip was under the cursor, playback pauses and the cursor
        moves to where the clip started.
        """
        result = self._attempt("remove_clip", lambda: self._engine.remove_clip(self._clips, clip_id))
        if result is None:
            return False
        clips, removed = result
        under_cursor = contains(removed, self._state.cursor_time)
        self._commit_clips(clips, cursor=removed.start_time if under_cursor else None)
        if under_cursor:
            self._set_playing(False)
        if self._state.selected_clip_id == clip_id:
            self.select_clip(None)
        logger.info("Removed clip %s, reflowed by %.3fs", clip_id, removed.duration)
        return True

    def move_clip(self, clip_id: str, new_start: float) -> bool:
        result = self._attempt("move_clip", lambda: self._engine.move_clip(self._clips, clip_id, new_start))
        if result is None:
            return False
        clips, clip = result
        self._commit_clips(clips)
        logger.info("Moved clip %s to %.3f", clip_id, clip.start_time)
        return True

    def trim_clip(self, clip_id: str, edge: Union[TrimEdge, str], new_time: float) -> bool:
        """Move one edge of a clip.

        If the cursor sat in the part trimmed away it moves to the clip's new
        start, or to its new end. The end is exclusive, so a cursor placed
        there resolves to the following clip (or the gap after it), never to
        the trimmed one.
        """
        before = self.get_clip(clip_id)
        result = self._attempt(
            "trim_clip", lambda: self._engine.trim_clip(self._clips, clip_id, edge, new_time)
        )
        if result is None:
            return False
        clips, clip = result
        cursor = None
        t = self._state.cursor_time
        if before is not None and contains(before, t) and not contains(clip, t):
            cursor = clip.start_time if t < clip.start_time else clip.end_time
        self._commit_clips(clips, cursor=cursor)
        logger.info("Trimmed clip %s to [%.3f, %.3f)", clip_id, clip.start_time, clip.end_time)
        return True

    def split_clip(self, clip_id: str, at: float) -> Optional[Clip]:
        """Split a clip; returns the new second part, or None when rejected."""
        result = self._attempt("split_clip", lambda: self._engine.split_clip(self._clips, clip_id, at))
        if result is None:
            return None
        clips, head, tail = result
        self._commit_clips(clips)
        logger.info("Split clip %s at %.3f -> %s", clip_id, at, tail.id)
        return tail.copy()

    def bulk_replace(self, clips: List[Clip]) -> None:
        """Swap in a whole clip sequence, laid out without overlap.

        Raises ``InvalidDuration`` if any clip is empty; nothing changes then.
        """
        normalized = self._engine.normalize(clips)
        self._commit_clips(normalized)
        ids = {c.id for c in normalized}
        if self._state.selected_clip_id not in ids and self._state.selected_clip_id is not None:
            self.select_clip(None)
        logger.info("Replaced timeline with %d clips", len(normalized))

    def recalc_duration(self) -> float:
        total = recalc_duration(self._clips)
        if total != self._state.total_duration:
            self._state.total_duration = total
            self.durationChanged.emit(total)
        return total

    # --- Playback state ---
    def play(self) -> bool:
        """Start playing; a no-op when already playing, refused on an empty timeline."""
        if self._state.is_playing:
            return True
        if self._state.total_duration <= 0:
            logger.debug("play ignored: timeline is empty")
            return False
        if self._state.cursor_time >= self._state.total_duration:
            self._set_cursor(0.0)
        self._set_playing(True)
        return True

    def pause(self) -> None:
        self._set_playing(False)

    def stop(self) -> None:
        self._set_playing(False)
        self._set_cursor(0.0)

    def toggle_play(self) -> bool:
        if self._state.is_playing:
            self.pause()
            return False
        return self.play()

    def set_cursor(self, t: float) -> bool:
        """Seek. Values outside the timeline are clamped; non-numbers ignored."""
        try:
            value = float(t)
        except (TypeError, ValueError):
            value = math.nan
        if not math.isfinite(value):
            logger.debug("set_cursor ignored: %r", t)
            return False
        self._set_cursor(clamp(value, 0.0, self._state.total_duration))
        return True

    def jump_forward(self) -> None:
        self.set_cursor(self._state.cursor_time + self.config.jump_step)

    def jump_backward(self) -> None:
        self.set_cursor(self._state.cursor_time - self.config.jump_step)

    def advance(self, dt: float) -> clock.Tick:
        """Apply one clock tick of ``dt`` wall-clock seconds atomically."""
        tick = clock.advance(self._state, self._clips, dt)
        was_playing = self._state.is_playing
        cursor_moved = tick.state.cursor_time != self._state.cursor_time
        self._state = dataclasses.replace(tick.state)
        if was_playing != self._state.is_playing:
            logger.info("Playback reached the end; rewound to start")
            self.playingChanged.emit(self._state.is_playing)
        if cursor_moved:
            self.cursorChanged.emit(self._state.cursor_time)
        return tick

    def set_zoom(self, zoom: float) -> float:
        """Clamp into the configured range; non-finite values leave zoom as is."""
        if not is_finite_number(zoom):
            logger.debug("set_zoom ignored: %r", zoom)
            return self._state.zoom
        value = clamp(float(zoom), self.config.zoom_min, self.config.zoom_max)
        if value != self._state.zoom:
            self._state.zoom = value
            self.zoomChanged.emit(value)
        return value

    def select_clip(self, clip_id: Optional[str]) -> bool:
        if clip_id is not None and self.get_clip(clip_id) is None:
            logger.debug("select_clip ignored: %r not found", clip_id)
            return False
        if clip_id != self._state.selected_clip_id:
            self._state.selected_clip_id = clip_id
            self.selectionChanged.emit(clip_id)
        return True

    # --- Internal ---
    def _attempt(self, op: str, fn: Callable[[], R]) -> Optional[R]:
        try:
            return fn()
        except _REJECTIONS as e:
            logger.debug("%s rejected: %s", op, e)
            return None

    def _commit_clips(self, clips: List[Clip], *, cursor: Optional[float] = None) -> None:
        self._clips = clips
        old_total = self._state.total_duration
        self._state.total_duration = recalc_duration(clips)
        target = self._state.cursor_time if cursor is None else cursor
        self.clipsChanged.emit()
        if self._state.total_duration != old_total:
            self.durationChanged.emit(self._state.total_duration)
        self._set_cursor(clamp(target, 0.0, self._state.total_duration))
        if self._state.total_duration <= 0:
            self._set_playing(False)

    def _set_cursor(self, t: float) -> None:
        if t != self._state.cursor_time:
            self._state.cursor_time = t
            self.cursorChanged.emit(t)

    def _set_playing(self, playing: bool) -> None:
        if playing != self._state.is_playing:
            self._state.is_playing = playing
            logger.info("Playback %s at %.3f", "started" if playing else "paused", self._state.cursor_time)
            self.playingChanged.emit(playing)


__all__ = ["TimelineStore", "TimelineSnapshot"]
