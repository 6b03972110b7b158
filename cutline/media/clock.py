"""Playback clock time math.

Pure functions only: the scheduling side lives in ``playback.py``. The clock
maps the global cursor onto the active clip and its local media offset, and
advances the cursor by wall-clock deltas while playing.

Rules:
- A clip is active when ``start <= cursor < end``; at a shared boundary the
  later clip wins.
- While playing, a cursor that lands in a gap jumps to the next clip start.
- Reaching (or passing) the end of the timeline stops playback and rewinds
  the cursor to zero.
"""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from ..core.intervals import find_containing, next_starting_after
from ..core.models import AudioTrack, Clip, ImageOverlay, PlaybackState, Subtitle


class ClockState(str, Enum):
    STOPPED = "stopped"
    PLAYING = "playing"


@dataclass(frozen=True)
class ActiveClip:
    clip: Clip
    local_offset: float  # seconds since the clip's start on the timeline

    @property
    def media_time(self) -> float:
        """Position inside the clip's media (accounts for trims and splits)."""
        return self.clip.source_in + self.local_offset


@dataclass(frozen=True)
class Tick:
    state: PlaybackState
    active: Optional[ActiveClip]
    reached_end: bool = False

    @property
    def clock_state(self) -> ClockState:
        return ClockState.PLAYING if self.state.is_playing else ClockState.STOPPED


@dataclass(frozen=True)
class AudioCue:
    track_id: str
    media_ref: str
    local_offset: float
    gain: float


@dataclass(frozen=True)
class PlaybackFrame:
    """What the render surface needs each tick; media fields are None in gaps."""

    cursor_time: float
    is_playing: bool
    clip_id: Optional[str] = None
    media_ref: Optional[str] = None
    local_offset: Optional[float] = None
    media_time: Optional[float] = None
    subtitles: Tuple[Subtitle, ...] = field(default_factory=tuple)
    overlays: Tuple[ImageOverlay, ...] = field(default_factory=tuple)
    audio: Tuple[AudioCue, ...] = field(default_factory=tuple)

    @property
    def has_clip(self) -> bool:
        return self.clip_id is not None


def resolve(clips: Iterable[Clip], cursor_time: float) -> Optional[ActiveClip]:
    clip = find_containing(clips, cursor_time)
    if clip is None:
        return None
    return ActiveClip(clip, cursor_time - clip.start_time)


def _stopped_at_start(state: PlaybackState) -> Tick:
    return Tick(
        dataclasses.replace(state, cursor_time=0.0, is_playing=False),
        None,
        reached_end=True,
    )


def advance(state: PlaybackState, clips: Sequence[Clip], dt: float) -> Tick:
    """Return the state after ``dt`` seconds of wall-clock time.

    While stopped the cursor does not move; the result only carries the
    resolution at the current cursor.
    """
    if not state.is_playing:
        return Tick(state, resolve(clips, state.cursor_time))
    if not math.isfinite(dt) or dt < 0:
        dt = 0.0
    t = state.cursor_time + dt
    if t >= state.total_duration:
        return _stopped_at_start(state)
    active = resolve(clips, t)
    if active is None:
        upcoming = next_starting_after(clips, t)
        if upcoming is None:
            return _stopped_at_start(state)
        t = upcoming.start_time
        active = ActiveClip(upcoming, 0.0)
    return Tick(dataclasses.replace(state, cursor_time=t), active)


def build_frame(
    state: PlaybackState,
    active: Optional[ActiveClip],
    subtitles: Sequence[Subtitle] = (),
    overlays: Sequence[ImageOverlay] = (),
    audio: Sequence[Tuple[AudioTrack, float]] = (),
) -> PlaybackFrame:
    t = state.cursor_time
    cues: List[AudioCue] = [
        AudioCue(track.id, track.media_ref, t - track.start_time, gain)
        for track, gain in audio
    ]
    if active is None:
        return PlaybackFrame(
            t, state.is_playing, subtitles=tuple(subtitles), overlays=tuple(overlays), audio=tuple(cues)
        )
    return PlaybackFrame(
        cursor_time=t,
        is_playing=state.is_playing,
        clip_id=active.clip.id,
        media_ref=active.clip.media_ref,
        local_offset=active.local_offset,
        media_time=active.media_time,
        subtitles=tuple(subtitles),
        overlays=tuple(overlays),
        audio=tuple(cues),
    )


__all__ = [
    "ClockState",
    "ActiveClip",
    "Tick",
    "AudioCue",
    "PlaybackFrame",
    "resolve",
    "advance",
    "build_frame",
]
