"""Audio tracks: independent of the video track, free to overlap each other."""

from __future__ import annotations

import copy
import logging
from typing import List, Optional, Union

from .errors import NotFound, OutOfRange
from .intervals import clamp, contains, is_finite_number
from .models import AudioTrack, TrimEdge, new_id
from .tracks import ChangeCallback, TimedCollection

logger = logging.getLogger(__name__)

ALL_TRACKS = "all"


class AudioTrackManager(TimedCollection[AudioTrack]):
    kind = "audio track"

    def __init__(
        self,
        on_change: Optional[ChangeCallback] = None,
        *,
        min_length: float = 0.1,
        default_duration: float = 30.0,
        default_volume: float = 80.0,
    ):
        super().__init__(on_change)
        self.min_length = min_length
        self.default_duration = default_duration
        self.default_volume = default_volume
        self.active_track_id: Optional[str] = None

    def create(
        self,
        name: str,
        media_ref: str,
        duration: Optional[float] = None,
        start_time: float = 0.0,
    ) -> AudioTrack:
        """Add a track for dropped media using the configured defaults."""
        length = self.default_duration if duration is None else duration
        return self.add(
            AudioTrack(
                media_ref=media_ref,
                name=name,
                start_time=start_time,
                end_time=start_time + length,
                volume=self.default_volume,
            )
        )

    def add(self, track: AudioTrack) -> AudioTrack:
        """Store a copy of ``track`` and make it the active track."""
        self._check_interval(track.start_time, track.end_time)
        if not all(is_finite_number(v) for v in (track.volume, track.fade_in, track.fade_out)):
            raise OutOfRange(f"audio track {track.id!r} has a non-finite volume or fade")
        track = copy.deepcopy(track)
        track.volume = clamp(track.volume, 0.0, 100.0)
        self._clamp_fades(track)
        self._items.append(track)
        self.active_track_id = track.id
        logger.info("Added audio track %s [%.3f, %.3f)", track.id, track.start_time, track.end_time)
        self._notify()
        return copy.deepcopy(track)

    def update(
        self,
        track_id: str,
        *,
        volume: Optional[float] = None,
        muted: Optional[bool] = None,
        fade_in: Optional[float] = None,
        fade_out: Optional[float] = None,
    ) -> bool:
        """Change mix settings; ``track_id == "all"`` applies volume/mute everywhere.

        Setting a volume without an explicit ``muted`` mutes at zero and
        unmutes otherwise.
        """
        if not all(v is None or is_finite_number(v) for v in (volume, fade_in, fade_out)):
            logger.debug("update of %s rejected: non-finite value", track_id)
            return False
        if track_id == ALL_TRACKS:
            targets = list(self._items)
        else:
            try:
                targets = [self._find(track_id)]
            except NotFound as e:
                logger.debug("update ignored: %s", e)
                return False
        for track in targets:
            if volume is not None:
                track.volume = clamp(float(volume), 0.0, 100.0)
                if muted is None:
                    track.muted = track.volume == 0
            if muted is not None:
                track.muted = bool(muted)
            if track_id != ALL_TRACKS:
                if fade_in is not None:
                    track.fade_in = float(fade_in)
                if fade_out is not None:
                    track.fade_out = float(fade_out)
                self._clamp_fades(track)
        self._notify()
        return True

    def split(self, track_id: str, at: float) -> Optional[AudioTrack]:
        """Cut a track at ``at``; returns the new tail, or ``None`` if rejected."""
        try:
            track = self._find(track_id)
        except NotFound as e:
            logger.debug("split ignored: %s", e)
            return None
        if not (track.start_time + self.min_length < at < track.end_time - self.min_length):
            logger.debug("split of %s at %s rejected: too close to an edge", track_id, at)
            return None
        tail = copy.deepcopy(track)
        tail.id = new_id("audio")
        tail.start_time = at
        tail.fade_in = 0.0
        track.end_time = at
        track.fade_out = 0.0
        self._clamp_fades(track)
        self._clamp_fades(tail)
        self._insert_after(track, tail)
        logger.info("Split audio track %s at %.3f -> %s", track_id, at, tail.id)
        self._notify()
        return copy.deepcopy(tail)

    def trim(self, track_id: str, edge: Union[TrimEdge, str], t: float) -> bool:
        try:
            edge = TrimEdge(edge)
        except ValueError:
            logger.debug("trim of %s ignored: unknown edge %r", track_id, edge)
            return False
        try:
            track = self._find(track_id)
        except NotFound as e:
            logger.debug("trim ignored: %s", e)
            return False
        if not is_finite_number(t):
            return False
        if edge == TrimEdge.START:
            track.start_time = max(0.0, min(t, track.end_time - self.min_length))
        else:
            track.end_time = max(t, track.start_time + self.min_length)
        self._clamp_fades(track)
        self._notify()
        return True

    def move(self, track_id: str, new_start: float) -> bool:
        try:
            track = self._find(track_id)
        except NotFound as e:
            logger.debug("move ignored: %s", e)
            return False
        if not is_finite_number(new_start):
            return False
        length = track.duration
        track.start_time = max(0.0, new_start)
        track.end_time = track.start_time + length
        self._notify()
        return True

    def set_active(self, track_id: Optional[str]) -> bool:
        if track_id is not None:
            try:
                self._find(track_id)
            except NotFound as e:
                logger.debug("set_active ignored: %s", e)
                return False
        self.active_track_id = track_id
        self._notify()
        return True

    def active_at(self, t: float) -> List[AudioTrack]:
        """Audible tracks at ``t``; muted tracks are skipped."""
        return [track for track in super().active_at(t) if not track.muted]

    @staticmethod
    def gain_at(track: AudioTrack, t: float) -> float:
        """Effective 0..1 gain at timeline time ``t`` including fade ramps."""
        if track.muted or not contains(track, t):
            return 0.0
        gain = track.volume / 100.0
        into = t - track.start_time
        remaining = track.end_time - t
        if track.fade_in > 0 and into < track.fade_in:
            gain *= into / track.fade_in
        if track.fade_out > 0 and remaining < track.fade_out:
            gain *= remaining / track.fade_out
        return gain

    # --- Internal ---
    def _removed(self, item: AudioTrack) -> None:
        if self.active_track_id == item.id:
            self.active_track_id = None

    @staticmethod
    def _clamp_fades(track: AudioTrack) -> None:
        length = track.duration
        track.fade_in = clamp(track.fade_in, 0.0, length)
        track.fade_out = clamp(track.fade_out, 0.0, length)


__all__ = ["AudioTrackManager", "ALL_TRACKS"]
