"""Playback controller: the scheduling half of the playback clock.

Design:
PlaybackController drives a TimelineStore in real time. A precise QTimer fires
every ``tick_interval_ms``; each timeout measures the wall-clock time elapsed
since the previous timeout and hands it to ``store.advance(dt)``, which
applies exactly one atomic cursor update. Because the step is measured, not
fixed, playback speed does not depend on how regularly the timer fires.

    start()      -> store.play(); idempotent while already playing
    pause()      -> stop ticking, keep the cursor
    stop()       -> pause and rewind to zero; safe to call at any time
    seek(t)      -> direct cursor assignment (clamped by the store)
    tick_once(dt)-> apply one tick synchronously (tests, frame stepping)

Signals:
    frameReady(PlaybackFrame)  # after every tick and every cursor change
    positionChanged(float)     # cursor seconds
    stateChanged(str)          # 'playing' | 'stopped'

The controller follows the store's ``playingChanged`` signal, so playback
started or stopped through the store (including the end-of-timeline rewind
and the pause on deleting the clip under the cursor) starts or cancels the
timer here as well. Cancelling only stops future timeouts; a tick already in
progress finishes its single store update.
"""

from __future__ import annotations

from time import perf_counter
from typing import Callable, Optional

from PySide6.QtCore import QObject, Qt, QTimer, Signal

from ..core.store import TimelineStore
from .clock import ClockState, PlaybackFrame


class PlaybackController(QObject):
    frameReady = Signal(object)  # PlaybackFrame
    positionChanged = Signal(float)
    stateChanged = Signal(str)

    def __init__(
        self,
        store: TimelineStore,
        parent: Optional[QObject] = None,
        *,
        interval_ms: Optional[int] = None,
        clock: Callable[[], float] = perf_counter,
    ):
        super().__init__(parent)
        self._store = store
        self._clock = clock
        self._last_tick: Optional[float] = None
        self._in_tick = False
        self._timer = QTimer(self)
        self._timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._timer.setInterval(interval_ms or store.config.tick_interval_ms)
        self._timer.timeout.connect(self._tick)
        store.playingChanged.connect(self._onPlayingChanged)
        store.cursorChanged.connect(self._onCursorChanged)
        store.clipsChanged.connect(self._onTimelineEdited)
        if store.is_playing:
            self._startTimer()

    @property
    def store(self) -> TimelineStore:
        return self._store

    # Public API
    def start(self) -> bool:
        return self._store.play()

    def pause(self):
        self._store.pause()

    def stop(self):
        self._store.stop()

    def toggle(self) -> bool:
        return self._store.toggle_play()

    def seek(self, t: float) -> bool:
        return self._store.set_cursor(t)

    def is_ticking(self) -> bool:
        return self._timer.isActive()

    def state(self) -> ClockState:
        return ClockState.PLAYING if self._store.is_playing else ClockState.STOPPED

    def position(self) -> float:
        return self._store.cursor_time

    def current_frame(self) -> PlaybackFrame:
        return self._store.frame()

    def tick_once(self, dt: float) -> PlaybackFrame:
        """Advance by ``dt`` seconds and publish the resulting frame."""
        self._in_tick = True
        try:
            self._store.advance(dt)
        finally:
            self._in_tick = False
        frame = self._store.frame()
        self.positionChanged.emit(frame.cursor_time)
        self.frameReady.emit(frame)
        return frame

    # Internal
    def _tick(self):
        if not self._store.is_playing:
            self._stopTimer()
            return
        now = self._clock()
        dt = 0.0 if self._last_tick is None else now - self._last_tick
        self._last_tick = now
        self.tick_once(dt)

    def _startTimer(self):
        if not self._timer.isActive():
            self._last_tick = self._clock()
            self._timer.start()

    def _stopTimer(self):
        if self._timer.isActive():
            self._timer.stop()
        self._last_tick = None

    def _onPlayingChanged(self, playing: bool):
        if playing:
            self._startTimer()
            self.stateChanged.emit(ClockState.PLAYING.value)
        else:
            self._stopTimer()
            self.stateChanged.emit(ClockState.STOPPED.value)

    def _onCursorChanged(self, t: float):
        if self._in_tick:
            return
        self.positionChanged.emit(t)
        self.frameReady.emit(self._store.frame())

    def _onTimelineEdited(self):
        if not self._in_tick and not self._store.is_playing:
            self.frameReady.emit(self._store.frame())


__all__ = ["PlaybackController"]
