"""Subtitle cues and image overlays.

Both stack: every entity active at the cursor is rendered, later entries on
top. Exclusivity, if wanted, is the editing UI's job.
"""

from __future__ import annotations

import copy
import dataclasses
import logging
from typing import Any, Mapping, Optional, Union

from .errors import NotFound, OutOfRange
from .intervals import clamp, is_finite_number
from .models import ImageOverlay, Position, Size, Subtitle, SubtitlePosition, SubtitleStyle
from .tracks import ChangeCallback, TimedCollection

logger = logging.getLogger(__name__)


class SubtitleManager(TimedCollection[Subtitle]):
    kind = "subtitle"

    def add(self, subtitle: Subtitle) -> Subtitle:
        self._check_interval(subtitle.start_time, subtitle.end_time)
        subtitle = copy.deepcopy(subtitle)
        subtitle.position = SubtitlePosition(subtitle.position)
        self._items.append(subtitle)
        logger.info("Added subtitle %s [%.3f, %.3f)", subtitle.id, subtitle.start_time, subtitle.end_time)
        self._notify()
        return copy.deepcopy(subtitle)

    def update(
        self,
        subtitle_id: str,
        *,
        text: Optional[str] = None,
        start_time: Optional[float] = None,
        end_time: Optional[float] = None,
        position: Optional[Union[SubtitlePosition, str]] = None,
        style: Optional[Union[SubtitleStyle, Mapping[str, Any]]] = None,
    ) -> bool:
        """Patch a cue. ``style`` may be partial: only the given fields change."""
        try:
            subtitle = self._find(subtitle_id)
        except NotFound as e:
            logger.debug("update ignored: %s", e)
            return False
        start = subtitle.start_time if start_time is None else start_time
        end = subtitle.end_time if end_time is None else end_time
        if not self._interval_ok(start, end):
            logger.debug("update of %s rejected: interval [%s, %s)", subtitle_id, start, end)
            return False
        try:
            new_position = subtitle.position if position is None else SubtitlePosition(position)
        except ValueError:
            logger.debug("update of %s rejected: unknown position %r", subtitle_id, position)
            return False
        if style is not None:
            fields = dataclasses.asdict(style) if isinstance(style, SubtitleStyle) else dict(style)
            subtitle.style = dataclasses.replace(subtitle.style, **fields)
        if text is not None:
            subtitle.text = text
        subtitle.start_time = float(start)
        subtitle.end_time = float(end)
        subtitle.position = new_position
        self._notify()
        return True


class ImageOverlayManager(TimedCollection[ImageOverlay]):
    kind = "image overlay"

    def __init__(
        self,
        on_change: Optional[ChangeCallback] = None,
        *,
        default_duration: float = 10.0,
    ):
        super().__init__(on_change)
        self.default_duration = default_duration

    def add(self, overlay: ImageOverlay) -> ImageOverlay:
        """Store a copy; an overlay without a usable end lasts ``default_duration``."""
        overlay = copy.deepcopy(overlay)
        if overlay.end_time <= overlay.start_time:
            overlay.end_time = overlay.start_time + self.default_duration
        self._check_interval(overlay.start_time, overlay.end_time)
        if not (is_finite_number(overlay.opacity) and is_finite_number(overlay.rotation)):
            raise OutOfRange(f"image overlay {overlay.id!r} has a non-finite opacity or rotation")
        overlay.opacity = clamp(overlay.opacity, 0.0, 1.0)
        self._items.append(overlay)
        logger.info("Added image overlay %s [%.3f, %.3f)", overlay.id, overlay.start_time, overlay.end_time)
        self._notify()
        return copy.deepcopy(overlay)

    def update(
        self,
        overlay_id: str,
        *,
        position: Optional[Position] = None,
        size: Optional[Size] = None,
        opacity: Optional[float] = None,
        rotation: Optional[float] = None,
        start_time: Optional[float] = None,
        end_time: Optional[float] = None,
    ) -> bool:
        try:
            overlay = self._find(overlay_id)
        except NotFound as e:
            logger.debug("update ignored: %s", e)
            return False
        start = overlay.start_time if start_time is None else start_time
        end = overlay.end_time if end_time is None else end_time
        if not self._interval_ok(start, end):
            logger.debug("update of %s rejected: interval [%s, %s)", overlay_id, start, end)
            return False
        if not all(v is None or is_finite_number(v) for v in (opacity, rotation)):
            logger.debug("update of %s rejected: non-finite opacity or rotation", overlay_id)
            return False
        if position is not None:
            overlay.position = copy.copy(position)
        if size is not None:
            overlay.size = copy.copy(size)
        if opacity is not None:
            overlay.opacity = clamp(float(opacity), 0.0, 1.0)
        if rotation is not None:
            overlay.rotation = float(rotation)
        overlay.start_time = float(start)
        overlay.end_time = float(end)
        self._notify()
        return True


__all__ = ["SubtitleManager", "ImageOverlayManager"]
