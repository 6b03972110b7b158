"""Clip editing engine for the single video track.

Every operation takes the current clip list, works on deep copies and
returns a new list sorted by start time, so a raised error leaves the
caller's collection untouched. Non-overlap is enforced eagerly: moves and
inserts displace the clips they land on instead of tolerating overlap.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .errors import DegenerateInterval, InvalidDuration, NotFound, OutOfRange, TimelineError
from .intervals import clamp, is_valid_duration, overlaps, shift
from .models import Clip, ClipKind, LibraryItem, OverlayTransform, TrimEdge, new_id

MIN_CLIP_LENGTH = 0.1


def _ordered_copies(clips: Iterable[Clip]) -> List[Clip]:
    return sorted((c.copy() for c in clips), key=lambda c: c.start_time)


def _index_of(clips: Sequence[Clip], clip_id: str) -> int:
    for i, clip in enumerate(clips):
        if clip.id == clip_id:
            return i
    raise NotFound(f"clip {clip_id!r} not on the timeline")


def _require_time(value: float, what: str) -> float:
    try:
        t = float(value)
    except (TypeError, ValueError):
        raise OutOfRange(f"{what} is not a number: {value!r}") from None
    if not math.isfinite(t):
        raise OutOfRange(f"{what} is not finite: {value!r}")
    return t


def _require_edge(edge: Union[TrimEdge, str]) -> TrimEdge:
    try:
        return TrimEdge(edge)
    except ValueError:
        raise OutOfRange(f"unknown trim edge {edge!r}") from None


def _push_right(clips: Sequence[Clip], bound: float) -> None:
    """Shift clips (already in order) right until none starts before ``bound``.

    ``bound`` advances past every clip visited so one displacement cascades
    into the next.
    """
    for clip in clips:
        if clip.start_time < bound:
            shift(clip, bound - clip.start_time)
        bound = max(bound, clip.end_time)


def reflow(clips: Sequence[Clip], after: float, by: float) -> None:
    """Close a gap of ``by`` seconds: every clip starting after ``after`` moves left."""
    for clip in clips:
        if clip.start_time > after:
            shift(clip, -by)


def recalc_duration(clips: Iterable[Clip]) -> float:
    return max((c.end_time for c in clips), default=0.0)


def find_overlaps(clips: Sequence[Clip]) -> List[Tuple[Clip, Clip]]:
    found = []
    for i, a in enumerate(clips):
        for b in clips[i + 1 :]:
            if overlaps(a, b):
                found.append((a, b))
    return found


class ClipEditingEngine:
    """Move/trim/split/delete/reflow over an ordered clip sequence."""

    def __init__(self, min_length: float = MIN_CLIP_LENGTH):
        self.min_length = min_length

    # --- Structural operations ---
    def add_clip(
        self,
        clips: Sequence[Clip],
        item: LibraryItem,
        insert_at: Optional[float] = None,
        *,
        kind: Optional[ClipKind] = None,
        overlay: Optional[OverlayTransform] = None,
    ) -> Tuple[List[Clip], Clip]:
        """Place ``item`` at ``insert_at`` (default: after the last clip).

        Clips already occupying the new interval are pushed right.
        """
        if not is_valid_duration(item.duration):
            raise InvalidDuration(
                f"{item.name or item.media_ref!r} has unusable duration {item.duration!r}"
            )
        work = _ordered_copies(clips)
        if insert_at is None:
            start = recalc_duration(work)
        else:
            start = max(0.0, _require_time(insert_at, "insert position"))
        duration = float(item.duration)
        clip = Clip(
            media_ref=item.media_ref,
            name=item.name,
            start_time=start,
            end_time=start + duration,
            kind=kind or getattr(item, "kind", ClipKind.VIDEO),
            local_duration=duration,
            overlay=overlay,
            id=new_id("clip"),
        )
        _push_right([c for c in work if c.end_time > start], clip.end_time)
        work.append(clip)
        work.sort(key=lambda c: c.start_time)
        return work, clip

    def move_clip(
        self, clips: Sequence[Clip], clip_id: str, new_start: float
    ) -> Tuple[List[Clip], Clip]:
        """Move a clip keeping its length; neighbours it lands on are displaced.

        Moving right pushes overlapped clips after the moved clip. Moving left
        pushes them further left; a clip that cannot fit before time zero is
        placed after the moved clip instead. Clips the move never lands on
        keep their place.
        """
        work = _ordered_copies(clips)
        clip = work[_index_of(work, clip_id)]
        start = max(0.0, _require_time(new_start, "start time"))
        old_start = clip.start_time
        if start == old_start:
            return work, clip
        others = [c for c in work if c is not clip]
        shift(clip, start - old_start)

        if start > old_start:
            _push_right([c for c in others if c.end_time > clip.start_time], clip.end_time)
        else:
            before = [c for c in others if c.start_time < old_start]
            after = [c for c in others if c.start_time >= old_start]
            # [bound, clip.end_time) stays fully occupied by the moved clip
            # and the clips displaced so far.
            bound = clip.start_time
            overflow: List[Clip] = []
            for other in reversed(before):
                if not (other.start_time < clip.end_time and other.end_time > bound):
                    if other.start_time >= clip.end_time:
                        after.append(other)
                    continue
                target = bound - other.duration
                if target < 0:
                    overflow.append(other)
                    continue
                shift(other, target - other.start_time)
                bound = target
            overflow.reverse()
            after.sort(key=lambda c: c.start_time)
            _push_right(overflow + after, clip.end_time)

        work.sort(key=lambda c: c.start_time)
        return work, clip

    def trim_clip(
        self,
        clips: Sequence[Clip],
        clip_id: str,
        edge: Union[TrimEdge, str],
        new_time: float,
    ) -> Tuple[List[Clip], Clip]:
        """Move one edge of a clip, clamped between its neighbours and the floor."""
        edge = _require_edge(edge)
        t = _require_time(new_time, "trim time")
        work = _ordered_copies(clips)
        idx = _index_of(work, clip_id)
        clip = work[idx]
        prev_clip = work[idx - 1] if idx > 0 else None
        next_clip = work[idx + 1] if idx + 1 < len(work) else None
        media_bound = clip.kind == ClipKind.VIDEO and clip.local_duration > 0

        if edge == TrimEdge.START:
            lower = prev_clip.end_time if prev_clip else 0.0
            if media_bound:
                lower = max(lower, clip.start_time - clip.source_in)
            upper = clip.end_time - self.min_length
            if upper < lower:
                raise DegenerateInterval(
                    f"clip {clip_id!r} start cannot move without dropping below {self.min_length}s"
                )
            t = clamp(t, lower, upper)
            clip.source_in = max(0.0, clip.source_in + (t - clip.start_time))
            clip.start_time = t
        else:
            lower = clip.start_time + self.min_length
            upper = next_clip.start_time if next_clip else recalc_duration(work)
            if media_bound:
                upper = min(upper, clip.start_time + clip.local_duration - clip.source_in)
            if upper < lower:
                raise DegenerateInterval(
                    f"clip {clip_id!r} end cannot move without dropping below {self.min_length}s"
                )
            clip.end_time = clamp(t, lower, upper)
        return work, clip

    def split_clip(
        self, clips: Sequence[Clip], clip_id: str, at: float
    ) -> Tuple[List[Clip], Clip, Clip]:
        """Cut a clip in two at ``at``; the tail gets a fresh id."""
        t = _require_time(at, "split time")
        work = _ordered_copies(clips)
        idx = _index_of(work, clip_id)
        head = work[idx]
        if not (head.start_time + self.min_length < t < head.end_time - self.min_length):
            raise DegenerateInterval(
                f"split at {t} leaves a part of clip {clip_id!r} under {self.min_length}s"
            )
        tail = head.copy()
        tail.id = new_id("clip")
        tail.start_time = t
        tail.source_in = head.source_in + (t - head.start_time)
        head.end_time = t
        work.insert(idx + 1, tail)
        return work, head, tail

    def remove_clip(self, clips: Sequence[Clip], clip_id: str) -> Tuple[List[Clip], Clip]:
        """Delete a clip, then reflow everything after it to close the gap."""
        work = _ordered_copies(clips)
        removed = work.pop(_index_of(work, clip_id))
        reflow(work, removed.start_time, removed.duration)
        return work, removed

    def normalize(self, clips: Iterable[Clip]) -> List[Clip]:
        """Validate an arbitrary clip list and lay it out without overlap."""
        work = _ordered_copies(clips)
        seen = set()
        for clip in work:
            if clip.id in seen:
                raise TimelineError(f"duplicate clip id {clip.id!r}")
            seen.add(clip.id)
            start = _require_time(clip.start_time, "start time")
            end = _require_time(clip.end_time, "end time")
            if end - start <= 0:
                raise InvalidDuration(f"clip {clip.id!r} has end {end} <= start {start}")
            if start < 0:
                shift(clip, -start)
        work.sort(key=lambda c: c.start_time)
        _push_right(work, 0.0)
        return work

    @staticmethod
    def recalc_duration(clips: Iterable[Clip]) -> float:
        return recalc_duration(clips)


__all__ = [
    "MIN_CLIP_LENGTH",
    "ClipEditingEngine",
    "reflow",
    "recalc_duration",
    "find_overlaps",
]
