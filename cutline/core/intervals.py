"""Half-open interval helpers shared by clips, tracks and overlays.

All intervals are ``[start, end)``: a time equal to ``end`` belongs to the
next interval, never to this one.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional, Protocol, TypeVar


class Timed(Protocol):
    start_time: float
    end_time: float


T = TypeVar("T", bound=Timed)


def contains(item: Timed, t: float) -> bool:
    return item.start_time <= t < item.end_time


def overlaps(a: Timed, b: Timed) -> bool:
    """True when the two intervals share any time (touching does not count)."""
    return a.start_time < b.end_time and b.start_time < a.end_time


def clamp(value: float, lower: float, upper: float) -> float:
    if value < lower:
        return lower
    if value > upper:
        return upper
    return value


def shift(item: T, delta: float) -> T:
    """Move ``item`` by ``delta`` seconds in place, keeping its length."""
    item.start_time += delta
    item.end_time += delta
    return item


def is_finite_number(value) -> bool:
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


def is_valid_duration(value) -> bool:
    """A usable media length: a finite number greater than zero."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(v) and v > 0


def find_containing(items: Iterable[T], t: float) -> Optional[T]:
    for item in items:
        if contains(item, t):
            return item
    return None


def all_containing(items: Iterable[T], t: float) -> list[T]:
    return [item for item in items if contains(item, t)]


def next_starting_after(items: Iterable[T], t: float) -> Optional[T]:
    """Earliest item whose start lies strictly after ``t``."""
    best: Optional[T] = None
    for item in items:
        if item.start_time > t and (best is None or item.start_time < best.start_time):
            best = item
    return best


__all__ = [
    "Timed",
    "contains",
    "overlaps",
    "clamp",
    "shift",
    "is_finite_number",
    "is_valid_duration",
    "find_containing",
    "all_containing",
    "next_starting_after",
]
