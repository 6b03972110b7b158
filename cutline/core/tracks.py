"""Shared base for the independent interval collections (audio, subtitles, overlays).

These collections never reflow and may overlap freely; they only share the
half-open activity rule and the "unknown id is a silent no-op" policy.
"""

from __future__ import annotations

import copy
import logging
from typing import Callable, Generic, List, Optional, TypeVar

from .errors import InvalidDuration, NotFound
from .intervals import all_containing, is_finite_number, is_valid_duration

logger = logging.getLogger(__name__)

T = TypeVar("T")

ChangeCallback = Callable[[], None]


class TimedCollection(Generic[T]):
    """Ordered-by-insertion list of timed entities with change notification."""

    kind = "item"

    def __init__(self, on_change: Optional[ChangeCallback] = None):
        self._items: List[T] = []
        self._on_change = on_change

    def __len__(self) -> int:
        return len(self._items)

    def items(self) -> List[T]:
        """Deep copies in insertion order; edits to them do not reach the collection."""
        return copy.deepcopy(self._items)

    def get(self, item_id: str) -> Optional[T]:
        try:
            return copy.deepcopy(self._find(item_id))
        except NotFound:
            return None

    def remove(self, item_id: str) -> bool:
        try:
            item = self._find(item_id)
        except NotFound as e:
            logger.debug("remove ignored: %s", e)
            return False
        self._items.remove(item)
        self._removed(item)
        logger.info("Removed %s %s", self.kind, item_id)
        self._notify()
        return True

    def active_at(self, t: float) -> List[T]:
        """Every entity whose ``[start, end)`` contains ``t``, in insertion order."""
        return copy.deepcopy(all_containing(self._items, t))

    def clear(self) -> None:
        if not self._items:
            return
        self._items.clear()
        self._notify()

    # --- Helpers for subclasses ---
    def _find(self, item_id: str) -> T:
        for item in self._items:
            if getattr(item, "id") == item_id:
                return item
        raise NotFound(f"{self.kind} {item_id!r} not found")

    @staticmethod
    def _interval_ok(start: float, end: float) -> bool:
        if not (is_finite_number(start) and is_finite_number(end)):
            return False
        return float(start) >= 0 and is_valid_duration(float(end) - float(start))

    def _check_interval(self, start: float, end: float) -> None:
        if not self._interval_ok(start, end):
            raise InvalidDuration(f"{self.kind} interval [{start}, {end}) is empty or negative")

    def _insert_after(self, anchor: T, item: T) -> None:
        self._items.insert(self._items.index(anchor) + 1, item)

    def _removed(self, item: T) -> None:
        pass

    def _notify(self) -> None:
        if self._on_change:
            self._on_change()


__all__ = ["TimedCollection", "ChangeCallback"]
