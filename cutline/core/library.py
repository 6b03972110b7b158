"""Media library: the pool of imported items clips are instantiated from."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Callable, List, Optional, Union

from .errors import InvalidDuration, NotFound
from .intervals import is_valid_duration
from .models import LibraryItem

if TYPE_CHECKING:
    from ..media.probe import MediaProbe

logger = logging.getLogger(__name__)


class MediaLibrary:
    def __init__(
        self,
        on_change: Optional[Callable[[], None]] = None,
        probe: Optional["MediaProbe"] = None,
    ):
        self._items: List[LibraryItem] = []
        self._on_change = on_change
        self._probe = probe

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return any(item.id == item_id for item in self._items)

    def items(self) -> List[LibraryItem]:
        return list(self._items)

    def get(self, item_id: str) -> Optional[LibraryItem]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def require(self, item_id: str) -> LibraryItem:
        item = self.get(item_id)
        if item is None:
            raise NotFound(f"library item {item_id!r} not found")
        return item

    def add(self, item: LibraryItem) -> LibraryItem:
        if not is_valid_duration(item.native_duration):
            raise InvalidDuration(f"{item.name!r} has unusable duration {item.native_duration!r}")
        if item.id in self:
            raise ValueError(f"library item {item.id!r} already present")
        self._items.append(item)
        logger.info("Library add %s (%s, %.3fs)", item.id, item.name, item.native_duration)
        self._notify()
        return item

    def import_path(self, path: Union[str, Path], name: Optional[str] = None) -> LibraryItem:
        """Probe a file for its duration and add it; raises ``InvalidDuration`` on failure."""
        if self._probe is None:
            from ..media.probe import MediaProbe

            self._probe = MediaProbe()
        result = self._probe.probe(path)
        if result.media_type == "audio":
            raise InvalidDuration(f"{Path(path).name}: audio belongs on an audio track")
        item = LibraryItem(
            name=name or Path(path).stem,
            media_ref=str(path),
            native_duration=result.duration,
            kind=result.clip_kind,
        )
        return self.add(item)

    def update(
        self,
        item_id: str,
        *,
        name: Optional[str] = None,
        media_ref: Optional[str] = None,
        duration: Optional[float] = None,
    ) -> Optional[LibraryItem]:
        """Replace an item with edited metadata (items themselves are immutable)."""
        for i, item in enumerate(self._items):
            if item.id == item_id:
                break
        else:
            logger.debug("library update ignored: %s not found", item_id)
            return None
        changes = {}
        if name is not None:
            changes["name"] = name
        if media_ref is not None:
            changes["media_ref"] = media_ref
        if duration is not None:
            if not is_valid_duration(duration):
                raise InvalidDuration(f"unusable duration {duration!r}")
            changes["native_duration"] = float(duration)
        updated = dataclasses.replace(item, **changes)
        self._items[i] = updated
        self._notify()
        return updated

    def remove(self, item_id: str) -> bool:
        """Drop an item; clips already placed from it stay on the timeline."""
        item = self.get(item_id)
        if item is None:
            logger.debug("library remove ignored: %s not found", item_id)
            return False
        self._items.remove(item)
        logger.info("Library remove %s", item_id)
        self._notify()
        return True

    def _notify(self) -> None:
        if self._on_change:
            self._on_change()


__all__ = ["MediaLibrary"]
