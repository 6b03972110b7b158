"""Error taxonomy for timeline editing.

Pure editing code raises these; ``TimelineStore`` decides which ones reach
the caller and which ones degrade into a no-op.
"""

from __future__ import annotations


class TimelineError(Exception):
    """Base class for every rejected timeline operation."""


class InvalidDuration(TimelineError, ValueError):
    """Media length is non-positive, NaN or could not be resolved."""


class NotFound(TimelineError, KeyError):
    """An operation referenced an id that is not (or no longer) present."""

    def __str__(self) -> str:  # KeyError quotes its argument otherwise
        return str(self.args[0]) if self.args else ""


class DegenerateInterval(TimelineError, ValueError):
    """A trim or split would leave an interval shorter than the floor."""


class OutOfRange(TimelineError, ValueError):
    """A requested time falls outside the timeline and cannot be clamped."""


__all__ = [
    "TimelineError",
    "InvalidDuration",
    "NotFound",
    "DegenerateInterval",
    "OutOfRange",
]
