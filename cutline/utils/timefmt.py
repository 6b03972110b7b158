"""Time formatting and parsing for timeline labels and inputs.

``format_time`` gives mm:ss.mmm for the cursor readout, ``format_clock``
HH:MM:SS for clip labels, and ``parse_time`` reads what users type into
time fields.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal

__all__ = ["format_time", "format_clock", "parse_time"]


def _to_millis(seconds: float) -> int:
    return int(
        (Decimal(str(seconds)) * Decimal(1000)).to_integral_value(rounding=ROUND_HALF_UP)
    )


def format_time(seconds: float) -> str:
    """Return mm:ss.mmm, rounding milliseconds half-up (1.2345 -> 1.235).

    Negative and non-finite values display as zero.
    """
    if not math.isfinite(seconds) or seconds < 0:
        seconds = 0.0
    m, rem = divmod(_to_millis(seconds), 60000)
    s, ms = divmod(rem, 1000)
    return f"{m:02d}:{s:02d}.{ms:03d}"


def format_clock(seconds: float) -> str:
    """Return HH:MM:SS with fractional seconds truncated."""
    if not math.isfinite(seconds) or seconds < 0:
        seconds = 0.0
    whole = int(seconds)
    h, rem = divmod(whole, 3600)
    m, s = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{s:02d}"


def parse_time(text: str) -> float:
    """Parse ``HH:MM:SS(.f)``, ``MM:SS(.f)`` or plain seconds.

    Raises ValueError for anything else, including negative values.
    """
    parts = text.strip().split(":")
    if not 1 <= len(parts) <= 3 or any(p.strip() == "" for p in parts):
        raise ValueError(f"not a time value: {text!r}")
    try:
        seconds = float(parts[-1])
        units = [int(p) for p in parts[:-1]]
    except ValueError:
        raise ValueError(f"not a time value: {text!r}") from None
    for unit in units:
        if unit < 0:
            raise ValueError(f"negative time component in {text!r}")
    if len(units) == 2:
        total = units[0] * 3600 + units[1] * 60 + seconds
    elif len(units) == 1:
        total = units[0] * 60 + seconds
    else:
        total = seconds
    if not math.isfinite(total) or total < 0:
        raise ValueError(f"not a valid time: {text!r}")
    return total
