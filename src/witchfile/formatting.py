"""Small helpers that turn raw file metadata into readable text."""

from __future__ import annotations

import math
import re
from datetime import datetime, timedelta
from typing import NamedTuple, Tuple

KB = 1024
MB = 1024 ** 2
GB = 1024 ** 3
TB = 1024 ** 4

# Largest unit first; a size exactly on a boundary takes the larger unit.
SIZE_UNITS: Tuple[Tuple[int, str], ...] = (
    (TB, "T"),
    (GB, "G"),
    (MB, "M"),
    (KB, "K"),
)

_UNIT_FACTORS = {"B": 1, "K": KB, "M": MB, "G": GB, "T": TB}

# (upper bound in seconds, divisor, label)
ELAPSED_UNITS: Tuple[Tuple[float, int, str], ...] = (
    (60, 1, "sec(s)"),
    (3600, 60, "min(s)"),
    (86400, 3600, "hr(s)"),
    (math.inf, 86400, "day(s)"),
)

_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([BKMGT])\s*$")


class HumanSize(NamedTuple):
    magnitude: float
    unit: str


def round_half_up(value: float, digits: int = 0) -> float:
    """Round a non-negative float, sending halves upwards."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def humanize_size(size: int) -> HumanSize:
    """Scale a byte count to the largest fitting 1024-based unit.

    Sizes below one kibibyte keep their raw count with unit ``B``, so zero is
    ``(0.0, "B")``. Larger sizes are rounded to one decimal place.
    """
    if size < 0:
        raise ValueError(f"Size cannot be negative: {size}")
    for factor, unit in SIZE_UNITS:
        if size >= factor:
            return HumanSize(round_half_up(size / factor, 1), unit)
    return HumanSize(float(size), "B")


def format_size(size: int) -> str:
    """Convert a byte count into a friendly string such as ``12.4K``."""
    magnitude, unit = humanize_size(size)
    if unit == "B":
        return f"{int(magnitude)}{unit}"
    formatted = f"{magnitude:.1f}".rstrip("0").rstrip(".")
    return f"{formatted}{unit}"


def parse_size(text: str) -> float:
    """Turn a string produced by :func:`format_size` back into bytes."""
    match = _SIZE_PATTERN.match(text)
    if match is None:
        raise ValueError(f"Not a size string: {text!r}")
    value, unit = match.groups()
    return float(value) * _UNIT_FACTORS[unit]


def elapsed_seconds(past: datetime, now: datetime) -> int:
    """Whole seconds between `past` and `now`; timestamps in the future count as 0."""
    seconds = (now - past) // timedelta(seconds=1)
    return max(seconds, 0)


def elapsed_unit(seconds: int) -> int:
    """Index into :data:`ELAPSED_UNITS` for an elapsed duration."""
    for index, (upper, _divisor, _label) in enumerate(ELAPSED_UNITS):
        if seconds < upper:
            return index
    return len(ELAPSED_UNITS) - 1


def humanize_elapsed(past: datetime, now: datetime) -> str:
    """Describe how long ago `past` was, e.g. ``2 min(s) ago``."""
    seconds = elapsed_seconds(past, now)
    _upper, divisor, label = ELAPSED_UNITS[elapsed_unit(seconds)]
    if divisor == 1:
        amount = seconds
    else:
        amount = int(round_half_up(seconds / divisor))
    return f"{amount} {label} ago"


__all__ = [
    "HumanSize",
    "humanize_size",
    "format_size",
    "parse_size",
    "elapsed_seconds",
    "elapsed_unit",
    "humanize_elapsed",
]
