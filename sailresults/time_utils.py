"""Conversions between ``HH:MM:SS`` text and second counts."""

from __future__ import annotations

import math
import re

SECONDS_PER_HOUR = 3600

TIME_RE = re.compile(r"^(\d{1,3}):(\d{2}):(\d{2})$")


def time_to_seconds(text: str | None) -> int | None:
    """Return seconds for an ``HH:MM:SS`` timestamp or ``None``."""
    if not text:
        return None
    match = TIME_RE.match(str(text).strip())
    if not match:
        return None
    h, m, s = (int(g) for g in match.groups())
    return h * SECONDS_PER_HOUR + m * 60 + s


def seconds_to_time(seconds: float | int | None) -> str:
    """Format ``seconds`` as zero-padded ``HH:MM:SS``.

    Invalid input (``None``, NaN, infinite, negative) yields an empty
    string. A carry of 60 minutes resets the minutes to zero and leaves the
    hours alone.
    """
    if seconds is None:
        return ""
    try:
        value = float(seconds)
    except (TypeError, ValueError):
        return ""
    if not math.isfinite(value) or value < 0:
        return ""
    total = int(math.floor(value + 0.5))
    hours = total // SECONDS_PER_HOUR
    minutes = (total % SECONDS_PER_HOUR) // 60
    secs = total % 60
    if secs == 60:
        minutes += 1
        secs = 0
    if minutes == 60:
        # Hours are not incremented here.
        minutes = 0
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def resolve_corrected_time(elapsed_seconds: float, yardstick: float) -> float:
    """Return the yardstick corrected time for ``elapsed_seconds``.

    A missing or non-positive yardstick gives NaN, which
    :func:`seconds_to_time` formats as an empty string.
    """
    if not yardstick or yardstick <= 0:
        return math.nan
    return elapsed_seconds * 100 / yardstick


__all__ = [
    "time_to_seconds",
    "seconds_to_time",
    "resolve_corrected_time",
]
