"""Conversion between second offsets and yt-dlp's ``HH:MM:SS.mmm`` timestamps."""

import math
import re

from clipfetch.models import SegmentSpec

_TIMESTAMP_RE = re.compile(r"^(\d+):([0-5]\d):([0-5]\d)\.(\d{3})$")


def encode(seconds: float) -> str:
    """Format *seconds* as ``HH:MM:SS.mmm``.

    Hours are not wrapped at 24 and are padded to at least two digits.
    The value is rounded to whole milliseconds before it is split into
    fields, so a fraction never rounds up into a ``60`` seconds field.
    """
    if not math.isfinite(seconds) or seconds < 0:
        raise ValueError(f"Cannot encode {seconds!r} as a timestamp")

    total_ms = round(seconds * 1000)
    hours, rem = divmod(total_ms, 3_600_000)
    minutes, rem = divmod(rem, 60_000)
    secs, millis = divmod(rem, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}.{millis:03d}"


def decode(text: str) -> float:
    """Parse an ``HH:MM:SS.mmm`` timestamp back into seconds."""
    m = _TIMESTAMP_RE.match(text)
    if m is None:
        raise ValueError(f"Malformed timestamp: {text!r}")
    hours, minutes, secs, millis = (int(g) for g in m.groups())
    return hours * 3600 + minutes * 60 + secs + millis / 1000


def segment_spec(start: float, end: float) -> SegmentSpec:
    return SegmentSpec(start_formatted=encode(start), end_formatted=encode(end))
