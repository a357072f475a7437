"""
chunkscribe.export.timecode - Clock formatting for timestamped output.
"""

from __future__ import annotations


def seconds_to_clock(seconds: float) -> str:
    """Convert float seconds to an ``HH:MM:SS`` clock string.

    Fractional seconds are truncated, never rounded, so 59.999 stays
    ``00:00:59``. Hours are not wrapped at 24.

    Args:
        seconds: Time in seconds (non-negative)

    Returns:
        Zero-padded clock string
    """
    total_seconds = int(seconds)
    ss = total_seconds % 60
    mm = (total_seconds // 60) % 60
    hh = total_seconds // 3600
    return f"{hh:02d}:{mm:02d}:{ss:02d}"


def format_span(start: float, end: float) -> str:
    """Format a time span as ``[HH:MM:SS - HH:MM:SS]``."""
    return f"[{seconds_to_clock(start)} - {seconds_to_clock(end)}]"
