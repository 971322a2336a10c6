"""
whisperserve.utils - Shared formatting helpers for CLI output.
"""

from __future__ import annotations


def format_timestamp(centiseconds: int) -> str:
    """Format engine centiseconds as MM:SS.cc or H:MM:SS.cc.

    Args:
        centiseconds: Time in hundredths of a second

    Returns:
        Formatted string (H:MM:SS.cc if >= 1 hour, otherwise MM:SS.cc)
    """
    centiseconds = max(int(centiseconds), 0)
    total_seconds, cs = divmod(centiseconds, 100)
    hours, rem = divmod(total_seconds, 3600)
    minutes, secs = divmod(rem, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}.{cs:02d}"
    return f"{minutes:02d}:{secs:02d}.{cs:02d}"


def format_size(size: float) -> str:
    """Format a byte count in human-readable form."""
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"
