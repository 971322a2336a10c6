"""
whisperserve.audio.sniff - Container format sniffing.

Classifies audio by its leading bytes, never by filename extension.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

RIFF_TAG = b"RIFF"
WAVE_TAG = b"WAVE"
SNIFF_SIZE = 12


class FormatVerdict(Enum):
    CANONICAL_PCM = "canonical_pcm"
    OTHER_CONTAINER = "other_container"


def classify(data: bytes) -> FormatVerdict:
    """Classify a buffer as RIFF/WAVE or anything else.

    Bytes 0-3 must be "RIFF" and bytes 8-11 "WAVE". Buffers shorter than
    12 bytes are never canonical.
    """
    if len(data) < SNIFF_SIZE:
        return FormatVerdict.OTHER_CONTAINER
    if data[0:4] == RIFF_TAG and data[8:12] == WAVE_TAG:
        return FormatVerdict.CANONICAL_PCM
    return FormatVerdict.OTHER_CONTAINER


def classify_file(path: Path) -> FormatVerdict:
    """Classify a file by its first 12 bytes."""
    with open(path, "rb") as f:
        return classify(f.read(SNIFF_SIZE))
