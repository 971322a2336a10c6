"""
whisperserve.audio.decode - 16-bit PCM to float32 sample conversion.
"""

from __future__ import annotations

import numpy as np

from whisperserve.audio.sniff import FormatVerdict, classify
from whisperserve.exceptions import InputTooSmall, NoAudioData

WAV_HEADER_SIZE = 44
SAMPLE_WIDTH = 2
INT16_SCALE = 32768.0


def decode(data: bytes) -> np.ndarray:
    """Decode 16-bit little-endian PCM into float32 samples in [-1.0, 1.0].

    A leading RIFF/WAVE header is skipped as a fixed 44-byte block; without
    one the whole buffer is treated as raw samples. A trailing odd byte is
    dropped.

    Args:
        data: WAV file bytes or headerless PCM bytes

    Returns:
        Non-empty float32 array

    Raises:
        InputTooSmall: If nothing remains after the header (or the buffer
            is empty)
        NoAudioData: If no complete 2-byte sample remains
    """
    if classify(data) is FormatVerdict.CANONICAL_PCM:
        if len(data) <= WAV_HEADER_SIZE:
            raise InputTooSmall(
                f"Audio file too small: {len(data)} bytes, "
                f"expected more than the {WAV_HEADER_SIZE}-byte WAV header"
            )
        data_start = WAV_HEADER_SIZE
    else:
        if not data:
            raise InputTooSmall("Audio file too small: 0 bytes")
        data_start = 0

    n_samples = (len(data) - data_start) // SAMPLE_WIDTH
    if n_samples == 0:
        raise NoAudioData("No audio data found in file")

    pcm = np.frombuffer(data, dtype="<i2", count=n_samples, offset=data_start)
    samples = pcm.astype(np.float32) / np.float32(INT16_SCALE)
    return np.clip(samples, -1.0, 1.0)


def duration_seconds(samples: np.ndarray, sample_rate: int = 16000) -> float:
    """Duration of a mono sample buffer in seconds."""
    return len(samples) / sample_rate
