"""
whisperserve.audio - Audio normalization.

Pipeline Stages 1-3: classify the upload's container, transcode anything
that is not 16 kHz mono 16-bit PCM WAV with ffmpeg, and decode PCM into
float32 samples for the engine.
"""

from __future__ import annotations
