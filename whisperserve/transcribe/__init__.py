"""
whisperserve.transcribe - whisper.cpp transcription.

Pipeline Stages 4-5: run inference on the single shared engine under a
lock, then read the engine's segments back into a TranscriptionResult
with byte offsets into the full text.
"""

from __future__ import annotations
