"""
whisperserve.transcribe.pipeline - End-to-end transcription of one upload.

Sniff → transcode (only for non-WAV input) → decode → locked inference →
assembly. Blocking; the HTTP layer runs each call in a worker thread.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from whisperserve.audio.convert import normalize_bytes
from whisperserve.audio.decode import decode, duration_seconds
from whisperserve.exceptions import InputTooSmall
from whisperserve.transcribe.engine import InferenceGate
from whisperserve.transcribe.result import TranscriptionResult

logger = logging.getLogger(__name__)


class TranscriptionPipeline:
    """Transcription entry point bound to one InferenceGate."""

    def __init__(self, gate: InferenceGate) -> None:
        self.gate = gate

    def transcribe(self, audio: bytes, language: str | None = None) -> TranscriptionResult:
        """Transcribe an audio upload.

        When the input is not already 16kHz PCM WAV, the upload is staged on
        disk, one ffmpeg subprocess writes a temporary WAV, and both files
        are deleted before this returns.

        Args:
            audio: Raw bytes of the uploaded file
            language: Language code, or None for auto-detection

        Returns:
            TranscriptionResult

        Raises:
            WhisperServeError: Any stage failure; nothing partial is returned
        """
        if not audio:
            raise InputTooSmall("Audio file too small: 0 bytes")

        started = time.perf_counter()

        normalized = normalize_bytes(audio)
        if normalized is None:
            samples = decode(audio)
        else:
            with normalized:
                samples = decode(normalized.read_bytes())

        logger.debug(
            f"Decoded {len(samples)} samples ({duration_seconds(samples):.2f}s) "
            f"in {time.perf_counter() - started:.3f}s"
        )

        result = self.gate.transcribe(samples, language)

        logger.info(
            f"Transcribed {duration_seconds(samples):.2f}s of audio into "
            f"{len(result.segments)} segments in {time.perf_counter() - started:.3f}s"
        )
        return result

    def transcribe_file(self, path: Path, language: str | None = None) -> TranscriptionResult:
        """Transcribe an audio file from disk."""
        return self.transcribe(path.read_bytes(), language)
