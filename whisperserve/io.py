"""
whisperserve.io - Writing transcripts to disk.
"""

from __future__ import annotations

from pathlib import Path

from whisperserve.exceptions import WhisperServeError
from whisperserve.transcribe.result import TranscriptionResult


def write_transcript(path: Path, result: TranscriptionResult) -> Path:
    """Write a transcription result as JSON.

    The document matches the "result" object of POST /transcribe. It is
    written next to the destination and moved into place, so an existing
    transcript is never left half-overwritten.

    Raises:
        WhisperServeError: If the file cannot be written
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    staged = path.with_name(f".{path.name}.partial")
    try:
        staged.write_text(result.model_dump_json(indent=2), encoding="utf-8")
        staged.replace(path)
    except OSError as e:
        staged.unlink(missing_ok=True)
        raise WhisperServeError(f"Failed to write transcript to {path}: {e}") from e
    return path
