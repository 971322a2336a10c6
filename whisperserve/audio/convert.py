"""
whisperserve.audio.convert - FFmpeg audio transcoding.

Normalizes any audio ffmpeg can read into the form the decoder expects:
16kHz mono signed 16-bit little-endian PCM in a plain 44-byte-header WAV.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
import uuid
from pathlib import Path

from whisperserve.audio.sniff import FormatVerdict, classify, classify_file
from whisperserve.exceptions import ConversionError, ConversionFailed, ConversionUnavailable

logger = logging.getLogger(__name__)

TARGET_SAMPLE_RATE = 16000
TARGET_CHANNELS = 1
TARGET_CODEC = "pcm_s16le"


class NormalizedAudio:
    """Canonical PCM audio on disk.

    When ``temporary`` is set the file was produced by transcoding and is
    removed on cleanup. Use as a context manager so the file goes away even
    if a later stage fails.
    """

    def __init__(self, path: Path, temporary: bool = False) -> None:
        self.path = path
        self.temporary = temporary

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()

    def cleanup(self) -> None:
        """Delete the file if this object owns it. Failures are only logged."""
        if self.temporary:
            remove_temp_file(self.path)

    def __enter__(self) -> NormalizedAudio:
        return self

    def __exit__(self, *exc_info) -> None:
        self.cleanup()

    def __repr__(self) -> str:
        return f"NormalizedAudio(path={str(self.path)!r}, temporary={self.temporary})"


def find_ffmpeg() -> str:
    """Locate the ffmpeg executable.

    Raises:
        ConversionUnavailable: If ffmpeg is not on PATH
    """
    ffmpeg_path = shutil.which("ffmpeg")
    if not ffmpeg_path:
        raise ConversionUnavailable(
            "Audio is not 16kHz mono PCM WAV and ffmpeg was not found in PATH"
        )
    return ffmpeg_path


def remove_temp_file(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Failed to cleanup temp file {path}: {e}")


def temp_output_path() -> Path:
    """Return a fresh, unique path for a transcoded WAV file."""
    return Path(tempfile.gettempdir()) / f"whisperserve-{uuid.uuid4().hex}.wav"


def temp_input_path() -> Path:
    """Return a fresh, unique path for a staged upload."""
    return Path(tempfile.gettempdir()) / f"whisperserve-{uuid.uuid4().hex}.upload"


def build_ffmpeg_command(ffmpeg: str, source: str, output: Path) -> list[str]:
    """Build the ffmpeg argv for the fixed 16kHz mono s16le target.

    Metadata is stripped and bitexact mode set so the WAV header is exactly
    44 bytes with no LIST chunk.
    """
    return [
        ffmpeg,
        "-y",
        "-i",
        source,
        "-vn",
        "-map_metadata",
        "-1",
        "-fflags",
        "+bitexact",
        "-flags:a",
        "+bitexact",
        "-acodec",
        TARGET_CODEC,
        "-ar",
        str(TARGET_SAMPLE_RATE),
        "-ac",
        str(TARGET_CHANNELS),
        str(output),
    ]


def transcode(source: Path | bytes) -> Path:
    """Transcode audio to canonical PCM WAV using FFmpeg.

    Raw bytes are staged in a temporary input file rather than piped, since
    containers such as MP4/M4A may keep their index at the end of the file
    and ffmpeg needs to seek to it. The staged file is removed before this
    returns or raises.

    Args:
        source: Path to an audio file, or the raw bytes of one

    Returns:
        Path to a new temporary WAV file; the caller owns its deletion

    Raises:
        ConversionUnavailable: If ffmpeg is not installed or cannot be run
        ConversionFailed: If ffmpeg exits non-zero
        ConversionError: If the upload cannot be staged on disk
    """
    ffmpeg = find_ffmpeg()

    if not isinstance(source, bytes):
        return _run_ffmpeg(ffmpeg, source)

    staged = temp_input_path()
    try:
        try:
            staged.write_bytes(source)
        except OSError as e:
            raise ConversionError(f"Failed to stage upload for ffmpeg: {e}") from e
        return _run_ffmpeg(ffmpeg, staged)
    finally:
        remove_temp_file(staged)


def _run_ffmpeg(ffmpeg: str, source: Path) -> Path:
    output = temp_output_path()
    cmd = build_ffmpeg_command(ffmpeg, str(source), output)

    logger.debug(f"Transcoding {source} -> {output}")

    try:
        proc = subprocess.run(cmd, capture_output=True)
    except OSError as e:
        output.unlink(missing_ok=True)
        raise ConversionUnavailable(f"Failed to run ffmpeg at {ffmpeg}: {e}") from e

    if proc.returncode != 0:
        output.unlink(missing_ok=True)
        stderr = proc.stderr.decode("utf-8", errors="replace") if proc.stderr else ""
        raise ConversionFailed(
            f"FFmpeg conversion failed with exit code {proc.returncode}", stderr
        )

    logger.debug(f"Transcoded {source} ({output.stat().st_size} bytes written)")
    return output


def normalize(path: Path) -> NormalizedAudio:
    """Return canonical PCM audio for a file, transcoding only if needed.

    Canonical input is returned as-is without spawning ffmpeg.
    """
    if classify_file(path) is FormatVerdict.CANONICAL_PCM:
        return NormalizedAudio(path, temporary=False)
    return NormalizedAudio(transcode(path), temporary=True)


def normalize_bytes(data: bytes) -> NormalizedAudio | None:
    """Transcode an in-memory upload if it is not canonical PCM.

    Returns None when the bytes are already canonical and can be decoded
    directly.
    """
    if classify(data) is FormatVerdict.CANONICAL_PCM:
        return None
    return NormalizedAudio(transcode(data), temporary=True)
