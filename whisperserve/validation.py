"""
whisperserve.validation - Dependency checks and model file discovery.

Validates the environment before serving: ffmpeg for transcoding and the
whisper.cpp model file.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Any

from whisperserve.exceptions import DependencyError, ModelNotFound, WhisperServeError

MODEL_PREFIX = "ggml-"
MODEL_SUFFIX = ".bin"


def check_ffmpeg() -> dict[str, str]:
    """Check if FFmpeg is installed and get its version.

    Returns:
        Dict with 'ffmpeg_path' and 'ffmpeg_version'

    Raises:
        DependencyError: If FFmpeg not found
    """
    ffmpeg_path = shutil.which("ffmpeg")
    if not ffmpeg_path:
        raise DependencyError(
            "ffmpeg",
            "FFmpeg not found in PATH",
            "Install with: brew install ffmpeg (macOS) or apt install ffmpeg (Linux)",
        )

    result = {"ffmpeg_path": ffmpeg_path}
    try:
        proc = subprocess.run(
            [ffmpeg_path, "-version"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        version_line = proc.stdout.split("\n")[0]
        result["ffmpeg_version"] = version_line.split()[2] if version_line else "unknown"
    except (subprocess.TimeoutExpired, IndexError):
        result["ffmpeg_version"] = "unknown"

    return result


def check_model_file(path: Path) -> dict[str, Any]:
    """Check that the configured model file exists.

    Returns:
        Dict with 'path', 'size_bytes' and 'ggml_name' (whether the filename
        follows the ggml-*.bin convention)

    Raises:
        ModelNotFound: If the path is missing or not a file
    """
    if not path.is_file():
        raise ModelNotFound(f"Model file not found: {path}")

    return {
        "path": str(path),
        "size_bytes": path.stat().st_size,
        "ggml_name": is_model_file(path),
    }


def is_model_file(path: Path) -> bool:
    return path.name.startswith(MODEL_PREFIX) and path.name.endswith(MODEL_SUFFIX)


def list_models(model_path: Path) -> dict[str, Any]:
    """List ggml model files next to the configured model.

    Args:
        model_path: Configured model file path; its parent directory is
            scanned

    Returns:
        Dict with the configured path, whether it exists, the scanned
        directory, the sorted model entries and their count

    Raises:
        WhisperServeError: If the directory cannot be read
    """
    model_dir = model_path.parent

    try:
        entries = list(model_dir.iterdir())
    except OSError as e:
        raise WhisperServeError(f"Failed to read model directory {model_dir}: {e}") from e

    models = []
    for path in entries:
        if not path.is_file() or not is_model_file(path):
            continue
        try:
            size = path.stat().st_size
        except OSError as e:
            raise WhisperServeError(f"Failed to read metadata for {path}: {e}") from e
        models.append({"name": path.name, "path": str(path), "size_bytes": size})

    models.sort(key=lambda m: m["name"])

    return {
        "configured_model_path": str(model_path),
        "configured_model_exists": model_path.is_file(),
        "model_directory": str(model_dir),
        "models": models,
        "count": len(models),
    }
