"""
whisperserve.config - YAML config loading, environment overrides, validation.

Handles loading whisperserve.yaml, applying WHISPER_* environment variables
on top, and validating all parameters.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from whisperserve.exceptions import ConfigError

DEFAULT_CONFIG_FILE = "whisperserve.yaml"

ENV_VARS: dict[str, str] = {
    "WHISPER_MODEL": "model_path",
    "WHISPER_HOST": "host",
    "WHISPER_PORT": "port",
    "WHISPER_THREADS": "threads",
    "WHISPER_LOG_LEVEL": "log_level",
    "WHISPER_MAX_UPLOAD_MB": "max_upload_mb",
}


class ServerConfig(BaseModel):
    """Resolved configuration for a whisperserve process."""

    model_path: Path = Path("./models/ggml-base.en.bin")
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    threads: int = Field(default=4, gt=0)
    log_level: str = "info"
    max_upload_mb: int = Field(default=100, gt=0)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid = {"debug", "info", "warning", "error"}
        if v.lower() not in valid:
            raise ValueError(f"log_level must be one of: {valid}")
        return v.lower()

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


def merge_config(base: dict[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Merge overrides into base. None values never override."""
    merged = dict(base)
    for key, value in overrides.items():
        if value is not None:
            merged[key] = value
    return merged


def read_env(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Collect config values from WHISPER_* environment variables."""
    environ = os.environ if environ is None else environ
    values: dict[str, Any] = {}
    for var, key in ENV_VARS.items():
        raw = environ.get(var)
        if raw is not None and raw.strip():
            values[key] = raw.strip()
    return values


def load_config(
    config_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
    **overrides: Any,
) -> ServerConfig:
    """Load and validate configuration.

    Precedence, lowest first: defaults, YAML file, environment, keyword
    overrides (typically CLI options).

    Args:
        config_file: YAML file to read; when None, whisperserve.yaml in the
            current directory is used if present
        environ: Environment mapping (defaults to os.environ)
        **overrides: Explicit values; None entries are ignored

    Returns:
        Validated ServerConfig

    Raises:
        ConfigError: If the file is missing, unreadable or values are invalid
    """
    raw: dict[str, Any] = {}

    if config_file is not None:
        if not config_file.exists():
            raise ConfigError(f"Config file not found: {config_file}")
        raw = _read_yaml(config_file)
    else:
        default_file = Path.cwd() / DEFAULT_CONFIG_FILE
        if default_file.exists():
            raw = _read_yaml(default_file)

    merged = merge_config(raw, read_env(environ))
    merged = merge_config(merged, overrides)

    try:
        return ServerConfig(**merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Cannot parse {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data
