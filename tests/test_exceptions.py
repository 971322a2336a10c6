"""Tests for whisperserve.exceptions module."""

from __future__ import annotations

import pytest

from whisperserve.exceptions import (
    ConversionError,
    ConversionFailed,
    ConversionUnavailable,
    DependencyError,
    EmptyUpload,
    EngineFailure,
    InputTooSmall,
    LockAcquisitionFailed,
    ModelNotFound,
    NoAudioData,
    SegmentReadFailure,
    WhisperServeError,
)


class TestFaultClassification:
    @pytest.mark.parametrize("exc_cls", [InputTooSmall, NoAudioData, EmptyUpload])
    def test_input_defects_are_client_faults(self, exc_cls) -> None:
        exc = exc_cls("bad input")
        assert exc.client_fault is True
        assert exc.status_code == 400

    def test_conversion_failed_is_client_fault(self) -> None:
        exc = ConversionFailed("FFmpeg conversion failed", "moov atom not found\n")
        assert exc.client_fault is True
        assert exc.status_code == 400
        assert str(exc) == "FFmpeg conversion failed: moov atom not found"

    @pytest.mark.parametrize(
        "exc",
        [
            ConversionUnavailable(),
            LockAcquisitionFailed("poisoned"),
            EngineFailure("boom"),
            SegmentReadFailure("bad segment"),
        ],
    )
    def test_environment_defects_are_server_faults(self, exc: WhisperServeError) -> None:
        assert exc.client_fault is False
        assert exc.status_code == 500

    def test_model_not_found_status(self) -> None:
        assert ModelNotFound("missing").status_code == 404


class TestConversionUnavailable:
    def test_is_conversion_and_dependency_error(self) -> None:
        exc = ConversionUnavailable()
        assert isinstance(exc, ConversionError)
        assert isinstance(exc, DependencyError)
        assert exc.dependency == "ffmpeg"

    def test_message_has_guidance(self) -> None:
        message = str(ConversionUnavailable())
        assert "ffmpeg not found in PATH" in message
        assert "PCM WAV directly" in message
