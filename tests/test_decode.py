"""Tests for whisperserve.audio.decode module."""

from __future__ import annotations

import numpy as np
import pytest

from whisperserve.audio.decode import WAV_HEADER_SIZE, decode, duration_seconds
from whisperserve.exceptions import InputTooSmall, NoAudioData


class TestDecode:
    def test_round_trip_known_samples(self, make_wav) -> None:
        values = [0, 1, -1, 1000, -1000, 16384, -16384, 32767, -32767]
        samples = decode(make_wav(values))

        assert samples.dtype == np.float32
        np.testing.assert_allclose(samples, np.array(values) / 32768.0, rtol=0, atol=1e-7)

    def test_values_stay_in_range(self, make_wav) -> None:
        samples = decode(make_wav([-32768, 32767]))
        assert samples[0] == -1.0
        assert samples[1] < 1.0
        assert samples.min() >= -1.0
        assert samples.max() <= 1.0

    def test_header_is_skipped(self, make_wav) -> None:
        samples = decode(make_wav([5, 6, 7]))
        assert len(samples) == 3

    def test_headerless_pcm(self) -> None:
        raw = np.array([100, -200, 300], dtype="<i2").tobytes()
        samples = decode(raw)
        np.testing.assert_allclose(samples, np.array([100, -200, 300]) / 32768.0)

    def test_trailing_odd_byte_dropped(self, make_wav) -> None:
        samples = decode(make_wav([1, 2]) + b"\x7f")
        assert len(samples) == 2

    def test_empty_buffer_raises(self) -> None:
        with pytest.raises(InputTooSmall):
            decode(b"")

    def test_header_only_raises(self, make_wav) -> None:
        wav = make_wav([])
        assert len(wav) == WAV_HEADER_SIZE
        with pytest.raises(InputTooSmall):
            decode(wav)

    def test_truncated_header_raises(self, make_wav) -> None:
        with pytest.raises(InputTooSmall):
            decode(make_wav([])[:20])

    def test_single_data_byte_raises_no_audio(self, make_wav) -> None:
        with pytest.raises(NoAudioData):
            decode(make_wav([]) + b"\x01")

    def test_single_raw_byte_raises_no_audio(self) -> None:
        with pytest.raises(NoAudioData):
            decode(b"\x01")

    def test_silence_decodes_to_zeros(self, silence_wav: bytes) -> None:
        samples = decode(silence_wav)
        assert len(samples) == 32000
        assert np.all(np.abs(samples) < 1e-6)


class TestDurationSeconds:
    def test_two_seconds(self) -> None:
        assert duration_seconds(np.zeros(32000, dtype=np.float32)) == 2.0

    def test_custom_rate(self) -> None:
        assert duration_seconds(np.zeros(8000, dtype=np.float32), sample_rate=8000) == 1.0
