"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

import struct
import threading
import time

import numpy as np
import pytest

from whisperserve.transcribe.engine import InferenceGate, InferenceParams
from whisperserve.transcribe.pipeline import TranscriptionPipeline


def build_wav(samples: list[int] | np.ndarray, sample_rate: int = 16000) -> bytes:
    """Build a 44-byte-header mono 16-bit PCM WAV."""
    payload = np.asarray(samples, dtype="<i2").tobytes()
    header = b"RIFF" + struct.pack("<I", 36 + len(payload)) + b"WAVE"
    header += b"fmt " + struct.pack("<IHHIIHH", 16, 1, 1, sample_rate, sample_rate * 2, 2, 16)
    header += b"data" + struct.pack("<I", len(payload))
    return header + payload


class StubEngine:
    """SpeechEngine returning fixed (text, t0, t1) segments.

    full_errors are raised by successive full() calls, one per call, before
    the call is recorded. read_errors maps (method name, index) to an
    exception raised by that readout; an index of None matches any index.
    """

    def __init__(
        self,
        segments: list[tuple[str, int, int]] | None = None,
        full_errors: list[BaseException] | None = None,
        read_errors: dict[tuple[str, int | None], BaseException] | None = None,
    ) -> None:
        self.segments = segments or []
        self.full_errors = list(full_errors or [])
        self.read_errors = read_errors or {}
        self.calls: list[tuple[np.ndarray, InferenceParams]] = []
        self.closed = False

    def _check(self, method: str, index: int | None = None) -> None:
        error = self.read_errors.get((method, index)) or self.read_errors.get((method, None))
        if error is not None:
            raise error

    def full(self, samples: np.ndarray, params: InferenceParams) -> None:
        if self.full_errors:
            raise self.full_errors.pop(0)
        self.calls.append((samples, params))

    def n_segments(self) -> int:
        self._check("n_segments")
        return len(self.segments)

    def segment_text(self, index: int) -> str:
        self._check("segment_text", index)
        return self.segments[index][0]

    def segment_t0(self, index: int) -> int:
        self._check("segment_t0", index)
        return self.segments[index][1]

    def segment_t1(self, index: int) -> int:
        self._check("segment_t1", index)
        return self.segments[index][2]

    def close(self) -> None:
        self.closed = True


class OverlapRecordingEngine(StubEngine):
    """Stub that records whether two full() calls ever ran at once."""

    def __init__(self, delay: float = 0.01) -> None:
        super().__init__([("hi", 0, 10)])
        self.delay = delay
        self.active = 0
        self.max_active = 0
        self.total = 0
        self._counter_lock = threading.Lock()

    def full(self, samples: np.ndarray, params: InferenceParams) -> None:
        with self._counter_lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        time.sleep(self.delay)
        with self._counter_lock:
            self.active -= 1
            self.total += 1


@pytest.fixture
def make_wav():
    """Factory for canonical WAV bytes from int16 samples."""
    return build_wav


@pytest.fixture
def make_engine():
    """Factory for stub engines; see StubEngine for the fault options."""
    return StubEngine


@pytest.fixture
def overlap_engine() -> OverlapRecordingEngine:
    return OverlapRecordingEngine(delay=0.005)


@pytest.fixture
def silence_wav() -> bytes:
    """Two seconds of 16kHz mono silence."""
    return build_wav(np.zeros(32000, dtype=np.int16))


@pytest.fixture
def hello_engine() -> StubEngine:
    return StubEngine([("hello", 0, 100)])


@pytest.fixture
def hello_pipeline(hello_engine: StubEngine) -> TranscriptionPipeline:
    return TranscriptionPipeline(InferenceGate(hello_engine))
