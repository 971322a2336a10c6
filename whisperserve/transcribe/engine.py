"""
whisperserve.transcribe.engine - whisper.cpp engine and its inference gate.

The engine is loaded once per process and is not safe for concurrent use:
every inference and the segment readout that follows it run inside a
single lock owned by InferenceGate.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, TypeVar

import numpy as np

from whisperserve.exceptions import (
    DependencyError,
    EngineFailure,
    LockAcquisitionFailed,
    ModelNotFound,
)
from whisperserve.transcribe.result import TranscriptionResult, assemble

logger = logging.getLogger(__name__)

T = TypeVar("T")

AUTO_LANGUAGE = "auto"


@dataclass(frozen=True)
class InferenceParams:
    """Per-call decoding parameters.

    Always greedy with a single candidate, and with all of whisper.cpp's
    console printing turned off.
    """

    language: str | None = None
    n_threads: int = 4
    strategy: str = "greedy"
    best_of: int = 1
    print_realtime: bool = False
    print_progress: bool = False
    print_timestamps: bool = False
    print_special: bool = False

    @property
    def engine_language(self) -> str:
        return self.language or AUTO_LANGUAGE


class SpeechEngine(Protocol):
    """Minimal whisper.cpp-shaped engine interface.

    full() runs inference and keeps the segments in engine state until the
    next call; the other methods read that state. Timestamps are centiseconds.
    """

    def full(self, samples: np.ndarray, params: InferenceParams) -> None: ...

    def n_segments(self) -> int: ...

    def segment_text(self, index: int) -> str: ...

    def segment_t0(self, index: int) -> int: ...

    def segment_t1(self, index: int) -> int: ...


class WhisperCppEngine:
    """SpeechEngine backed by pywhispercpp's whisper.cpp bindings."""

    def __init__(self, model_path: Path, n_threads: int = 4) -> None:
        try:
            from pywhispercpp import _pywhispercpp as pw
        except ImportError as e:
            raise DependencyError(
                "pywhispercpp",
                "whisper.cpp bindings not installed",
                "Install with: pip install pywhispercpp",
            ) from e

        self._pw = pw
        self.model_path = model_path
        self.n_threads = n_threads
        self._ctx = pw.whisper_init_from_file(str(model_path))
        if self._ctx is None:
            raise EngineFailure(f"Failed to initialize model: {model_path}")

    def _build_params(self, params: InferenceParams) -> Any:
        pw = self._pw
        wparams = pw.whisper_full_default_params(
            pw.whisper_sampling_strategy.WHISPER_SAMPLING_GREEDY
        )
        wparams.n_threads = params.n_threads
        wparams.greedy = {"best_of": params.best_of}
        wparams.language = params.engine_language
        wparams.print_realtime = params.print_realtime
        wparams.print_progress = params.print_progress
        wparams.print_timestamps = params.print_timestamps
        wparams.print_special = params.print_special
        return wparams

    def full(self, samples: np.ndarray, params: InferenceParams) -> None:
        samples = np.ascontiguousarray(samples, dtype=np.float32)
        try:
            wparams = self._build_params(params)
        except (AttributeError, TypeError) as e:
            raise EngineFailure(f"Failed to set inference parameters: {e}") from e
        ret = self._pw.whisper_full(self._ctx, wparams, samples, samples.size)
        if ret != 0:
            raise EngineFailure(f"Transcription failed: whisper_full returned {ret}")

    def n_segments(self) -> int:
        return int(self._pw.whisper_full_n_segments(self._ctx))

    def segment_text(self, index: int) -> str:
        raw = self._pw.whisper_full_get_segment_text(self._ctx, index)
        if isinstance(raw, bytes):
            return raw.decode("utf-8")
        return raw

    def segment_t0(self, index: int) -> int:
        return int(self._pw.whisper_full_get_segment_t0(self._ctx, index))

    def segment_t1(self, index: int) -> int:
        return int(self._pw.whisper_full_get_segment_t1(self._ctx, index))

    def close(self) -> None:
        if self._ctx is not None:
            self._pw.whisper_free(self._ctx)
            self._ctx = None


def load_engine(model_path: Path, n_threads: int = 4) -> WhisperCppEngine:
    """Load the whisper.cpp model. Called once at process start.

    Raises:
        ModelNotFound: If model_path is not an existing file
        DependencyError: If pywhispercpp is not installed
        EngineFailure: If whisper.cpp cannot load the file
    """
    if not model_path.is_file():
        raise ModelNotFound(f"Model file not found: {model_path}")

    engine = WhisperCppEngine(model_path, n_threads=n_threads)
    logger.info(f"Whisper model loaded from {model_path}")
    return engine


class InferenceGate:
    """Exclusive owner of the shared speech engine.

    At most one run() executes inside the engine at a time; callers queue on
    a threading.Lock. If anything other than an EngineFailure escapes the
    critical section the engine state is no longer trusted: the gate is
    poisoned and every later run() fails with LockAcquisitionFailed.
    """

    def __init__(self, engine: SpeechEngine, n_threads: int = 4) -> None:
        self._engine = engine
        self.n_threads = n_threads
        self._lock = threading.Lock()
        self._poisoned: str | None = None

    @property
    def poisoned(self) -> bool:
        return self._poisoned is not None

    def run(
        self,
        samples: np.ndarray,
        language: str | None,
        reader: Callable[[SpeechEngine], T],
    ) -> T:
        """Run inference and read the output while holding the engine lock.

        Args:
            samples: float32 mono 16kHz samples
            language: Language code, or None for auto-detection
            reader: Called with the engine after inference; its return value
                is returned

        Raises:
            LockAcquisitionFailed: If the gate was poisoned by an earlier crash
            EngineFailure: If inference or the reader fails
        """
        params = InferenceParams(language=language, n_threads=self.n_threads)

        with self._lock:
            if self._poisoned is not None:
                raise LockAcquisitionFailed(
                    f"Failed to acquire context lock: engine poisoned by an earlier failure "
                    f"({self._poisoned})"
                )
            try:
                self._engine.full(samples, params)
                return reader(self._engine)
            except EngineFailure:
                raise
            except Exception as e:
                self._poisoned = f"{type(e).__name__}: {e}"
                logger.error(f"Inference crashed, engine lock poisoned: {self._poisoned}")
                raise EngineFailure(f"Transcription failed: {e}") from e

    def transcribe(self, samples: np.ndarray, language: str | None = None) -> TranscriptionResult:
        """Run inference and assemble a TranscriptionResult."""
        return self.run(samples, language, assemble)
