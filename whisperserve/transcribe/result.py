"""
whisperserve.transcribe.result - Transcript models and segment assembly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from whisperserve.exceptions import SegmentReadFailure

if TYPE_CHECKING:
    from whisperserve.transcribe.engine import SpeechEngine


class Segment(BaseModel):
    """One engine segment.

    Times are engine centiseconds. text_start/text_end are half-open UTF-8
    byte offsets into TranscriptionResult.full_text.
    """

    id: int = Field(ge=0)
    start_time: int
    end_time: int
    text_start: int = Field(ge=0)
    text_end: int = Field(ge=0)
    text: str = ""


class TranscriptionResult(BaseModel):
    full_text: str = ""
    segments: list[Segment] = Field(default_factory=list)

    def byte_length(self) -> int:
        return len(self.full_text.encode("utf-8"))

    def segment_text(self, segment: Segment) -> str:
        """Slice full_text by a segment's byte offsets."""
        encoded = self.full_text.encode("utf-8")
        return encoded[segment.text_start : segment.text_end].decode("utf-8")


def assemble(engine: SpeechEngine) -> TranscriptionResult:
    """Read every segment from an engine that has just finished inference.

    Segment texts are concatenated exactly as returned, with no separators
    or trimming.

    Args:
        engine: Engine holding the output of its last full() call

    Returns:
        TranscriptionResult with segments in engine order

    Raises:
        SegmentReadFailure: If any segment field cannot be read; no partial
            result is returned
    """
    parts: list[str] = []
    segments: list[Segment] = []
    offset = 0

    try:
        count = engine.n_segments()
    except Exception as e:
        raise SegmentReadFailure(f"Failed to get segment count: {e}") from e

    for i in range(count):
        try:
            text = engine.segment_text(i)
            start = engine.segment_t0(i)
            end = engine.segment_t1(i)
        except SegmentReadFailure:
            raise
        except Exception as e:
            raise SegmentReadFailure(f"Failed to read segment {i}: {e}") from e

        text_start = offset
        offset += len(text.encode("utf-8"))
        parts.append(text)

        segments.append(
            Segment(
                id=i,
                start_time=start,
                end_time=end,
                text_start=text_start,
                text_end=offset,
                text=text,
            )
        )

    return TranscriptionResult(full_text="".join(parts), segments=segments)
