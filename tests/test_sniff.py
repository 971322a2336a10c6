"""Tests for whisperserve.audio.sniff module."""

from __future__ import annotations

from pathlib import Path

import pytest

from whisperserve.audio.sniff import FormatVerdict, classify, classify_file

WAV_PREFIX = b"RIFF\x24\x00\x00\x00WAVE"


class TestClassify:
    @pytest.mark.parametrize("length", range(12))
    def test_short_buffers_are_other(self, length: int) -> None:
        assert classify(WAV_PREFIX[:length]) is FormatVerdict.OTHER_CONTAINER

    def test_riff_wave_is_canonical(self) -> None:
        assert classify(WAV_PREFIX) is FormatVerdict.CANONICAL_PCM

    def test_size_field_is_ignored(self) -> None:
        assert classify(b"RIFF\xff\xff\xff\xffWAVEfmt ") is FormatVerdict.CANONICAL_PCM

    @pytest.mark.parametrize("index", [0, 1, 2, 3, 8, 9, 10, 11])
    def test_single_byte_mutation_in_tags_flips_verdict(self, index: int) -> None:
        mutated = bytearray(WAV_PREFIX)
        mutated[index] ^= 0x20
        assert classify(bytes(mutated)) is FormatVerdict.OTHER_CONTAINER

    def test_other_containers(self) -> None:
        assert classify(b"ID3\x04\x00\x00\x00\x00\x00\x00\x00\x00") is FormatVerdict.OTHER_CONTAINER
        assert classify(b"OggS\x00\x02\x00\x00\x00\x00\x00\x00") is FormatVerdict.OTHER_CONTAINER
        assert classify(b"fLaC\x00\x00\x00\x22\x10\x00\x10\x00") is FormatVerdict.OTHER_CONTAINER

    def test_garbage_never_raises(self) -> None:
        assert classify(bytes(range(256))) is FormatVerdict.OTHER_CONTAINER


class TestClassifyFile:
    def test_reads_header_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "audio.bin"
        path.write_bytes(WAV_PREFIX + b"\x00" * 100)
        assert classify_file(path) is FormatVerdict.CANONICAL_PCM

    def test_extension_is_not_trusted(self, tmp_path: Path) -> None:
        path = tmp_path / "audio.wav"
        path.write_bytes(b"ID3" + b"\x00" * 100)
        assert classify_file(path) is FormatVerdict.OTHER_CONTAINER
