"""
whisperserve - HTTP transcription service backed by whisper.cpp.

Accepts an arbitrary audio upload and returns a transcript with per-segment
timing through a five-stage pipeline: format sniffing → ffmpeg transcoding →
PCM decoding → serialized inference → result assembly.
"""

__version__ = "0.1.0"
