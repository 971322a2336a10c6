"""
whisperserve.exceptions - Custom exception classes.

All whisperserve-specific exceptions inherit from WhisperServeError. Each
class records whether it is a caller input defect (client_fault) so the HTTP
layer can map it to a 4xx or 5xx response without inspecting messages.
"""


class WhisperServeError(Exception):
    """Base exception for all whisperserve errors."""

    client_fault = False
    status_code = 500


class ConfigError(WhisperServeError):
    """Configuration loading or validation error."""

    pass


class DependencyError(WhisperServeError):
    """Required dependency missing or misconfigured."""

    def __init__(self, dependency: str, message: str, install_hint: str | None = None):
        self.dependency = dependency
        self.message = message
        self.install_hint = install_hint
        text = f"{dependency}: {message}"
        if install_hint:
            text = f"{text}. {install_hint}"
        super().__init__(text)


class ModelNotFound(WhisperServeError):
    """Model file does not exist at the configured path."""

    status_code = 404


# Decode stage


class InputError(WhisperServeError):
    """The uploaded audio is unusable as given."""

    client_fault = True
    status_code = 400


class EmptyUpload(InputError):
    """Request body carried no audio bytes."""

    pass


class InputTooSmall(InputError):
    """Audio buffer is empty or holds nothing past its header."""

    pass


class NoAudioData(InputError):
    """Audio buffer produced no complete 16-bit samples."""

    pass


# Transcoding stage


class ConversionError(WhisperServeError):
    """Audio could not be normalized to 16 kHz mono PCM."""

    pass


class ConversionUnavailable(ConversionError, DependencyError):
    """ffmpeg is required for this input but is not installed."""

    def __init__(self, message: str = "ffmpeg not found in PATH"):
        DependencyError.__init__(
            self,
            "ffmpeg",
            message,
            "Send 16 kHz mono 16-bit PCM WAV directly, or install ffmpeg "
            "(brew install ffmpeg on macOS, apt install ffmpeg on Linux)",
        )


class ConversionFailed(ConversionError):
    """ffmpeg ran but rejected the input."""

    client_fault = True
    status_code = 400

    def __init__(self, message: str, stderr: str = ""):
        self.stderr = stderr
        text = f"{message}: {stderr.strip()}" if stderr.strip() else message
        super().__init__(text)


# Inference stage


class LockAcquisitionFailed(WhisperServeError):
    """Engine lock is unusable after a crash inside another request."""

    pass


class EngineFailure(WhisperServeError):
    """Inference engine failed to load or reported an inference error."""

    pass


class SegmentReadFailure(EngineFailure):
    """A segment field could not be read back from the engine."""

    pass
