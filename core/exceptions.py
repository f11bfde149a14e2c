"""
Exceptions raised by the capture session. Everything derives from VideoDecodingError.
"""

from __future__ import annotations


class VideoDecodingError(Exception):
    """Base class for errors reported to the user before the session ends."""


class ConfigurationError(VideoDecodingError):
    """A setting from the environment or the command line could not be parsed."""


class LicenseInitError(VideoDecodingError):
    """The engine license could not be activated. Fatal before any capture starts."""

    def __init__(self, error_code: int, error_message: str) -> None:
        self.error_code = error_code
        self.error_message = error_message
        super().__init__(
            f"License initialization failed: ErrorCode: {error_code}, ErrorString: {error_message}"
        )


class EngineError(VideoDecodingError):
    """An engine call returned a non-OK error code."""

    def __init__(self, error_code: int, error_message: str) -> None:
        self.error_code = error_code
        self.error_message = error_message
        super().__init__(error_message)


class EngineConfigurationError(EngineError):
    """Input adapter, result filter or receiver setup failed."""


class CaptureStartError(EngineError):
    """The engine refused to start capturing with the requested template."""


class SourceOpenError(VideoDecodingError):
    """Camera or video file could not be opened."""


class FrameFormatError(VideoDecodingError):
    """A grabbed frame does not hold a plain 8-bit pixel buffer."""
