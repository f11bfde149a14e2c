"""
Transient data passed between the video source, the engine and the result receiver.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Error code the engine uses for success
EC_OK = 0


class PixelFormat(str, Enum):
    """Pixel layouts the converter can produce."""

    GRAYSCALED = "GRAYSCALED"
    RGB_888 = "RGB_888"
    ARGB_8888 = "ARGB_8888"


@dataclass(frozen=True)
class Frame:
    """One raw pixel buffer ready to be pushed into the engine."""

    data: bytes
    width: int
    height: int
    stride: int
    pixel_format: PixelFormat
    sequence_id: int


@dataclass(frozen=True)
class DecodedItem:
    format: str
    text: str


@dataclass
class DecodeResult:
    """Results the engine delivered for one earlier frame."""

    sequence_id: int | None = None
    items: list[DecodedItem] = field(default_factory=list)
    error_code: int = EC_OK
    error_message: str = ""
    # set by the engine when error_code is a non-fatal warning (e.g. unsupported JSON key)
    is_warning: bool = False

    @property
    def is_error(self) -> bool:
        return self.error_code != EC_OK and not self.is_warning


@dataclass(frozen=True)
class SourceChoice:
    """What the user picked at the console: camera or a video file."""

    use_video_file: bool
    video_path: str = ""
    camera_index: int = 0

    @classmethod
    def camera(cls, index: int = 0) -> SourceChoice:
        return cls(use_video_file=False, camera_index=index)

    @classmethod
    def video_file(cls, path: str) -> SourceChoice:
        return cls(use_video_file=True, video_path=path)


def result_to_dict(result: DecodeResult) -> dict[str, Any]:
    """Build a JSON-friendly dict for display and logging."""
    return {
        "image_id": result.sequence_id,
        "error_code": result.error_code,
        "error_message": result.error_message,
        "items": [{"format": item.format, "text": item.text} for item in result.items],
    }
