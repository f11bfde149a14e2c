# Core: capture, conversion, acquisition loop, console, results

from core.capture import CameraSource, FrameSource, VideoFileSource
from core.converter import FrameConverter
from core.models import DecodedItem, DecodeResult, Frame, SourceChoice

__all__ = [
    "CameraSource",
    "FrameSource",
    "VideoFileSource",
    "FrameConverter",
    "DecodedItem",
    "DecodeResult",
    "Frame",
    "SourceChoice",
]
