"""
Turns OpenCV images into contiguous pixel buffers tagged for the engine.
"""

from __future__ import annotations

import logging

import numpy as np

from core.exceptions import FrameFormatError
from core.models import Frame, PixelFormat

logger = logging.getLogger(__name__)

_CHANNEL_FORMATS = {
    1: PixelFormat.GRAYSCALED,
    3: PixelFormat.RGB_888,
    4: PixelFormat.ARGB_8888,
}


class FrameConverter:
    """Converts ndarray frames to Frame buffers until closed."""

    def __init__(self) -> None:
        self._closed = False
        self._close_count = 0

    def convert(self, image: np.ndarray, sequence_id: int) -> Frame:
        if self._closed:
            raise RuntimeError("FrameConverter is closed")
        if not isinstance(image, np.ndarray):
            raise FrameFormatError("Frame is not a byte buffer.")
        if image.dtype != np.uint8:
            raise FrameFormatError(f"Frame is not a byte buffer (dtype {image.dtype}).")
        if image.ndim == 2:
            channels = 1
        elif image.ndim == 3:
            channels = image.shape[2]
        else:
            raise FrameFormatError(f"Unsupported frame shape {image.shape}.")
        pixel_format = _CHANNEL_FORMATS.get(channels)
        if pixel_format is None:
            raise FrameFormatError(f"Unsupported channel count {channels}.")

        # Row padding from ROIs / strided views is dropped here
        buffer = np.ascontiguousarray(image)
        height, width = buffer.shape[:2]
        return Frame(
            data=buffer.tobytes(),
            width=width,
            height=height,
            stride=buffer.strides[0],
            pixel_format=pixel_format,
            sequence_id=sequence_id,
        )

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._close_count += 1
        logger.debug("Frame converter closed")

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def close_count(self) -> int:
        return self._close_count
