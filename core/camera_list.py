"""
List attached cameras for --list-cameras. Device names come from DirectShow (pygrabber)
on Windows; elsewhere indices are probed with OpenCV.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass

import cv2

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CameraInfo:
    index: int
    name: str

    def __str__(self) -> str:
        return f"{self.index}: {self.name}"


def _probe_opencv(max_cameras: int) -> list[CameraInfo]:
    found: list[CameraInfo] = []
    for i in range(max_cameras):
        cap = cv2.VideoCapture(i)
        try:
            if cap.isOpened():
                found.append(CameraInfo(i, f"Camera {i}"))
        finally:
            cap.release()
    return found


def list_cameras(max_cameras: int = 8) -> list[CameraInfo]:
    """Cameras usable with --camera-index, in the same order CameraSource opens them."""
    if sys.platform == "win32":
        try:
            from pygrabber.dshow_graph import FilterGraph
        except ImportError:
            logger.debug("pygrabber not installed, probing cameras with OpenCV")
        else:
            devices = FilterGraph().get_input_devices()
            if devices:
                return [CameraInfo(i, name) for i, name in enumerate(devices)]
    return _probe_opencv(max_cameras)
