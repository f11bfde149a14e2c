"""
Video sources: a camera by index or a video file. Both yield BGR frames through OpenCV.
"""

from __future__ import annotations

import logging
import os
import sys
from abc import ABC, abstractmethod
from pathlib import Path

# Keep FFmpeg quiet while decoding files; must be set before cv2 opens a stream
os.environ.setdefault("OPENCV_FFMPEG_LOGLEVEL", "-8")
os.environ.setdefault("OPENCV_LOG_LEVEL", "ERROR")

import cv2
import numpy as np

from core.exceptions import SourceOpenError
from core.models import SourceChoice

logger = logging.getLogger(__name__)


class FrameSource(ABC):
    """Open, grab the next frame, release. Subclasses only decide how to open."""

    def __init__(self) -> None:
        self._cap: cv2.VideoCapture | None = None
        self._release_count = 0

    @property
    @abstractmethod
    def description(self) -> str:
        ...

    @abstractmethod
    def _create_capture(self) -> cv2.VideoCapture:
        ...

    @abstractmethod
    def _open_error(self) -> str:
        ...

    def open(self) -> None:
        """Open the underlying capture. Raises SourceOpenError on failure."""
        self.release()
        self._release_count = 0
        cap = self._create_capture()
        if not cap.isOpened():
            cap.release()
            raise SourceOpenError(self._open_error())
        self._cap = cap
        w, h = self.get_size()
        logger.info("Opened %s (%dx%d @ %.1f fps)", self.description, w, h, self.get_fps())

    def read(self) -> tuple[bool, np.ndarray | None]:
        """Read next frame. Returns (success, frame_bgr)."""
        if self._cap is None:
            return False, None
        ok, frame = self._cap.read()
        if not ok:
            logger.debug("%s: no more frames", self.description)
            return False, None
        return True, frame

    def release(self) -> None:
        """Release the capture handle. Safe to call more than once."""
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            self._release_count += 1
            logger.info("Released %s", self.description)

    @property
    def release_count(self) -> int:
        return self._release_count

    def get_fps(self) -> float:
        if self._cap is None:
            return 30.0
        fps = self._cap.get(cv2.CAP_PROP_FPS)
        return fps if fps > 0 else 30.0

    def get_size(self) -> tuple[int, int]:
        """(width, height) of the stream."""
        if self._cap is None:
            return 0, 0
        w = int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        h = int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        return w, h


class CameraSource(FrameSource):
    def __init__(self, index: int = 0) -> None:
        super().__init__()
        self._index = index

    @property
    def index(self) -> int:
        return self._index

    @property
    def description(self) -> str:
        return f"camera {self._index}"

    def _create_capture(self) -> cv2.VideoCapture:
        # On Windows, DirectShow keeps index order in line with the enumerated camera list
        if sys.platform == "win32":
            return cv2.VideoCapture(self._index, cv2.CAP_DSHOW)
        return cv2.VideoCapture(self._index)

    def _open_error(self) -> str:
        return "Cannot open camera."


class VideoFileSource(FrameSource):
    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def description(self) -> str:
        return f"video file {self._path}"

    def open(self) -> None:
        try:
            found = self._path.is_file()
        except (OSError, ValueError) as e:
            raise SourceOpenError(f"Cannot open video file: {e}") from e
        if not found:
            raise SourceOpenError(f"File not found: {self._path}")
        super().open()

    def _create_capture(self) -> cv2.VideoCapture:
        return cv2.VideoCapture(str(self._path))

    def _open_error(self) -> str:
        return f"Cannot open video file: {self._path}"


def source_for(choice: SourceChoice) -> FrameSource:
    if choice.use_video_file:
        return VideoFileSource(choice.video_path)
    return CameraSource(choice.camera_index)
