"""
Acquisition loop: grab frame -> convert -> submit to the engine -> show.
FrameProcessorRunner moves the loop onto a QThread when a preview window owns the main thread.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from PySide6.QtCore import QObject, QThread, Signal

from core.console import Console
from core.converter import FrameConverter
from core.exceptions import FrameFormatError
from core.utils import FPSCounter

if TYPE_CHECKING:
    import numpy as np

    from core.capture import FrameSource
    from engine.base import CaptureEngineBase

logger = logging.getLogger(__name__)


class FrameDisplay(Protocol):
    """Where frames are shown. is_open() turns False once the user closes the window."""

    def is_open(self) -> bool: ...

    def show(self, frame_bgr: np.ndarray, fps: float) -> None: ...

    def close(self) -> None: ...


class StopReason(str, Enum):
    END_OF_STREAM = "end_of_stream"
    DISPLAY_CLOSED = "display_closed"
    EMPTY_FRAME = "empty_frame"
    BAD_FRAME = "bad_frame"
    INTERRUPTED = "interrupted"
    ERROR = "error"


@dataclass
class AcquisitionStats:
    frames_submitted: int = 0
    stop_reason: StopReason | None = None
    average_interval_ms: float = 0.0
    error: str = ""


class AcquisitionLoop:
    """Runs once. Every exit path releases display, converter, source and stops the engine."""

    def __init__(
        self,
        source: FrameSource,
        engine: CaptureEngineBase,
        console: Console,
        converter: FrameConverter | None = None,
        display: FrameDisplay | None = None,
    ) -> None:
        self._source = source
        self._engine = engine
        self._console = console
        self._converter = converter if converter is not None else FrameConverter()
        self._display = display
        self._fps_counter = FPSCounter()

    def run(self) -> AcquisitionStats:
        stats = AcquisitionStats()
        self._fps_counter.reset()
        try:
            stats.stop_reason = self._loop(stats)
        except KeyboardInterrupt:
            logger.info("Acquisition interrupted by user")
            stats.stop_reason = StopReason.INTERRUPTED
        except Exception as e:  # noqa: BLE001
            logger.exception("Acquisition loop failed")
            self._console.print(f"Error: {e}")
            stats.stop_reason = StopReason.ERROR
            stats.error = str(e)
        finally:
            self._cleanup()
        stats.average_interval_ms = self._fps_counter.rolling_average_ms
        logger.info(
            "Acquisition stopped (%s) after %d frames, avg interval %.1f ms",
            stats.stop_reason.value,
            stats.frames_submitted,
            stats.average_interval_ms,
        )
        return stats

    def _loop(self, stats: AcquisitionStats) -> StopReason:
        while True:
            if self._display is not None and not self._display.is_open():
                return StopReason.DISPLAY_CLOSED
            ok, image = self._source.read()
            if not ok or image is None:
                return StopReason.END_OF_STREAM
            if image.size == 0:
                self._console.print("Error: Frame is empty.")
                return StopReason.EMPTY_FRAME
            try:
                frame = self._converter.convert(image, stats.frames_submitted + 1)
            except FrameFormatError as e:
                self._console.print(f"Error: {e}")
                return StopReason.BAD_FRAME
            self._engine.submit(frame)
            stats.frames_submitted += 1
            fps, _ = self._fps_counter.tick()
            if self._display is not None:
                self._display.show(image, fps)

    def _cleanup(self) -> None:
        steps = (
            ("display", self._display.close if self._display is not None else None),
            ("converter", self._converter.close),
            ("source", self._source.release),
            ("engine", self._engine.stop),
        )
        for name, release in steps:
            if release is None:
                continue
            try:
                release()
            except Exception:  # noqa: BLE001
                logger.exception("Failed to release %s", name)


class FrameProcessorRunner(QObject):
    """Worker that runs an AcquisitionLoop on its own QThread."""

    # Emit AcquisitionStats when the loop has exited and cleaned up
    stopped = Signal(object)

    def __init__(self, loop: AcquisitionLoop, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._loop = loop
        self._thread: QThread | None = None
        self.stats: AcquisitionStats | None = None

    def start(self) -> None:
        """Start the loop in a background thread."""
        if self._thread is not None:
            return
        self._thread = QThread()
        self.moveToThread(self._thread)
        self._thread.started.connect(self._run)
        self._thread.start()

    def _run(self) -> None:
        self.stats = self._loop.run()
        self.stopped.emit(self.stats)

    def finish_thread(self) -> None:
        """Call after the stopped signal: quit and wait for the thread."""
        if self._thread is not None and self._thread.isRunning():
            self._thread.quit()
            self._thread.wait(2000)
        self._thread = None
