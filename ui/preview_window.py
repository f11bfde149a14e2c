"""
Preview window: live video on the left, decoded results and FPS on the right.
PreviewDisplay is the thread-safe handle the acquisition loop talks to.
"""

from __future__ import annotations

import threading

import numpy as np
from PySide6.QtCore import QObject, Qt, Signal, Slot
from PySide6.QtGui import QCloseEvent, QImage, QPixmap
from PySide6.QtWidgets import QHBoxLayout, QLabel, QTabWidget, QWidget

from core.models import DecodeResult
from ui.panels import PerformancePanel, ResultsPanel


class PreviewDisplay(QObject):
    """
    Called from the acquisition thread; forwards frames and results to the
    window through queued signals.
    """

    frame_ready = Signal(object, float)
    result_ready = Signal(object)
    close_requested = Signal()

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._closed = threading.Event()
        self._close_count = 0

    def is_open(self) -> bool:
        return not self._closed.is_set()

    def show(self, frame_bgr: np.ndarray, fps: float) -> None:
        if self.is_open():
            self.frame_ready.emit(frame_bgr, fps)

    def show_result(self, result: DecodeResult) -> None:
        self.result_ready.emit(result)

    def close(self) -> None:
        self._close_count += 1
        self._closed.set()
        self.close_requested.emit()

    def mark_closed(self) -> None:
        """The user closed the window; the loop stops on its next iteration."""
        self._closed.set()

    @property
    def close_count(self) -> int:
        return self._close_count


class PreviewWindow(QWidget):
    """Window fed by a PreviewDisplay."""

    def __init__(self, display: PreviewDisplay, title: str = "Video Barcode Reader") -> None:
        super().__init__()
        self.setWindowTitle(title)
        self._display = display

        layout = QHBoxLayout(self)
        self._video_label = QLabel()
        self._video_label.setMinimumSize(640, 480)
        self._video_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._video_label.setStyleSheet("background-color: #1e1e1e; color: #888;")
        self._video_label.setText("No video")
        layout.addWidget(self._video_label, stretch=1)

        tabs = QTabWidget()
        self._results_panel = ResultsPanel()
        tabs.addTab(self._results_panel, "Results")
        self._performance_panel = PerformancePanel()
        tabs.addTab(self._performance_panel, "Performance")
        tabs.setMinimumWidth(280)
        layout.addWidget(tabs)

        display.frame_ready.connect(self._on_frame_ready)
        display.result_ready.connect(self._results_panel.append_result)
        display.close_requested.connect(self.close)
        self.resize(1100, 600)

    @Slot(object, float)
    def _on_frame_ready(self, frame_bgr: np.ndarray, fps: float) -> None:
        self._performance_panel.update_metrics(fps)
        if frame_bgr.ndim == 2:
            h, w = frame_bgr.shape
            qimg = QImage(frame_bgr.data, w, h, frame_bgr.strides[0], QImage.Format.Format_Grayscale8)
        elif frame_bgr.shape[2] == 4:
            h, w = frame_bgr.shape[:2]
            qimg = QImage(frame_bgr.data, w, h, frame_bgr.strides[0], QImage.Format.Format_ARGB32)
        else:
            h, w = frame_bgr.shape[:2]
            qimg = QImage(frame_bgr.data, w, h, frame_bgr.strides[0], QImage.Format.Format_BGR888)
        self._video_label.setPixmap(QPixmap.fromImage(qimg).scaled(
            self._video_label.size(),
            Qt.AspectRatioMode.KeepAspectRatio,
            Qt.TransformationMode.SmoothTransformation,
        ))

    def closeEvent(self, event: QCloseEvent) -> None:
        self._display.mark_closed()
        event.accept()
