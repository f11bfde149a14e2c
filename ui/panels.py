"""
Side panels of the preview window: decoded results and acquisition rate.
"""

from __future__ import annotations

from PySide6.QtWidgets import (
    QLabel,
    QPlainTextEdit,
    QVBoxLayout,
    QWidget,
)

from core.models import DecodeResult
from core.results import format_result


class ResultsPanel(QWidget):
    """Appends every decode result as it arrives, newest at the bottom."""

    def __init__(self, parent: QWidget | None = None, max_blocks: int = 2000) -> None:
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self._text = QPlainTextEdit(self)
        self._text.setReadOnly(True)
        self._text.setMaximumBlockCount(max_blocks)
        self._text.setPlaceholderText("Decoded barcodes will appear here.")
        layout.addWidget(self._text, stretch=1)

    def append_result(self, result: DecodeResult) -> None:
        if not result.items and not result.error_code:
            return
        self._text.appendPlainText("\n".join(format_result(result)))
        # Auto-scroll to bottom
        scrollbar = self._text.verticalScrollBar()
        scrollbar.setValue(scrollbar.maximum())


class PerformancePanel(QWidget):
    """Shows acquisition FPS and the number of frames pushed to the engine."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        layout = QVBoxLayout(self)
        self._fps_label = QLabel("FPS: —")
        self._frames_label = QLabel("Frames: 0")
        for w in (self._fps_label, self._frames_label):
            layout.addWidget(w)
        layout.addStretch()
        self._frames = 0

    def update_metrics(self, fps: float) -> None:
        self._frames += 1
        self._fps_label.setText(f"FPS: {fps:.1f}")
        self._frames_label.setText(f"Frames: {self._frames}")
