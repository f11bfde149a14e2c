"""
One capture session: configure and start the engine, open the chosen source, run the
acquisition loop (with or without a preview window), stop the engine.
"""

from __future__ import annotations

import logging
from typing import Any

from core.capture import FrameSource, source_for
from core.console import Console
from core.exceptions import EngineError, SourceOpenError
from core.models import SourceChoice
from core.results import ResultPrinter
from core.runner import AcquisitionLoop, AcquisitionStats, FrameProcessorRunner
from engine.base import CaptureEngineBase

logger = logging.getLogger(__name__)


def decode_video(
    choice: SourceChoice,
    engine: CaptureEngineBase,
    console: Console,
    settings: dict[str, Any],
    source: FrameSource | None = None,
) -> AcquisitionStats | None:
    """
    Returns the loop statistics, or None when the session could not start
    (engine configuration, engine start or source open failed).
    """
    logger.info("Using engine %s (%s)", engine.display_name, engine.engine_id)
    printer = ResultPrinter(console)
    engine.add_result_handler(printer)
    try:
        engine.init(settings)
        engine.start()
    except EngineError as e:
        logger.error("Engine setup failed: %s (code %s)", e.error_message, e.error_code)
        console.print(f"Error: {e.error_message}")
        return None

    if source is None:
        source = source_for(choice)
    try:
        source.open()
    except SourceOpenError as e:
        console.print(f"Error: {e}")
        engine.stop()
        return None
    except BaseException:
        engine.stop()
        raise

    if settings.get("headless", True):
        logger.info("No display available, running without preview")
        return AcquisitionLoop(source, engine, console).run()
    return _run_with_preview(source, engine, console, printer, settings)


def _run_with_preview(
    source: FrameSource,
    engine: CaptureEngineBase,
    console: Console,
    printer: ResultPrinter,
    settings: dict[str, Any],
) -> AcquisitionStats | None:
    from PySide6.QtWidgets import QApplication

    from ui.preview_window import PreviewDisplay, PreviewWindow

    app = QApplication.instance() or QApplication([])
    # The runner decides when to quit, after cleanup has finished
    app.setQuitOnLastWindowClosed(False)

    display = PreviewDisplay()
    printer.add_listener(display.show_result)
    window = PreviewWindow(display, settings.get("window_name", "Video Barcode Reader"))
    runner = FrameProcessorRunner(AcquisitionLoop(source, engine, console, display=display))
    runner.stopped.connect(app.quit)

    window.show()
    window.raise_()
    window.activateWindow()
    runner.start()
    app.exec()
    runner.finish_thread()
    return runner.stats
