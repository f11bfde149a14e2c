"""
Result receiver: formats decode results delivered from engine threads and prints them.
"""

from __future__ import annotations

import logging
from typing import Callable

from core.console import Console
from core.models import DecodeResult, result_to_dict

logger = logging.getLogger(__name__)

ResultListener = Callable[[DecodeResult], None]


def format_result(result: DecodeResult) -> list[str]:
    """Lines printed for one engine delivery."""
    lines: list[str] = []
    if result.is_warning:
        lines.append(f"Warning: {result.error_code}, {result.error_message}")
    elif result.is_error:
        lines.append(f"Error: {result.error_message}")
    if result.sequence_id is not None:
        lines.append(f"ImageId: {result.sequence_id}")
    lines.append(f"Decoded {len(result.items)} barcodes.")
    for index, item in enumerate(result.items, start=1):
        lines.append(f"Result {index}")
        lines.append(f"Barcode Format: {item.format}")
        lines.append(f"Barcode Text: {item.text}")
    return lines


class ResultPrinter:
    """
    Callable handed to the engine. May run on any engine worker thread,
    in any order relative to frame submission.
    """

    def __init__(self, console: Console) -> None:
        self._console = console
        self._listeners: list[ResultListener] = []

    def add_listener(self, listener: ResultListener) -> None:
        self._listeners.append(listener)

    def __call__(self, result: DecodeResult) -> None:
        logger.debug("Result received: %s", result_to_dict(result))
        self._console.print(*format_result(result))
        for listener in self._listeners:
            listener(result)
