"""
Interface every capture engine must implement. The engine owns decoding, cross-frame
filtering and its worker threads; the driver only feeds frames and receives results.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable

from core.models import DecodeResult, Frame

logger = logging.getLogger(__name__)

ResultHandler = Callable[[DecodeResult], None]


class CaptureEngineBase(ABC):
    """Subclass and implement the abstract methods."""

    engine_id: str = ""
    display_name: str = ""

    def __init__(self) -> None:
        self._handlers: list[ResultHandler] = []

    @staticmethod
    @abstractmethod
    def default_settings() -> dict[str, Any]:
        """Return default engine settings (e.g. duplicate_forget_time_ms)."""
        ...

    @abstractmethod
    def init_license(self, license_key: str) -> None:
        """Activate the engine license. Raises LicenseInitError."""
        ...

    @abstractmethod
    def init(self, settings: dict[str, Any]) -> None:
        """
        Configure input queue, result filter and receiver.
        Raises EngineConfigurationError instead of running half-configured.
        """
        ...

    @abstractmethod
    def start(self) -> None:
        """Begin the capture session. Raises CaptureStartError."""
        ...

    @abstractmethod
    def submit(self, frame: Frame) -> None:
        """Copy one frame into the engine's input queue."""
        ...

    @abstractmethod
    def stop(self) -> None:
        """End the capture session. Must be safe to call more than once."""
        ...

    def add_result_handler(self, handler: ResultHandler) -> None:
        """Handlers are called from engine threads, in no particular order."""
        self._handlers.append(handler)

    def _dispatch(self, result: DecodeResult) -> None:
        for handler in self._handlers:
            try:
                handler(result)
            except Exception:  # noqa: BLE001
                # Never let a handler error escape into the engine's worker thread
                logger.exception("Result handler failed")
