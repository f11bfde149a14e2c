"""
Shared fakes: an engine that records submitted frames, a scripted frame source,
a display the "user" closes, and a console driven by scripted input.
"""

from __future__ import annotations

import io
from typing import Any, Iterable

import numpy as np
import pytest

from core.console import Console
from core.exceptions import SourceOpenError
from core.models import DecodeResult, Frame
from engine.base import CaptureEngineBase


class FakeEngine(CaptureEngineBase):
    engine_id = "fake"
    display_name = "Fake engine"

    def __init__(self, init_error: Exception | None = None, start_error: Exception | None = None) -> None:
        super().__init__()
        self.init_error = init_error
        self.start_error = start_error
        self.settings: dict[str, Any] | None = None
        self.license_key: str | None = None
        self.submitted: list[Frame] = []
        self.started = False
        self.stop_calls = 0

    @staticmethod
    def default_settings() -> dict[str, Any]:
        return {}

    def init_license(self, license_key: str) -> None:
        self.license_key = license_key

    def init(self, settings: dict[str, Any]) -> None:
        if self.init_error is not None:
            raise self.init_error
        self.settings = settings

    def start(self) -> None:
        if self.start_error is not None:
            raise self.start_error
        self.started = True

    def submit(self, frame: Frame) -> None:
        self.submitted.append(frame)

    def stop(self) -> None:
        self.stop_calls += 1
        self.started = False

    def deliver(self, result: DecodeResult) -> None:
        self._dispatch(result)


class FakeSource:
    """Yields the given frames, then reports end of stream."""

    description = "fake source"

    def __init__(self, frames: Iterable[np.ndarray | None] = (), open_error: str | None = None) -> None:
        self._frames = list(frames)
        self._open_error = open_error
        self.opened = False
        self.read_calls = 0
        self.release_count = 0

    def open(self) -> None:
        if self._open_error is not None:
            raise SourceOpenError(self._open_error)
        self.opened = True

    def read(self) -> tuple[bool, np.ndarray | None]:
        self.read_calls += 1
        if not self._frames:
            return False, None
        frame = self._frames.pop(0)
        return frame is not None, frame

    def release(self) -> None:
        self.release_count += 1


class FakeDisplay:
    """Closed by the user after `close_after` frames have been shown."""

    def __init__(self, close_after: int | None = None) -> None:
        self._close_after = close_after
        self.shown = 0
        self.user_closed = False
        self.close_count = 0

    def is_open(self) -> bool:
        return not self.user_closed and self.close_count == 0

    def show(self, frame_bgr: np.ndarray, fps: float) -> None:
        self.shown += 1
        if self._close_after is not None and self.shown >= self._close_after:
            self.user_closed = True

    def close(self) -> None:
        self.close_count += 1


class ScriptedInput:
    """input() replacement; raises EOFError once the script runs out."""

    def __init__(self, lines: Iterable[str]) -> None:
        self._lines = list(lines)

    def __call__(self) -> str:
        if not self._lines:
            raise EOFError
        return self._lines.pop(0)


def make_frames(count: int, height: int = 4, width: int = 6) -> list[np.ndarray]:
    return [np.full((height, width, 3), i, dtype=np.uint8) for i in range(count)]


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def console(output: io.StringIO) -> Console:
    return Console(stream=output, input_fn=ScriptedInput([]))


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def scripted_console(output: io.StringIO):
    """Factory: scripted_console(["1"]) -> Console reading those lines."""
    def build(lines: Iterable[str]) -> Console:
        return Console(stream=output, input_fn=ScriptedInput(lines))
    return build
