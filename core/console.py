"""
Console I/O: serialised printing (engine threads print too) and the mode/path prompts.
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Callable, TextIO

from core.models import SourceChoice

START_BANNER = "-------------------start------------------------"
OVER_BANNER = "-------------------over------------------------"

MODE_MENU = (
    ">> Choose a Mode Number:",
    "1. Decode video from camera.",
    "2. Decode video from file.",
    ">> 1 or 2:",
)
PATH_PROMPT = ">> Input your video full path:"


class Console:
    """Writes whole blocks of lines under one lock so callback output never interleaves."""

    def __init__(
        self,
        stream: TextIO | None = None,
        input_fn: Callable[[], str] | None = None,
    ) -> None:
        self._stream = stream
        self._input_fn = input_fn if input_fn is not None else input
        self._lock = threading.Lock()

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def print(self, *lines: str) -> None:
        with self._lock:
            for line in lines:
                self.stream.write(line + "\n")
            self.stream.flush()

    def write(self, text: str) -> None:
        """Write without a trailing newline (for inline prompts)."""
        with self._lock:
            self.stream.write(text)
            self.stream.flush()

    def read_line(self) -> str:
        """Read one line. Raises EOFError / KeyboardInterrupt like input()."""
        return self._input_fn()


def strip_quotes(path: str) -> str:
    """Drop one leading and one trailing double quote (paths dragged into a terminal)."""
    path = path.strip()
    if path.startswith('"'):
        path = path[1:]
    if path.endswith('"'):
        path = path[:-1]
    return path


def path_exists(path: str) -> bool:
    """os.path.exists that also says False for names the OS rejects (too long, NUL byte)."""
    try:
        return os.path.exists(path)
    except (OSError, ValueError):
        return False


def _ask_video_path(console: Console) -> str:
    while True:
        console.print(PATH_PROMPT)
        raw = console.read_line()
        if not raw.strip():
            continue
        path = strip_quotes(raw)
        if path_exists(path):
            return path
        console.print("Error: File not found")


def prompt_source(console: Console, camera_index: int = 0) -> SourceChoice | None:
    """
    Ask for camera or file mode until the answer is usable.
    A non-numeric answer is taken as a video path directly.
    Returns None when input ends (EOF or Ctrl-C).
    """
    try:
        while True:
            console.print(*MODE_MENU)
            answer = console.read_line().strip()
            if not answer:
                continue
            try:
                mode = int(answer)
            except ValueError:
                path = strip_quotes(answer)
                if path and path_exists(path):
                    return SourceChoice.video_file(path)
                console.print("Error: File not found")
            else:
                if mode == 1:
                    return SourceChoice.camera(camera_index)
                if mode == 2:
                    return SourceChoice.video_file(_ask_video_path(console))
            console.print("Error: Wrong input.")
    except (EOFError, KeyboardInterrupt):
        console.print("")
        return None


def wait_for_enter(console: Console) -> None:
    console.write("Press Enter to quit...")
    try:
        console.read_line()
    except (EOFError, KeyboardInterrupt):
        console.print("")
