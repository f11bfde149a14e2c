"""
Engine loader: resolve an engine implementation by id. Each engine module defines
an 'Engine' class deriving from CaptureEngineBase.
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from engine.base import CaptureEngineBase

# Built-in engine module names under engine/
_BUILTIN_ENGINES = ("dynamsoft",)

DEFAULT_ENGINE = "dynamsoft"


def available_engines() -> tuple[str, ...]:
    return _BUILTIN_ENGINES


def load_engine(engine_id: str = DEFAULT_ENGINE) -> CaptureEngineBase:
    """Import engine/<engine_id>.py and instantiate its Engine class."""
    if engine_id not in _BUILTIN_ENGINES:
        raise ValueError(f"Unknown engine: {engine_id}. Known: {list(_BUILTIN_ENGINES)}")
    module = importlib.import_module(f"engine.{engine_id}")
    cls = getattr(module, "Engine")
    return cls()
