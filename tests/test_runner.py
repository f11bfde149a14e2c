"""
Acquisition loop: sequence ids, termination paths and cleanup.
"""

from __future__ import annotations

import numpy as np
import pytest

from core.converter import FrameConverter
from core.runner import AcquisitionLoop, StopReason
from tests.conftest import FakeDisplay, FakeSource, make_frames


def _loop(source, engine, console, display=None, converter=None) -> AcquisitionLoop:
    return AcquisitionLoop(source, engine, console, converter=converter, display=display)


class TestSequenceIds:
    def test_ids_start_at_one_without_gaps(self, engine, console):
        stats = _loop(FakeSource(make_frames(25)), engine, console).run()
        assert [f.sequence_id for f in engine.submitted] == list(range(1, 26))
        assert stats.frames_submitted == 25

    def test_frames_carry_dimensions(self, engine, console):
        _loop(FakeSource(make_frames(1, height=4, width=6)), engine, console).run()
        frame = engine.submitted[0]
        assert (frame.width, frame.height, frame.stride) == (6, 4, 18)
        assert len(frame.data) == 4 * 18


class TestTermination:
    def test_end_of_stream(self, engine, console):
        source = FakeSource(make_frames(3))
        stats = _loop(source, engine, console).run()
        assert stats.stop_reason is StopReason.END_OF_STREAM
        assert source.read_calls == 4

    def test_read_failure_stops_without_raising(self, engine, console):
        source = FakeSource([*make_frames(2), None, *make_frames(2)])
        stats = _loop(source, engine, console).run()
        assert stats.stop_reason is StopReason.END_OF_STREAM
        assert stats.frames_submitted == 2

    def test_empty_frame(self, engine, console, output):
        source = FakeSource([*make_frames(1), np.empty((0, 0, 3), dtype=np.uint8)])
        stats = _loop(source, engine, console).run()
        assert stats.stop_reason is StopReason.EMPTY_FRAME
        assert "Error: Frame is empty." in output.getvalue()
        assert stats.frames_submitted == 1

    def test_malformed_buffer(self, engine, console, output):
        source = FakeSource([np.zeros((4, 4, 3), dtype=np.float32)])
        stats = _loop(source, engine, console).run()
        assert stats.stop_reason is StopReason.BAD_FRAME
        assert "Error: Frame is not a byte buffer" in output.getvalue()
        assert engine.submitted == []

    def test_display_close_stops_within_one_iteration(self, engine, console):
        source = FakeSource(make_frames(100))
        display = FakeDisplay(close_after=5)
        stats = _loop(source, engine, console, display=display).run()
        assert stats.stop_reason is StopReason.DISPLAY_CLOSED
        assert stats.frames_submitted == 5
        assert source.read_calls == 5

    def test_unexpected_error_is_reported(self, engine, console, output):
        def broken_submit(frame):
            raise RuntimeError("queue gone")

        engine.submit = broken_submit
        source = FakeSource(make_frames(3))
        stats = _loop(source, engine, console).run()
        assert stats.stop_reason is StopReason.ERROR
        assert stats.error == "queue gone"
        assert "Error: queue gone" in output.getvalue()
        assert source.release_count == 1


    def test_ctrl_c_ends_the_run_quietly(self, engine, console, output):
        class InterruptedSource(FakeSource):
            def read(self):
                if self.read_calls == 2:
                    raise KeyboardInterrupt
                return super().read()

        source = InterruptedSource(make_frames(10))
        stats = _loop(source, engine, console).run()
        assert stats.stop_reason is StopReason.INTERRUPTED
        assert stats.frames_submitted == 2
        assert "Error" not in output.getvalue()
        assert source.release_count == 1
        assert engine.stop_calls == 1

@pytest.mark.parametrize(
    "frames, close_after",
    [
        (make_frames(3), None),
        (make_frames(10), 2),
        ([np.empty((0, 0, 3), dtype=np.uint8)], None),
        ([np.zeros((2, 2, 2), dtype=np.uint8)], None),
    ],
)
def test_resources_released_exactly_once(engine, console, frames, close_after):
    source = FakeSource(frames)
    display = FakeDisplay(close_after=close_after)
    converter = FrameConverter()
    _loop(source, engine, console, display=display, converter=converter).run()
    assert display.close_count == 1
    assert converter.close_count == 1
    assert source.release_count == 1
    assert engine.stop_calls == 1


def test_cleanup_continues_after_a_failing_step(engine, console):
    class BadDisplay(FakeDisplay):
        def close(self) -> None:
            super().close()
            raise RuntimeError("window already gone")

    source = FakeSource(make_frames(1))
    display = BadDisplay()
    _loop(source, engine, console, display=display).run()
    assert display.close_count == 1
    assert source.release_count == 1
    assert engine.stop_calls == 1


def test_frames_are_shown_after_submission(engine, console):
    display = FakeDisplay()
    _loop(FakeSource(make_frames(4)), engine, console, display=display).run()
    assert display.shown == 4
