"""
Mode and path prompts.
"""

from __future__ import annotations

import threading

import pytest

from core.console import Console, path_exists, prompt_source, strip_quotes, wait_for_enter
from core.models import SourceChoice
from tests.conftest import ScriptedInput


@pytest.fixture
def video(tmp_path):
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"\x00")
    return path


class TestPromptSource:
    def test_mode_one_selects_camera(self, scripted_console):
        choice = prompt_source(scripted_console(["1"]), camera_index=2)
        assert choice == SourceChoice.camera(2)

    def test_mode_two_asks_for_path(self, scripted_console, output, video):
        choice = prompt_source(scripted_console(["2", str(video)]))
        assert choice == SourceChoice.video_file(str(video))
        assert ">> Input your video full path:" in output.getvalue()

    @pytest.mark.parametrize("bad", ["3", "0", "-1", "42"])
    def test_other_numbers_reprompt(self, scripted_console, output, bad):
        choice = prompt_source(scripted_console([bad, "1"]))
        assert choice == SourceChoice.camera()
        text = output.getvalue()
        assert "Error: Wrong input." in text
        assert text.count(">> Choose a Mode Number:") == 2

    def test_blank_input_reprompts_silently(self, scripted_console, output):
        choice = prompt_source(scripted_console(["", "   ", "1"]))
        assert choice == SourceChoice.camera()
        text = output.getvalue()
        assert "Error" not in text
        assert text.count(">> 1 or 2:") == 3

    def test_path_at_mode_prompt_selects_file(self, scripted_console, video):
        choice = prompt_source(scripted_console([f'"{video}"']))
        assert choice == SourceChoice.video_file(str(video))

    def test_missing_path_at_mode_prompt(self, scripted_console, output, tmp_path):
        missing = tmp_path / "nope.mp4"
        choice = prompt_source(scripted_console([str(missing), "1"]))
        assert choice == SourceChoice.camera()
        text = output.getvalue()
        assert "Error: File not found" in text
        assert "Error: Wrong input." in text

    def test_missing_path_after_mode_two_reprompts_path(self, scripted_console, output, tmp_path, video):
        choice = prompt_source(scripted_console(["2", "", str(tmp_path / "nope.mp4"), str(video)]))
        assert choice == SourceChoice.video_file(str(video))
        text = output.getvalue()
        assert text.count("Error: File not found") == 1
        assert text.count(">> Input your video full path:") == 3

    @pytest.mark.parametrize("name", ["x" * 300, "x" * 5000, "a\x00b"])
    def test_unusable_path_at_mode_prompt_reprompts(self, scripted_console, output, name):
        choice = prompt_source(scripted_console([name, "1"]))
        assert choice == SourceChoice.camera()
        assert "Error: File not found" in output.getvalue()

    @pytest.mark.parametrize("name", ["y" * 300, "y" * 5000, "c:\x00.mp4"])
    def test_unusable_path_after_mode_two_reprompts_path(self, scripted_console, output, video, name):
        choice = prompt_source(scripted_console(["2", name, str(video)]))
        assert choice == SourceChoice.video_file(str(video))
        assert output.getvalue().count("Error: File not found") == 1

    def test_end_of_input_returns_none(self, scripted_console):
        assert prompt_source(scripted_console(["abc-not-a-file"])) is None

    def test_ctrl_c_returns_none(self, output):
        def interrupt() -> str:
            raise KeyboardInterrupt

        assert prompt_source(Console(stream=output, input_fn=interrupt)) is None


def test_strip_quotes():
    assert strip_quotes('"C:\\videos\\a.mp4"') == "C:\\videos\\a.mp4"
    assert strip_quotes("  /tmp/a.mp4 ") == "/tmp/a.mp4"
    assert strip_quotes('"') == ""


def test_wait_for_enter_tolerates_eof(output):
    wait_for_enter(Console(stream=output, input_fn=ScriptedInput([])))
    assert output.getvalue().startswith("Press Enter to quit...")


def test_print_blocks_do_not_interleave(output):
    console = Console(stream=output)
    block = [f"line {i}" for i in range(50)]

    def worker(tag: str) -> None:
        for _ in range(20):
            console.print(*(f"{tag} {line}" for line in block))

    threads = [threading.Thread(target=worker, args=(t,)) for t in ("a", "b", "c")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    lines = output.getvalue().splitlines()
    assert len(lines) == 3 * 20 * 50
    for start in range(0, len(lines), 50):
        chunk = lines[start:start + 50]
        assert len({line.split()[0] for line in chunk}) == 1


def test_path_exists(video, tmp_path):
    assert path_exists(str(video))
    assert not path_exists(str(tmp_path / "nope.mp4"))
    assert not path_exists("z" * 5000)
    assert not path_exists("bad\x00name")
