"""
Tests for InteractiveSelector - selection through fzf.

fzf is replaced by a fake process: stdin collects what was written and
stdout returns the line fzf would print.
"""

from unittest.mock import MagicMock, patch

import pytest

from reposcope.errors import (
    NoResultsError,
    NoSelectionMadeError,
    PickerError,
    SelectionCancelledError,
    SelectionInterruptedError,
    SelectionNotFoundError,
)
from reposcope.external.results import ContentResult, FileResult
from reposcope.selection.picker import InteractiveSelector

POPEN = "reposcope.selection.picker.subprocess.Popen"

RESULTS = [
    FileResult("a", "sub/foo.txt", "/r/a/sub/foo.txt"),
    FileResult("b", "bar.txt", "/r/b/bar.txt"),
]


def fzf_process(selected_line: str = "", returncode: int = 0) -> MagicMock:
    process = MagicMock()
    process.stdout.readline.return_value = selected_line
    process.wait.return_value = returncode
    return process


class TestBuildCommand:
    """Test suite for fzf command construction."""

    def test_default_command(self):
        command = InteractiveSelector().build_command("Select file")

        assert command[0] == "fzf"
        assert command[command.index("--height") + 1] == "50%"
        assert command[command.index("--prompt") + 1] == "Select file > "
        assert command[command.index("--bind") + 1] == "ctrl-c:abort"
        for flag in ("--reverse", "--border", "--no-multi", "--cycle", "--inline-info"):
            assert flag in command
        assert "--preview" not in command

    def test_preview_command_is_added(self):
        command = InteractiveSelector(preview_command="bat {1}").build_command("p")

        assert command[-4:] == ["--delimiter", ":", "--preview", "bat {1}"]


class TestSelect:
    """Test suite for InteractiveSelector.select."""

    def test_empty_results_raise_without_running_fzf(self):
        with patch(POPEN) as mock_popen:
            with pytest.raises(NoResultsError):
                InteractiveSelector().select([], "Select")

        mock_popen.assert_not_called()

    def test_returns_selected_result(self):
        process = fzf_process("/r/b/bar.txt:0:b:bar.txt\n")

        with patch(POPEN, return_value=process):
            selected = InteractiveSelector().select(RESULTS, "Select")

        assert selected is RESULTS[1]
        process.stdin.write.assert_called_once_with(
            "/r/a/sub/foo.txt:0:a:sub/foo.txt\n/r/b/bar.txt:0:b:bar.txt"
        )
        process.stdin.close.assert_called_once()

    def test_returns_selected_content_result(self):
        results = [ContentResult("a", "x.py", "/r/a/x.py", 9, 1, "x: int = 1")]
        process = fzf_process("/r/a/x.py:9:a:x.py:9: x: int = 1\n")

        with patch(POPEN, return_value=process):
            assert InteractiveSelector().select(results, "Select") is results[0]

    def test_exit_code_1_is_cancelled(self):
        with patch(POPEN, return_value=fzf_process(returncode=1)):
            with pytest.raises(SelectionCancelledError):
                InteractiveSelector().select(RESULTS, "Select")

    def test_exit_code_130_is_interrupted(self):
        with patch(POPEN, return_value=fzf_process(returncode=130)):
            with pytest.raises(SelectionInterruptedError):
                InteractiveSelector().select(RESULTS, "Select")

    def test_other_exit_code_is_picker_error(self):
        with patch(POPEN, return_value=fzf_process(returncode=2)):
            with pytest.raises(PickerError) as exc_info:
                InteractiveSelector().select(RESULTS, "Select")

        assert exc_info.value.exit_code == 2

    def test_clean_exit_without_line_is_no_selection(self):
        with patch(POPEN, return_value=fzf_process("")):
            with pytest.raises(NoSelectionMadeError):
                InteractiveSelector().select(RESULTS, "Select")

    def test_unknown_line_raises(self):
        with patch(POPEN, return_value=fzf_process("/r/c/x:0:c:x\n")):
            with pytest.raises(SelectionNotFoundError):
                InteractiveSelector().select(RESULTS, "Select")

    def test_fzf_failing_to_start_is_picker_error(self):
        with patch(POPEN, side_effect=FileNotFoundError("fzf")):
            with pytest.raises(PickerError):
                InteractiveSelector().select(RESULTS, "Select")

    def test_early_exit_while_writing_is_tolerated(self):
        """Test that fzf closing stdin before reading everything is not an error."""
        process = fzf_process("/r/a/sub/foo.txt:0:a:sub/foo.txt\n")
        process.stdin.write.side_effect = BrokenPipeError()

        with patch(POPEN, return_value=process):
            assert InteractiveSelector().select(RESULTS, "Select") is RESULTS[0]
