"""Interactive result selection through fzf.

Results are written to fzf's stdin as ``absolute_path:line_number:display_text``
lines and the line fzf prints on stdout is mapped back to its result. A writer
thread feeds stdin while the calling thread reads stdout, so neither side can
block on a full pipe buffer.
"""

import logging
import subprocess
import threading
from typing import IO, List, Optional, Sequence

from ..errors import (
    NoResultsError,
    NoSelectionMadeError,
    PickerError,
    SelectionCancelledError,
    SelectionInterruptedError,
)
from ..external.results import ResultT, format_for_picker, parse_picker_selection
from ..external.tools import FZF

logger = logging.getLogger(__name__)

EXIT_NO_MATCH = 1
EXIT_INTERRUPTED = 130


class InteractiveSelector:
    """Lets the user pick one result with fzf."""

    def __init__(self, height: str = "50%", preview_command: Optional[str] = None):
        """
        Args:
            height: fzf window height
            preview_command: Optional fzf preview command; fields are split on
                ``:`` so ``{1}`` is the absolute path and ``{2}`` the line number
        """
        self.height = height
        self.preview_command = preview_command

    def build_command(self, prompt: str) -> List[str]:
        cmd = [
            FZF.command,
            "--height", self.height,
            "--reverse",
            "--border",
            "--prompt", f"{prompt} > ",
            "--preview-window", "right:50%:wrap",
            "--bind", "ctrl-c:abort",
            "--no-multi",
            "--cycle",
            "--inline-info",
        ]
        if self.preview_command:
            cmd.extend(["--delimiter", ":", "--preview", self.preview_command])
        return cmd

    def select(self, results: Sequence[ResultT], prompt: str) -> ResultT:
        """Run fzf over ``results`` and return the chosen one.

        Raises:
            NoResultsError: If ``results`` is empty
            NoSelectionMadeError: If fzf exited cleanly without a selection
            SelectionCancelledError: If fzf exited with code 1
            SelectionInterruptedError: If fzf exited with code 130
            PickerError: If fzf could not run or exited with another code
            SelectionNotFoundError: If the selected line maps to no result
        """
        if not results:
            raise NoResultsError()

        formatted_input = format_for_picker(results)
        selection, returncode = self._run_picker(formatted_input, prompt)

        if returncode == EXIT_NO_MATCH:
            raise SelectionCancelledError()
        if returncode == EXIT_INTERRUPTED:
            raise SelectionInterruptedError()
        if returncode != 0:
            raise PickerError(f"fzf exited with code {returncode}", exit_code=returncode)

        if not selection:
            raise NoSelectionMadeError()

        return parse_picker_selection(selection, results)

    def _run_picker(self, formatted_input: str, prompt: str):
        """Feed ``formatted_input`` to fzf and return (selected line, exit code)."""
        try:
            process = subprocess.Popen(
                self.build_command(prompt),
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise PickerError(f"failed to start fzf: {e}") from e

        writer = threading.Thread(
            target=_write_input,
            args=(process.stdin, formatted_input),
            name="reposcope-fzf-writer",
            daemon=True,
        )
        writer.start()

        selection = process.stdout.readline().rstrip("\r\n")

        writer.join()
        process.stdout.close()
        returncode = process.wait()

        logger.debug(f"fzf exited with {returncode}")
        return selection, returncode


def _write_input(stream: IO[str], data: str) -> None:
    try:
        stream.write(data)
    except BrokenPipeError:
        # fzf exits as soon as a line is chosen, possibly before reading everything
        logger.debug("fzf closed its input before all results were written")
    finally:
        try:
            stream.close()
        except BrokenPipeError:
            pass
