"""Numbered terminal selection used when fzf is not installed."""

import logging
from typing import Callable, Optional, Sequence

from rich.console import Console
from rich.markup import escape

from ..errors import (
    InvalidSelectionError,
    NoResultsError,
    SelectionCancelledError,
    SelectionInterruptedError,
)
from ..external.results import ResultT

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_LIMIT = 20

QUIT_INPUTS = ("q", "quit")


class BasicSelector:
    """Prints numbered results and reads the chosen number from the terminal."""

    def __init__(
        self,
        console: Optional[Console] = None,
        input_func: Optional[Callable[[str], str]] = None,
        display_limit: int = DEFAULT_DISPLAY_LIMIT,
    ):
        """
        Args:
            console: Console to print to (defaults to a new rich Console)
            input_func: Reads one line given a prompt (defaults to console.input)
            display_limit: Maximum number of results listed
        """
        self.console = console or Console()
        self.input_func = input_func or self.console.input
        self.display_limit = display_limit

    def select(self, results: Sequence[ResultT], prompt: str) -> ResultT:
        """List up to ``display_limit`` results and return the one picked.

        Raises:
            NoResultsError: If ``results`` is empty
            SelectionCancelledError: On ``q``/``quit`` or end of input
            SelectionInterruptedError: On Ctrl-C
            InvalidSelectionError: On non-numeric or out-of-range input
        """
        if not results:
            raise NoResultsError()

        display_count = min(len(results), self.display_limit)

        self.console.print(f"\n{escape(prompt)}")
        self.console.print("-" * len(prompt))
        for i, result in enumerate(results[:display_count], 1):
            self.console.print(f"{i:3d}. {escape(result.display_text)}", highlight=False)

        if len(results) > display_count:
            self.console.print(
                f"     ... and {len(results) - display_count} more results",
                style="dim",
            )

        try:
            raw = self.input_func(
                f"\nEnter selection (1-{display_count}) or 'q' to quit: "
            )
        except EOFError:
            raise SelectionCancelledError()
        except KeyboardInterrupt:
            raise SelectionInterruptedError()

        value = raw.strip()
        if value.lower() in QUIT_INPUTS:
            raise SelectionCancelledError()

        try:
            selection = int(value)
        except ValueError:
            raise InvalidSelectionError(value, display_count)

        if selection < 1 or selection > display_count:
            raise InvalidSelectionError(value, display_count)

        logger.debug(f"Basic selection picked #{selection}")
        return results[selection - 1]
