"""Search result types and the picker line protocol.

Every result carries a precomputed display text. The same text is written to
the picker as part of each line and is the key used to map the picker's
echoed line back to a result.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Sequence, TypeVar, Union

from ..errors import SelectionNotFoundError


@dataclass(frozen=True)
class FileResult:
    """A file found in a repository."""

    repo_alias: str
    relative_path: str
    full_path: str
    display_text: str = field(init=False)

    def __post_init__(self):
        object.__setattr__(
            self, "display_text", f"{self.repo_alias}:{self.relative_path}"
        )

    @property
    def line_number(self) -> int:
        # File results have no line; 0 keeps the picker format uniform
        return 0


@dataclass(frozen=True)
class ContentResult:
    """A matching line in a file of a repository."""

    repo_alias: str
    relative_path: str
    full_path: str
    line_number: int
    column: int
    line_content: str
    display_text: str = field(init=False)

    def __post_init__(self):
        object.__setattr__(
            self,
            "display_text",
            f"{self.repo_alias}:{self.relative_path}:{self.line_number}: "
            f"{self.line_content.strip()}",
        )


SearchResult = Union[FileResult, ContentResult]

ResultT = TypeVar("ResultT", FileResult, ContentResult)


def relative_to_repository(path: str, repo_path: str) -> str:
    """Path relative to the repository root, or the absolute path if outside it."""
    absolute = absolute_tool_path(path)
    try:
        return str(Path(absolute).relative_to(os.path.abspath(repo_path)))
    except ValueError:
        return absolute


def absolute_tool_path(path: str) -> str:
    """Absolute form of a path printed by a tool run from the current directory."""
    return os.path.abspath(path)


def format_picker_line(result: SearchResult) -> str:
    """Format one result as ``absolute_path:line_number:display_text``."""
    return f"{result.full_path}:{result.line_number}:{result.display_text}"


def format_for_picker(results: Sequence[SearchResult]) -> str:
    """Format results as the newline-joined block fed to the picker."""
    return "\n".join(format_picker_line(result) for result in results)


def parse_picker_selection(selection: str, results: Sequence[ResultT]) -> ResultT:
    """Map a line echoed by the picker back to its result.

    The line is split on ``:`` into at most three parts and the third part is
    matched against display texts. Lines with fewer parts are matched whole
    as display text. As a last resort the line is compared with the full
    formatted picker lines, which covers absolute paths containing ``:``.

    Raises:
        SelectionNotFoundError: If no result matches
    """
    by_display: Dict[str, ResultT] = {}
    for result in results:
        by_display.setdefault(result.display_text, result)

    parts = selection.split(":", 2)
    if len(parts) == 3 and parts[2] in by_display:
        return by_display[parts[2]]

    if selection in by_display:
        return by_display[selection]

    for result in results:
        if format_picker_line(result) == selection:
            return result

    raise SelectionNotFoundError(selection)
