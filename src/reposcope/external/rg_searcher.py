"""Content search across repositories with ripgrep."""

import logging
from typing import Dict, List, Optional

from ..errors import EmptyPatternError, MalformedOutputError, ToolUnavailableError
from ..repository.filter import RepositoryFilter, resolve_repositories
from .fan_out import Deadline, search_repositories
from .process import run_search_tool
from .results import (
    ContentResult,
    absolute_tool_path,
    format_for_picker,
    parse_picker_selection,
    relative_to_repository,
)
from .tools import RIPGREP

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_MAX_COUNT = 50


class RgSearcher:
    """Searches file contents in every repository concurrently using rg."""

    def __init__(
        self,
        repository_filter: Optional[RepositoryFilter] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_count: int = DEFAULT_MAX_COUNT,
    ):
        """
        Args:
            repository_filter: Resolves group filters
            timeout: Shared deadline for one search, in seconds
            max_count: Maximum matches reported per file
        """
        self.repository_filter = repository_filter
        self.timeout = timeout
        self.max_count = max_count

    def search(
        self, pattern: str, repositories: Dict[str, str], group_filter: str = ""
    ) -> List[ContentResult]:
        """Search file contents for ``pattern`` in all repositories.

        Raises:
            ToolUnavailableError: If rg is not installed
            EmptyPatternError: If ``pattern`` is empty
            EmptyOrMissingGroupError: If ``group_filter`` names an unknown or empty group
            SearchTimeoutError: If the deadline fired (partial results attached)
        """
        if not RIPGREP.is_available():
            raise ToolUnavailableError(RIPGREP.name, RIPGREP.get_install_instructions())

        if not pattern:
            raise EmptyPatternError()

        repos_to_search = resolve_repositories(
            self.repository_filter, repositories, group_filter
        )

        def search_repository(deadline: Deadline, alias: str, repo_path: str):
            lines = run_search_tool(
                RIPGREP.name, self.build_command(pattern, repo_path), alias, deadline
            )
            return self.parse_output(lines, alias, repo_path)

        return search_repositories(
            repos_to_search,
            search_repository,
            self.timeout,
            description="search content",
        )

    def build_command(self, pattern: str, repo_path: str) -> List[str]:
        return [
            RIPGREP.command,
            "--line-number",
            "--column",
            "--no-heading",
            "--with-filename",
            "--color", "never",
            "--hidden",
            "--follow",
            "--text",
            "-g", "!.git/**",
            "--max-count", str(self.max_count),
            pattern,
            repo_path,
        ]

    def parse_output(
        self, lines: List[str], alias: str, repo_path: str
    ) -> List[ContentResult]:
        """Parse rg output, dropping lines that don't match the expected shape."""
        results = []
        for line in lines:
            if not line.strip():
                continue
            try:
                results.append(self.parse_line(line, alias, repo_path))
            except MalformedOutputError as e:
                logger.debug(f"Skipping malformed rg output in '{alias}': {e}")
        return results

    def parse_line(self, line: str, alias: str, repo_path: str) -> ContentResult:
        """Parse one ``path:line:column:content`` line.

        Raises:
            MalformedOutputError: If the line doesn't have that shape
        """
        parts = line.split(":", 3)
        if len(parts) < 4:
            raise MalformedOutputError(f"invalid rg output format: {line[:100]}")

        file_path, line_str, column_str, content = parts
        try:
            line_number = int(line_str)
            column = int(column_str)
        except ValueError as e:
            raise MalformedOutputError(
                f"invalid line or column number in: {line[:100]}"
            ) from e

        return ContentResult(
            repo_alias=alias,
            relative_path=relative_to_repository(file_path, repo_path),
            full_path=absolute_tool_path(file_path),
            line_number=line_number,
            column=column,
            line_content=content.rstrip("\r"),
        )

    def format_for_picker(self, results: List[ContentResult]) -> str:
        return format_for_picker(results)

    def parse_picker_selection(
        self, selection: str, results: List[ContentResult]
    ) -> ContentResult:
        return parse_picker_selection(selection, results)
