"""File search across repositories with fd."""

import logging
from typing import Dict, List, Optional

from ..errors import ToolUnavailableError
from ..repository.filter import RepositoryFilter, resolve_repositories
from .fan_out import Deadline, search_repositories
from .process import run_search_tool
from .results import (
    FileResult,
    absolute_tool_path,
    format_for_picker,
    parse_picker_selection,
    relative_to_repository,
)
from .tools import FD

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class FdSearcher:
    """Finds files in every repository concurrently using fd."""

    def __init__(
        self,
        repository_filter: Optional[RepositoryFilter] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        """
        Args:
            repository_filter: Resolves group filters; required only when
                searches pass a non-empty group filter
            timeout: Shared deadline for one search, in seconds
        """
        self.repository_filter = repository_filter
        self.timeout = timeout

    def search(
        self, pattern: str, repositories: Dict[str, str], group_filter: str = ""
    ) -> List[FileResult]:
        """Search for files matching ``pattern`` in all repositories.

        An empty pattern lists every file.

        Raises:
            ToolUnavailableError: If fd is not installed
            EmptyOrMissingGroupError: If ``group_filter`` names an unknown or empty group
            SearchTimeoutError: If the deadline fired (partial results attached)
        """
        if not FD.is_available():
            raise ToolUnavailableError(FD.name, FD.get_install_instructions())

        repos_to_search = resolve_repositories(
            self.repository_filter, repositories, group_filter
        )

        def search_repository(deadline: Deadline, alias: str, repo_path: str):
            lines = run_search_tool(
                FD.name, self.build_command(pattern, repo_path), alias, deadline
            )
            return self.parse_output(lines, alias, repo_path)

        return search_repositories(
            repos_to_search, search_repository, self.timeout, description="search files"
        )

    def build_command(self, pattern: str, repo_path: str) -> List[str]:
        cmd = [
            FD.command,
            "--type", "f",
            "--hidden",
            "--follow",
            "--exclude", ".git",
            "--color", "never",
        ]
        if pattern:
            cmd.append(pattern)
        cmd.append(repo_path)
        return cmd

    def parse_output(
        self, lines: List[str], alias: str, repo_path: str
    ) -> List[FileResult]:
        """Turn fd's one-path-per-line output into results."""
        results = []
        for line in lines:
            path = line.strip()
            if not path:
                continue
            results.append(
                FileResult(
                    repo_alias=alias,
                    relative_path=relative_to_repository(path, repo_path),
                    full_path=absolute_tool_path(path),
                )
            )
        return results

    def format_for_picker(self, results: List[FileResult]) -> str:
        return format_for_picker(results)

    def parse_picker_selection(
        self, selection: str, results: List[FileResult]
    ) -> FileResult:
        return parse_picker_selection(selection, results)
