"""Built-in file search used when fd is missing or fails.

Walks each repository's directory tree and matches the pattern as a
case-insensitive substring of the file name.
"""

import logging
import os
from typing import Dict, List, Optional

from ..repository.filter import RepositoryFilter, resolve_repositories
from .fan_out import Deadline, search_repositories
from .results import (
    FileResult,
    format_for_picker,
    parse_picker_selection,
    relative_to_repository,
)

logger = logging.getLogger(__name__)

# Slower than fd, so it gets a longer deadline
DEFAULT_TIMEOUT_SECONDS = 30.0

SKIPPED_DIRECTORY = ".git"


class FallbackFileSearcher:
    """Finds files by walking every repository concurrently."""

    def __init__(
        self,
        repository_filter: Optional[RepositoryFilter] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.repository_filter = repository_filter
        self.timeout = timeout

    def search(
        self, pattern: str, repositories: Dict[str, str], group_filter: str = ""
    ) -> List[FileResult]:
        """Search for files whose name contains ``pattern`` (case-insensitive).

        Raises:
            EmptyOrMissingGroupError: If ``group_filter`` names an unknown or empty group
            SearchTimeoutError: If the deadline fired (partial results attached)
        """
        repos_to_search = resolve_repositories(
            self.repository_filter, repositories, group_filter
        )

        def search_repository(deadline: Deadline, alias: str, repo_path: str):
            return self.walk_repository(deadline, alias, repo_path, pattern)

        return search_repositories(
            repos_to_search,
            search_repository,
            self.timeout,
            description="search files (fallback)",
        )

    def walk_repository(
        self, deadline: Deadline, alias: str, repo_path: str, pattern: str
    ) -> List[FileResult]:
        """Walk one repository and collect matching files.

        Unreadable directories are skipped. ``.git`` is never entered. When
        the deadline passes the walk stops and returns what it found so far;
        the fan-out reports the timeout.
        """
        lower_pattern = pattern.lower()
        include_hidden = not pattern or pattern.startswith(".")
        root = os.path.abspath(repo_path)
        results: List[FileResult] = []

        for dirpath, dirnames, filenames in os.walk(
            root, onerror=_skip_permission_errors
        ):
            if deadline.expired:
                break

            if SKIPPED_DIRECTORY in dirnames:
                dirnames.remove(SKIPPED_DIRECTORY)

            for filename in filenames:
                if deadline.expired:
                    break
                if filename.startswith(".") and not include_hidden:
                    continue
                if lower_pattern and lower_pattern not in filename.lower():
                    continue

                full_path = os.path.join(dirpath, filename)
                results.append(
                    FileResult(
                        repo_alias=alias,
                        relative_path=relative_to_repository(full_path, root),
                        full_path=full_path,
                    )
                )

        if deadline.expired:
            logger.debug(
                f"Walk of '{alias}' stopped at the deadline with {len(results)} matches"
            )
        return results

    def format_for_picker(self, results: List[FileResult]) -> str:
        return format_for_picker(results)

    def parse_picker_selection(
        self, selection: str, results: List[FileResult]
    ) -> FileResult:
        return parse_picker_selection(selection, results)


def _skip_permission_errors(error: OSError) -> None:
    if isinstance(error, PermissionError):
        logger.debug(f"Skipping unreadable path: {error.filename}")
        return
    raise error
