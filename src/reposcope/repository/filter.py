"""Repository group filtering.

Narrows an alias -> path repository map down to the members of a named
group. Every search entry point goes through the same strict policy: an
unknown or empty group is an error, never an empty result.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..config import GroupSource
from ..errors import (
    EmptyOrMissingGroupError,
    GroupNotFoundError,
    GroupRepositoryMismatchError,
)

logger = logging.getLogger(__name__)


@dataclass
class FilterInfo:
    """Before/after counts of a group filter."""

    original_count: int
    filtered_count: int
    group_name: str
    applied: bool


class RepositoryFilter:
    """Filters repository sets by configured group."""

    def __init__(self, group_source: GroupSource):
        """
        Args:
            group_source: Provides group membership (usually a ConfigManager)
        """
        self.group_source = group_source

    def filter_by_group(
        self, repositories: Dict[str, str], group_filter: str
    ) -> Dict[str, str]:
        """Return the repositories belonging to ``group_filter``.

        An empty ``group_filter`` returns ``repositories`` itself.

        Raises:
            EmptyOrMissingGroupError: If the group is unknown or has no members
        """
        if not group_filter:
            return repositories

        try:
            group_repos = self.group_source.get_group_repositories(group_filter)
        except GroupNotFoundError as e:
            raise EmptyOrMissingGroupError(group_filter) from e

        if not group_repos:
            raise EmptyOrMissingGroupError(group_filter)

        logger.debug(
            f"Group '{group_filter}' narrowed {len(repositories)} repositories "
            f"to {len(group_repos)}"
        )
        return group_repos

    def filter_by_group_with_validation(
        self, repositories: Dict[str, str], group_filter: str
    ) -> Dict[str, str]:
        """Filter by group and check every member against ``repositories``.

        Raises:
            EmptyOrMissingGroupError: If the group is unknown or has no members
            GroupRepositoryMismatchError: If a member is missing from
                ``repositories`` or configured with a different path
        """
        filtered = self.filter_by_group(repositories, group_filter)

        for alias, path in filtered.items():
            main_path = repositories.get(alias)
            if main_path != path:
                raise GroupRepositoryMismatchError(alias, path, main_path)

        return filtered

    def filter_with_info(
        self, repositories: Dict[str, str], group_filter: str
    ) -> Tuple[Dict[str, str], FilterInfo]:
        """Filter by group and report how much the set was narrowed."""
        filtered = self.filter_by_group(repositories, group_filter)
        info = FilterInfo(
            original_count=len(repositories),
            filtered_count=len(filtered),
            group_name=group_filter,
            applied=bool(group_filter),
        )
        return filtered, info

    def get_group_names(self) -> List[str]:
        return sorted(self.group_source.get_group_names())

    def validate_group_exists(self, group_name: str) -> None:
        """Raise EmptyOrMissingGroupError if the group is not configured."""
        if group_name not in self.group_source.get_group_names():
            raise EmptyOrMissingGroupError(group_name)

    def get_repository_count(self, group_name: str) -> int:
        """Number of configured repositories in a group."""
        self.validate_group_exists(group_name)
        try:
            return len(self.group_source.get_group_repositories(group_name))
        except GroupNotFoundError as e:
            raise EmptyOrMissingGroupError(group_name) from e


def resolve_repositories(
    repository_filter: Optional[RepositoryFilter],
    repositories: Dict[str, str],
    group_filter: str,
) -> Dict[str, str]:
    """Apply ``group_filter`` through ``repository_filter``.

    Without a group filter the repositories pass through untouched, so a
    searcher needs no filter unless it is asked to scope by group.
    """
    if not group_filter:
        return repositories
    if repository_filter is None:
        raise ValueError(
            f"group filter '{group_filter}' given but no repository filter configured"
        )
    return repository_filter.filter_by_group(repositories, group_filter)
