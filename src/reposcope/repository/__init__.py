"""Repository group filtering."""

from .filter import FilterInfo, RepositoryFilter, resolve_repositories

__all__ = [
    "FilterInfo",
    "RepositoryFilter",
    "resolve_repositories",
]
