"""Exception hierarchy for reposcope.

Search failures, group filtering failures and selection outcomes each have
their own exception type so that callers can tell a missing optional tool
apart from a cancelled picker or a misconfigured group.
"""

from typing import List, Optional


class ReposcopeError(Exception):
    """Base class for all reposcope errors."""

    pass


# Configuration


class ConfigError(ReposcopeError):
    """Raised when the configuration file cannot be read or is invalid."""

    pass


class GroupNotFoundError(ConfigError):
    """Raised when a repository group is not configured."""

    def __init__(self, group_name: str):
        self.group_name = group_name
        super().__init__(f"group '{group_name}' not found")


# Tools


class ToolUnavailableError(ReposcopeError):
    """Raised when an external binary is not on PATH."""

    def __init__(self, tool_name: str, instructions: str = ""):
        self.tool_name = tool_name
        self.instructions = instructions
        message = f"{tool_name} not available"
        if instructions:
            message = f"{message}: {instructions}"
        super().__init__(message)


class VersionCheckError(ReposcopeError):
    """Raised when a tool's version invocation fails."""

    pass


# Search


class EmptyPatternError(ReposcopeError):
    """Raised when content search is started without a pattern."""

    def __init__(self):
        super().__init__("search pattern is required for content search")


class ToolExecutionError(ReposcopeError):
    """Raised when an external search tool fails for one repository."""

    def __init__(
        self,
        tool_name: str,
        repo_alias: str,
        exit_code: Optional[int] = None,
        stderr: str = "",
    ):
        self.tool_name = tool_name
        self.repo_alias = repo_alias
        self.exit_code = exit_code
        self.stderr = stderr
        detail = f"exit code {exit_code}" if exit_code is not None else "failed"
        message = f"{tool_name} command failed in '{repo_alias}' ({detail})"
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)


class MalformedOutputError(ReposcopeError):
    """Raised by line parsers for a line that does not match the tool's format.

    Searchers catch it per line and drop the line.
    """

    pass


class SearchTimeoutError(ReposcopeError):
    """Raised when the shared search deadline expires.

    Attributes:
        timeout: Deadline in seconds that was exceeded
        results: Results accumulated before the deadline fired
    """

    def __init__(self, message: str, timeout: float, results: Optional[List] = None):
        self.timeout = timeout
        self.results = results if results is not None else []
        super().__init__(message)


class SearchStrategiesExhaustedError(ReposcopeError):
    """Raised when both the primary and the fallback strategy failed."""

    def __init__(
        self,
        primary_error: Optional[BaseException],
        fallback_error: BaseException,
    ):
        self.primary_error = primary_error
        self.fallback_error = fallback_error
        if primary_error is None:
            message = f"fallback search failed: {fallback_error}"
        else:
            message = (
                f"both primary and fallback search failed: "
                f"primary: {primary_error}; fallback: {fallback_error}"
            )
        super().__init__(message)

    @property
    def results(self) -> List:
        """Partial results from the fallback when it timed out."""
        if isinstance(self.fallback_error, SearchTimeoutError):
            return self.fallback_error.results
        return []


# Repository filtering


class EmptyOrMissingGroupError(ReposcopeError):
    """Raised when a group filter names a group that is unknown or empty."""

    def __init__(self, group_name: str):
        self.group_name = group_name
        super().__init__(f"group '{group_name}' is empty or does not exist")


class GroupRepositoryMismatchError(ReposcopeError):
    """Raised when a group member disagrees with the main repository list.

    ``main_path`` is None when the alias is missing from the main list.
    """

    def __init__(self, alias: str, group_path: str, main_path: Optional[str]):
        self.alias = alias
        self.group_path = group_path
        self.main_path = main_path
        if main_path is None:
            message = f"group repository '{alias}' not found in main repository list"
        else:
            message = (
                f"group repository '{alias}' path mismatch: "
                f"group has '{group_path}', main has '{main_path}'"
            )
        super().__init__(message)


# Selection


class SelectionError(ReposcopeError):
    """Base class for outcomes of the selection stage."""

    pass


class NoResultsError(SelectionError):
    """Raised when there is nothing to select from."""

    def __init__(self):
        super().__init__("no search results found")


class NoSelectionMadeError(SelectionError):
    """Raised when the picker exits cleanly without printing a selection."""

    def __init__(self):
        super().__init__("no selection made")


class SelectionCancelledError(SelectionError):
    """Raised when the user cancels the selection."""

    def __init__(self):
        super().__init__("selection cancelled")


class SelectionInterruptedError(SelectionError):
    """Raised when the picker is interrupted (SIGINT, exit code 130)."""

    def __init__(self):
        super().__init__("selection interrupted")


class InvalidSelectionError(SelectionError):
    """Raised when basic-prompt input is not a number in the valid range."""

    def __init__(self, value: str, valid_max: int):
        self.value = value
        self.valid_max = valid_max
        super().__init__(f"invalid selection: {value!r} (valid range: 1-{valid_max})")


class PickerError(SelectionError):
    """Raised when the picker process fails."""

    def __init__(self, message: str, exit_code: Optional[int] = None):
        self.exit_code = exit_code
        super().__init__(message)


class SelectionNotFoundError(SelectionError):
    """Raised when a picker line does not map back to any result."""

    def __init__(self, selection: str):
        self.selection = selection
        super().__init__(f"selection not found in results: {selection!r}")


# Preview


class InvalidPreviewRequestError(ReposcopeError):
    """Raised when an encoded preview request cannot be decoded."""

    pass
