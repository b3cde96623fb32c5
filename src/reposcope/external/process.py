"""Subprocess execution for line-oriented search tools."""

import logging
import subprocess
from typing import List

from ..errors import SearchTimeoutError, ToolExecutionError
from .fan_out import Deadline

logger = logging.getLogger(__name__)

# fd and rg both exit with 1 when nothing matched
NO_MATCHES_EXIT_CODE = 1


def run_search_tool(
    tool_name: str, command: List[str], repo_alias: str, deadline: Deadline
) -> List[str]:
    """Run a search tool and return its stdout lines.

    The process may run for whatever is left of the shared deadline; when
    that runs out it is killed.

    Args:
        tool_name: Tool name for error messages
        command: Full command line
        repo_alias: Repository the command searches
        deadline: Shared deadline of the enclosing fan-out

    Returns:
        Output lines, or an empty list when the tool reported no matches

    Raises:
        SearchTimeoutError: If the deadline expired before the tool finished
        ToolExecutionError: If the tool could not start or failed
    """
    deadline.check()
    logger.debug(f"Running {tool_name} for '{repo_alias}': {' '.join(command)}")

    try:
        process = subprocess.Popen(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as e:
        raise ToolExecutionError(tool_name, repo_alias, stderr=str(e)) from e

    try:
        stdout, stderr = process.communicate(timeout=deadline.remaining())
    except subprocess.TimeoutExpired:
        process.kill()
        process.communicate()
        raise SearchTimeoutError(
            f"{tool_name} in '{repo_alias}' killed at the {deadline.timeout:g}s deadline",
            timeout=deadline.timeout,
        )

    if process.returncode == NO_MATCHES_EXIT_CODE:
        return []
    if process.returncode != 0:
        raise ToolExecutionError(
            tool_name, repo_alias, exit_code=process.returncode, stderr=stderr or ""
        )

    return stdout.splitlines()
