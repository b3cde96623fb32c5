"""Concurrent per-repository search execution.

Runs one unit of work per repository on a thread pool sized to the number of
repositories, collects every unit's results into one lock-guarded list and
joins all units before returning. All units share one deadline; a unit that
fails is logged and contributes nothing.
"""

import concurrent.futures
import logging
import threading
import time
from typing import Callable, Dict, List, TypeVar

from ..errors import SearchTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Deadline:
    """Shared, cancellable deadline for one multi-repository search."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        self._expires_at = time.monotonic() + timeout
        self._cancelled = threading.Event()

    def remaining(self) -> float:
        """Seconds left, never negative."""
        if self._cancelled.is_set():
            return 0.0
        return max(0.0, self._expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return self._cancelled.is_set() or time.monotonic() >= self._expires_at

    def cancel(self) -> None:
        self._cancelled.set()

    def check(self) -> None:
        """Raise SearchTimeoutError if the deadline has passed."""
        if self.expired:
            raise SearchTimeoutError(
                f"search timed out after {self.timeout:g}s", timeout=self.timeout
            )


# (deadline, alias, repo_path) -> results for that repository
RepositoryUnit = Callable[[Deadline, str, str], List[T]]


def search_repositories(
    repositories: Dict[str, str],
    unit: RepositoryUnit,
    timeout: float,
    description: str = "search",
) -> List[T]:
    """Run ``unit`` for every repository concurrently and merge the results.

    Args:
        repositories: Alias -> repository path to search
        unit: Callable searching a single repository
        timeout: Shared deadline for the whole fan-out, in seconds
        description: Label used in log and timeout messages

    Returns:
        Results of all repositories that completed, in completion order

    Raises:
        SearchTimeoutError: If the deadline fired; ``results`` holds what was
            collected before it did
    """
    if not repositories:
        return []

    deadline = Deadline(timeout)
    results: List[T] = []
    lock = threading.Lock()
    timed_out = threading.Event()

    def run_unit(alias: str, path: str) -> None:
        try:
            repo_results = unit(deadline, alias, path)
        except SearchTimeoutError:
            timed_out.set()
            logger.warning(f"{description} in '{alias}' stopped at the deadline")
            return
        except Exception as e:
            logger.warning(f"Failed to {description} in '{alias}': {e}")
            return

        with lock:
            results.extend(repo_results)

    executor = concurrent.futures.ThreadPoolExecutor(
        max_workers=len(repositories), thread_name_prefix="reposcope-search"
    )
    try:
        futures = [
            executor.submit(run_unit, alias, path)
            for alias, path in repositories.items()
        ]
        _, not_done = concurrent.futures.wait(futures, timeout=timeout)
        if not_done:
            deadline.cancel()
    finally:
        # Units observe the cancelled deadline and stop; wait for all of them
        executor.shutdown(wait=True)

    # Units that stop early at the deadline return what they found
    if deadline.expired:
        timed_out.set()

    with lock:
        collected = list(results)

    if timed_out.is_set():
        raise SearchTimeoutError(
            f"{description} timed out after {timeout:g}s",
            timeout=timeout,
            results=collected,
        )

    return collected
