"""
Search strategy selection with automatic fallback.

SmartSearcher checks the installed tools once when it is created, uses fd
for file search when it was found and falls back to the built-in directory
walk when fd is missing or fails. Result selection goes through fzf when it
is installed at the time of the call, otherwise through a numbered prompt.
"""

import logging
from typing import Dict, List, Optional, Protocol, Sequence

from rich.console import Console
from rich.markup import escape

from ..config import SearchSettings
from ..errors import SearchStrategiesExhaustedError, ToolUnavailableError
from ..repository.filter import RepositoryFilter, resolve_repositories
from ..selection.basic import BasicSelector
from ..selection.picker import InteractiveSelector
from .fallback_searcher import FallbackFileSearcher
from .fd_searcher import FdSearcher
from .results import ContentResult, FileResult, ResultT
from .rg_searcher import RgSearcher
from .tools import FD, FZF, RIPGREP, SystemDiagnostics, run_system_diagnostics

logger = logging.getLogger(__name__)


class FileSearcher(Protocol):
    """Contract shared by the primary and fallback file searchers."""

    def search(
        self, pattern: str, repositories: Dict[str, str], group_filter: str = ""
    ) -> List[FileResult]: ...

    def format_for_picker(self, results: List[FileResult]) -> str: ...

    def parse_picker_selection(
        self, selection: str, results: List[FileResult]
    ) -> FileResult: ...


class SmartSearcher:
    """Runs searches with the best available strategy and drives selection."""

    def __init__(
        self,
        repository_filter: Optional[RepositoryFilter] = None,
        settings: Optional[SearchSettings] = None,
        verbose: bool = False,
        console: Optional[Console] = None,
    ):
        """
        Args:
            repository_filter: Resolves group filters
            settings: Timeouts and picker settings (defaults apply when omitted)
            verbose: Print strategy decisions to the console
            console: Console for user-facing output
        """
        self.repository_filter = repository_filter
        self.settings = settings or SearchSettings()
        self.verbose = verbose
        self.console = console or Console(stderr=True)

        self.diagnostics = run_system_diagnostics(FD, RIPGREP, FZF)

        self.primary_searcher: Optional[FileSearcher] = None
        if self.diagnostics.is_available(FD.name):
            self.primary_searcher = FdSearcher(
                repository_filter, timeout=self.settings.file_search_timeout
            )
        self.fallback_searcher: FileSearcher = FallbackFileSearcher(
            repository_filter, timeout=self.settings.fallback_search_timeout
        )
        logger.info(
            f"File search strategy: {'fd' if self.primary_searcher else 'fallback walk'}"
        )

    def search_files(
        self, pattern: str, repositories: Dict[str, str], group_filter: str = ""
    ) -> List[FileResult]:
        """Search files with the primary strategy, falling back once on error.

        Group filtering happens first and its errors propagate unchanged; they
        are not treated as a strategy failure.

        Raises:
            EmptyOrMissingGroupError: If the group filter is unknown or empty
            SearchStrategiesExhaustedError: If every strategy failed
        """
        repos_to_search = resolve_repositories(
            self.repository_filter, repositories, group_filter
        )

        primary_error: Optional[Exception] = None
        if self.primary_searcher is not None:
            self._note(f"🔍 Using [cyan]{FD.name}[/cyan] for file search...")
            try:
                return self.primary_searcher.search(pattern, repos_to_search)
            except Exception as e:
                primary_error = e
                logger.info(f"Primary file search failed, falling back: {e}")
                self._note(f"⚠️  Primary search failed: {escape(str(e))}")
                self._note("🔄 Falling back to [yellow]basic file search[/yellow]...")
        elif self.verbose:
            self._show_tool_missing(FD.name, "file search")

        try:
            return self.fallback_searcher.search(pattern, repos_to_search)
        except Exception as e:
            raise SearchStrategiesExhaustedError(primary_error, e) from e

    def search_content(
        self, pattern: str, repositories: Dict[str, str], group_filter: str = ""
    ) -> List[ContentResult]:
        """Search file contents with rg; there is no built-in fallback.

        Raises:
            ToolUnavailableError: If rg is not installed
            EmptyPatternError: If ``pattern`` is empty
            EmptyOrMissingGroupError: If the group filter is unknown or empty
            SearchTimeoutError: If the deadline fired (partial results attached)
        """
        if not RIPGREP.is_available():
            if self.verbose:
                self._show_tool_missing(RIPGREP.name, "content search")
            raise ToolUnavailableError(RIPGREP.name, RIPGREP.get_install_instructions())

        searcher = RgSearcher(
            self.repository_filter,
            timeout=self.settings.content_search_timeout,
            max_count=self.settings.max_count_per_file,
        )
        self._note(f"🔍 Using [cyan]{RIPGREP.name}[/cyan] for content search...")
        return searcher.search(pattern, repositories, group_filter)

    def format_for_picker(self, results: List[FileResult]) -> str:
        return self._active_searcher().format_for_picker(results)

    def parse_picker_selection(
        self, selection: str, results: List[FileResult]
    ) -> FileResult:
        return self._active_searcher().parse_picker_selection(selection, results)

    def select(self, results: Sequence[ResultT], prompt: str) -> ResultT:
        """Pick one result with fzf if installed now, else a numbered prompt."""
        if FZF.is_available():
            self._note(f"🎯 Using [cyan]{FZF.name}[/cyan] for interactive selection...")
            selector = InteractiveSelector(
                height=self.settings.picker_height,
                preview_command=self.settings.preview_command,
            )
            return selector.select(results, prompt)

        if self.verbose:
            self._show_tool_missing(FZF.name, "interactive selection")
        selector = BasicSelector(
            console=self.console, display_limit=self.settings.basic_display_limit
        )
        return selector.select(results, prompt)

    def get_diagnostics(self) -> SystemDiagnostics:
        return self.diagnostics

    def get_optimization_tips(self) -> List[str]:
        """Suggestions for making search faster; empty when fully optimized."""
        if self.diagnostics.get_readiness() == 100:
            return []

        tips = list(self.diagnostics.suggestions)
        if not self.diagnostics.is_available(FD.name):
            tips.append("📊 Performance impact: File search is ~5-10x slower without fd")
        if not self.diagnostics.is_available(FZF.name):
            tips.append(
                "📊 UX impact: Interactive selection is less user-friendly without fzf"
            )
        return tips

    def show_optimization_tips(self) -> None:
        tips = self.get_optimization_tips()
        if not tips:
            self.console.print(
                "✅ [green]OPTIMIZED[/green]: All search tools are optimally configured!"
            )
            return

        self.console.print("💡 [cyan]OPTIMIZATION TIPS[/cyan]:")
        for tip in tips:
            self.console.print(f"   {tip}")

    def _active_searcher(self) -> FileSearcher:
        return self.primary_searcher or self.fallback_searcher

    def _note(self, message: str) -> None:
        if self.verbose:
            self.console.print(message)

    def _show_tool_missing(self, tool_name: str, feature: str) -> None:
        self.console.print(
            f"⚠️  [yellow]{tool_name}[/yellow] is not available for enhanced {feature}"
        )
        info = self.diagnostics.get_info(tool_name)
        if info is None:
            return
        if info.alternative:
            self.console.print(f"   Fallback: [cyan]{info.alternative}[/cyan]")
        self.console.print(
            f"   Install: [blue]{info.tool.get_install_instructions()}[/blue]"
        )
