"""
External tool registry and system diagnostics.

Describes the optional command-line tools reposcope can use (fd, ripgrep,
fzf), checks whether they are installed, and aggregates the checks into a
diagnostic report with install suggestions. Availability is never cached:
every check is a fresh PATH lookup.
"""

import logging
import shutil
import subprocess
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..errors import ToolUnavailableError, VersionCheckError

logger = logging.getLogger(__name__)

VERSION_CHECK_TIMEOUT_SECONDS = 5


@dataclass(frozen=True)
class ToolDescriptor:
    """Static description of an external command-line tool."""

    name: str
    command: str
    check_command: Tuple[str, ...]
    install_commands: Dict[str, str] = field(default_factory=dict)
    description: str = ""
    website: str = ""
    required: bool = False

    def is_available(self) -> bool:
        """Check whether the tool's command is on PATH."""
        return shutil.which(self.command) is not None

    def get_version(self) -> str:
        """Run the tool's version check and return its output.

        Raises:
            ToolUnavailableError: If the tool is not installed
            VersionCheckError: If the version invocation fails
        """
        if not self.is_available():
            raise ToolUnavailableError(self.name)

        try:
            result = subprocess.run(
                list(self.check_command),
                capture_output=True,
                text=True,
                timeout=VERSION_CHECK_TIMEOUT_SECONDS,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise VersionCheckError(f"failed to get {self.name} version: {e}") from e

        if result.returncode != 0:
            raise VersionCheckError(
                f"failed to get {self.name} version: exit code {result.returncode}"
            )

        return result.stdout.strip()

    def get_install_instructions(self) -> str:
        """Return installation instructions for the current platform.

        Falls back to listing every known platform when there is no entry
        for the current one.
        """
        platform = get_platform()
        command = self.install_commands.get(platform)
        if command:
            return f"To install {self.name} on {platform}:\n  {command}"

        lines = [f"To install {self.name}:"]
        for known_platform, known_command in self.install_commands.items():
            lines.append(f"  {known_platform}: {known_command}")
        return "\n".join(lines) + "\n"

    def get_detailed_info(self) -> str:
        """Return a multi-line report about the tool and its status."""
        lines = [
            f"Tool: {self.name}",
            f"Description: {self.description}",
            f"Website: {self.website}",
            f"Required: {self.required}",
        ]

        if self.is_available():
            try:
                version = self.get_version()
                lines.append(f"Status: ✅ INSTALLED ({version})")
            except VERSION_CHECK_ERRORS as e:
                logger.debug(f"Version check for {self.name} failed: {e}")
                lines.append("Status: ✅ INSTALLED (version check failed)")
        else:
            lines.append("Status: ❌ NOT FOUND")
            lines.append("")
            lines.append(self.get_install_instructions())

        return "\n".join(lines) + "\n"

    def get_diagnostic_info(self) -> "DiagnosticInfo":
        """Check the tool and describe its status and fallback."""
        info = DiagnosticInfo(tool=self, available=self.is_available())

        if info.available:
            try:
                info.version = self.get_version()
            except VERSION_CHECK_ERRORS as e:
                info.error = e
        else:
            info.alternative = FALLBACK_DESCRIPTIONS.get(self.name, "")

        return info


# Either failure of get_version
VERSION_CHECK_ERRORS = (ToolUnavailableError, VersionCheckError)


FD = ToolDescriptor(
    name="fd",
    command="fd",
    check_command=("fd", "--version"),
    description="Lightning-fast file search tool (faster alternative to find)",
    website="https://github.com/sharkdp/fd",
    install_commands={
        "darwin": "brew install fd",
        "linux": "apt install fd-find || yum install fd-find || pacman -S fd",
        "windows": "winget install sharkdp.fd",
    },
)

RIPGREP = ToolDescriptor(
    name="ripgrep",
    command="rg",
    check_command=("rg", "--version"),
    description="Extremely fast regex-based content search tool",
    website="https://github.com/BurntSushi/ripgrep",
    install_commands={
        "darwin": "brew install ripgrep",
        "linux": "apt install ripgrep || yum install ripgrep || pacman -S ripgrep",
        "windows": "winget install BurntSushi.ripgrep.MSVC",
    },
)

FZF = ToolDescriptor(
    name="fzf",
    command="fzf",
    check_command=("fzf", "--version"),
    description="Interactive fuzzy finder for enhanced user experience",
    website="https://github.com/junegunn/fzf",
    install_commands={
        "darwin": "brew install fzf",
        "linux": "apt install fzf || yum install fzf || pacman -S fzf",
        "windows": "winget install junegunn.fzf",
    },
)

ALL_TOOLS: Tuple[ToolDescriptor, ...] = (FD, RIPGREP, FZF)

FALLBACK_DESCRIPTIONS = {
    "fd": "Standard file listing will be used (slower)",
    "ripgrep": "Content search will be unavailable",
    "fzf": "Basic numbered selection will be used",
}


def get_tool(name: str) -> Optional[ToolDescriptor]:
    """Look up a known tool by name or command."""
    for tool in ALL_TOOLS:
        if name in (tool.name, tool.command):
            return tool
    return None


@dataclass
class DiagnosticInfo:
    """Availability report for a single tool."""

    tool: ToolDescriptor
    available: bool
    version: str = ""
    error: Optional[Exception] = None
    alternative: str = ""


@dataclass
class DiagnosticSummary:
    """Counts of available and missing tools."""

    total_tools: int = 0
    available_tools: int = 0
    missing_tools: int = 0
    required_missing: int = 0
    optional_missing: int = 0


@dataclass
class SystemDiagnostics:
    """Diagnostics for a set of tools on the current platform."""

    platform: str
    tools: List[DiagnosticInfo] = field(default_factory=list)
    summary: DiagnosticSummary = field(default_factory=DiagnosticSummary)
    suggestions: List[str] = field(default_factory=list)

    def has_critical_issues(self) -> bool:
        """True when a required tool is missing."""
        return self.summary.required_missing > 0

    def get_readiness(self) -> int:
        """Percentage (0-100) of tools that are available."""
        if self.summary.total_tools == 0:
            return 100
        return (self.summary.available_tools * 100) // self.summary.total_tools

    def get_info(self, tool_name: str) -> Optional[DiagnosticInfo]:
        for info in self.tools:
            if info.tool.name == tool_name:
                return info
        return None

    def is_available(self, tool_name: str) -> bool:
        """Availability of a tool as recorded when the diagnostics ran."""
        info = self.get_info(tool_name)
        return info is not None and info.available


def check_dependencies(*tools: ToolDescriptor) -> List[str]:
    """Return the names of the given tools that are not installed."""
    return [tool.name for tool in tools if not tool.is_available()]


def get_missing_tools_message(*tools: ToolDescriptor) -> str:
    """Return a message listing missing tools with install instructions."""
    missing = [tool for tool in tools if not tool.is_available()]
    if not missing:
        return ""

    names = ", ".join(tool.name for tool in missing)
    parts = [f"Missing tools: {names}\n"]
    for tool in missing:
        parts.append(tool.get_install_instructions())
    return "\n".join(parts)


def run_system_diagnostics(*tools: ToolDescriptor) -> SystemDiagnostics:
    """Check every tool and build a diagnostic report."""
    diagnostics = SystemDiagnostics(
        platform=get_platform(),
        summary=DiagnosticSummary(total_tools=len(tools)),
    )

    for tool in tools:
        info = tool.get_diagnostic_info()
        diagnostics.tools.append(info)

        if info.available:
            diagnostics.summary.available_tools += 1
        else:
            diagnostics.summary.missing_tools += 1
            if tool.required:
                diagnostics.summary.required_missing += 1
            else:
                diagnostics.summary.optional_missing += 1

    diagnostics.suggestions = _generate_suggestions(diagnostics)
    logger.debug(
        f"Diagnostics: {diagnostics.summary.available_tools}/"
        f"{diagnostics.summary.total_tools} tools available"
    )
    return diagnostics


def _generate_suggestions(diagnostics: SystemDiagnostics) -> List[str]:
    summary = diagnostics.summary
    if summary.missing_tools == 0:
        return ["✅ All tools are available! Search is fully optimized."]

    suggestions = []
    if summary.required_missing > 0:
        suggestions.append("⚠️  Install required tools to ensure full functionality")
    if summary.optional_missing > 0:
        suggestions.append(
            "💡 Install optional tools for enhanced performance and features"
        )

    platform_hints = {
        "darwin": "💻 Consider using Homebrew for easy tool installation: brew install fd ripgrep fzf",
        "linux": "🐧 Use your system package manager (apt/yum/pacman) to install missing tools",
        "windows": "🪟 Use winget for convenient tool installation on Windows",
    }
    if diagnostics.platform in platform_hints:
        suggestions.append(platform_hints[diagnostics.platform])

    missing = {info.tool.name for info in diagnostics.tools if not info.available}
    if "fd" in missing and "ripgrep" in missing:
        suggestions.append(
            "🚀 Installing fd and ripgrep will significantly improve search performance"
        )
    elif "fd" in missing:
        suggestions.append("⚡ Installing fd will make file search much faster")
    elif "ripgrep" in missing:
        suggestions.append(
            "🔍 Installing ripgrep will enable powerful content search capabilities"
        )

    return suggestions


def get_platform() -> str:
    """Return ``darwin``, ``windows`` or ``linux`` (other Unix-likes map to linux)."""
    if sys.platform == "darwin":
        return "darwin"
    if sys.platform.startswith("win"):
        return "windows"
    return "linux"
