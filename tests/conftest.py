"""
Shared pytest fixtures for reposcope tests.

Provides temporary repository trees, a YAML config writer and helpers for
faking the external tool processes.
"""

from pathlib import Path
from typing import Dict, List, Optional
from unittest.mock import MagicMock

import pytest
import yaml  # type: ignore


def _make_process(
    stdout: str = "", stderr: str = "", returncode: int = 0
) -> MagicMock:
    process = MagicMock()
    process.communicate.return_value = (stdout, stderr)
    process.returncode = returncode
    return process


def write_files(root: Path, files: List[str]) -> None:
    """Create empty files (and their parent directories) under root."""
    for relative in files:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("")


@pytest.fixture
def two_repos(tmp_path) -> Dict[str, str]:
    """Repositories a and b with the files used by the fallback scenario."""
    repo_a = tmp_path / "a"
    repo_b = tmp_path / "b"
    write_files(repo_a, ["sub/foo.txt", ".git/foo_object"])
    write_files(repo_b, ["bar.txt"])
    return {"a": str(repo_a), "b": str(repo_b)}


@pytest.fixture
def write_config(tmp_path):
    """Write a config mapping to a YAML file and return its path."""

    def _write(data: Optional[dict], name: str = "config.yml") -> Path:
        path = tmp_path / name
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f)
        return path

    return _write


@pytest.fixture
def make_process():
    """Factory for fake Popen objects whose communicate() returns given output."""
    return _make_process
