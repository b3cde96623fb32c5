"""
Tests for RgSearcher - content search with ripgrep.
"""

import subprocess
from unittest.mock import patch

import pytest

from reposcope.errors import (
    EmptyPatternError,
    MalformedOutputError,
    SearchTimeoutError,
    ToolUnavailableError,
)
from reposcope.external.results import ContentResult
from reposcope.external.rg_searcher import RgSearcher

WHICH = "reposcope.external.tools.shutil.which"
POPEN = "reposcope.external.process.subprocess.Popen"


class TestRgSearcherCommand:
    """Test suite for rg command construction."""

    def test_build_command(self):
        assert RgSearcher().build_command("def main", "/r/a") == [
            "rg", "--line-number", "--column", "--no-heading", "--with-filename",
            "--color", "never", "--hidden", "--follow", "--text",
            "-g", "!.git/**", "--max-count", "50", "def main", "/r/a",
        ]

    def test_max_count_is_configurable(self):
        command = RgSearcher(max_count=5).build_command("x", "/r/a")

        assert command[command.index("--max-count") + 1] == "5"


class TestRgSearcherParsing:
    """Test suite for parsing rg output lines."""

    def test_parse_line(self):
        result = RgSearcher().parse_line("/r/a/src/x.py:12:5:    return 1", "a", "/r/a")

        assert result == ContentResult(
            repo_alias="a",
            relative_path="src/x.py",
            full_path="/r/a/src/x.py",
            line_number=12,
            column=5,
            line_content="    return 1",
        )
        assert result.display_text == "a:src/x.py:12: return 1"

    def test_parse_line_keeps_colons_in_content(self):
        """Test that content after the third separator is kept whole."""
        result = RgSearcher().parse_line("/r/a/c.yml:3:1:url: http://x", "a", "/r/a")

        assert result.line_content == "url: http://x"

    def test_parse_line_strips_carriage_return(self):
        result = RgSearcher().parse_line("/r/a/w.txt:1:1:dos line\r", "a", "/r/a")

        assert result.line_content == "dos line"

    @pytest.mark.parametrize(
        "line",
        ["/r/a/x.py:12:oops", "/r/a/x.py:twelve:1:text", "/r/a/x.py:1:col:text"],
    )
    def test_parse_line_rejects_malformed(self, line):
        with pytest.raises(MalformedOutputError):
            RgSearcher().parse_line(line, "a", "/r/a")

    def test_parse_output_drops_malformed_lines(self):
        """Test that malformed lines are skipped and the rest parsed."""
        lines = ["/r/a/x.py:1:1:good", "garbage", "", "/r/a/y.py:2:3:also good"]

        results = RgSearcher().parse_output(lines, "a", "/r/a")

        assert [r.relative_path for r in results] == ["x.py", "y.py"]


class TestRgSearcherSearch:
    """Test suite for RgSearcher.search."""

    def test_search_without_rg_raises(self):
        with patch(WHICH, return_value=None):
            with pytest.raises(ToolUnavailableError) as exc_info:
                RgSearcher().search("x", {"a": "/r/a"})

        assert exc_info.value.tool_name == "ripgrep"

    def test_empty_pattern_raises(self):
        """Test that content search requires a pattern."""
        with patch(WHICH, return_value="/usr/bin/rg"), patch(POPEN) as mock_popen:
            with pytest.raises(EmptyPatternError):
                RgSearcher().search("", {"a": "/r/a"})

        mock_popen.assert_not_called()

    def test_search_across_repositories(self, make_process):
        outputs = {
            "/r/a": make_process(stdout="/r/a/x.py:1:1:import os\n"),
            "/r/b": make_process(returncode=1),
            "/r/c": make_process(returncode=2, stderr="regex parse error"),
        }

        with patch(WHICH, return_value="/usr/bin/rg"), patch(POPEN) as mock_popen:
            mock_popen.side_effect = lambda command, **kwargs: outputs[command[-1]]

            results = RgSearcher().search(
                "import", {"a": "/r/a", "b": "/r/b", "c": "/r/c"}
            )

        assert len(results) == 1
        assert results[0].display_text == "a:x.py:1: import os"

    def test_killed_process_reports_timeout(self, make_process):
        """Test that a process outliving the deadline surfaces a timeout."""
        slow = make_process()
        slow.communicate.side_effect = [
            subprocess.TimeoutExpired("rg", 0.1),
            ("", ""),
        ]

        with patch(WHICH, return_value="/usr/bin/rg"), patch(POPEN, return_value=slow):
            with pytest.raises(SearchTimeoutError) as exc_info:
                RgSearcher(timeout=0.1).search("x", {"a": "/r/a"})

        slow.kill.assert_called_once()
        assert exc_info.value.results == []
