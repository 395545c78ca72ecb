"""Tests for the DiffFormatter module."""
from __future__ import annotations

import json

import pytest

from difflearn.git.diff_parser import DiffParser
from difflearn.git.formatter import DiffFormatter
from difflearn.models import ParsedFileDiff

RENAME_DIFF = """diff --git a/old.txt b/new.txt
similarity index 100%
rename from old.txt
rename to new.txt"""


@pytest.fixture
def formatter() -> DiffFormatter:
    return DiffFormatter()


@pytest.fixture
def parsed(diff_parser: DiffParser, sample_diff_output: str) -> list[ParsedFileDiff]:
    return diff_parser.parse(sample_diff_output)


class TestTerminalOutput:
    """Styled terminal rendering."""

    def test_file_headers(self, formatter: DiffFormatter, parsed: list[ParsedFileDiff]):
        text = formatter.to_text(parsed)

        assert "+ New: src/main.py" in text
        assert "- Deleted: src/utils.py" in text
        assert "Modified: src/app.py" in text
        assert "@@ -1,5 +1,6 @@" in text

    def test_line_numbers(self, formatter: DiffFormatter, parsed: list[ParsedFileDiff]):
        text = formatter.to_text(parsed)
        assert "        3 │ +    new_call()" in text
        assert "   2      │ -    old_call()" in text

    def test_line_numbers_can_be_hidden(self, formatter: DiffFormatter, parsed: list[ParsedFileDiff]):
        text = formatter.to_text(parsed, show_line_numbers=False)
        assert "│" not in text
        assert "+    new_call()" in text

    def test_rename_header(self, formatter: DiffFormatter, diff_parser: DiffParser):
        text = formatter.to_text(diff_parser.parse(RENAME_DIFF))
        assert "→ Renamed: old.txt → new.txt" in text

    def test_additions_are_styled_green(self, formatter: DiffFormatter, parsed: list[ParsedFileDiff]):
        rendered = formatter.to_terminal(parsed)
        styles = {str(span.style) for span in rendered.spans}
        assert "green" in styles
        assert "red" in styles


class TestReports:
    """Markdown, JSON, summary and unified output."""

    def test_markdown(self, formatter: DiffFormatter, parsed: list[ParsedFileDiff]):
        md = formatter.to_markdown(parsed)

        assert md.startswith("# Git Diff Summary")
        assert "**Files changed:** 3" in md
        assert "**Additions:** +7 | **Deletions:** -4" in md
        assert "## src/main.py (new)" in md
        assert "## src/utils.py (deleted)" in md
        assert "## src/app.py\n" in md
        assert "```diff" in md

    def test_json(self, formatter: DiffFormatter, parsed: list[ParsedFileDiff]):
        payload = json.loads(formatter.to_json(parsed))

        assert payload["summary"] == {"files": 3, "additions": 7, "deletions": 4}
        first = payload["files"][0]
        assert first["new_path"] == "src/main.py"
        assert first["additions"] == 5
        assert first["hunks"][0]["lines"][0]["kind"] == "addition"

    def test_summary(self, formatter: DiffFormatter, parsed: list[ParsedFileDiff]):
        summary = formatter.to_summary(parsed)

        assert summary.startswith("3 file(s) changed, +7 -4")
        assert "+ src/main.py" in summary
        assert "- src/utils.py" in summary
        assert "M src/app.py" in summary

    def test_empty_summary(self, formatter: DiffFormatter):
        assert formatter.to_summary([]).startswith("0 file(s) changed, +0 -0")

    def test_unified_reparses(self, formatter: DiffFormatter, parsed: list[ParsedFileDiff], diff_parser: DiffParser):
        again = diff_parser.parse(formatter.to_unified(parsed))
        assert [f.new_path for f in again] == [f.new_path for f in parsed]
