"""Unified diff parser for difflearn."""
from __future__ import annotations

import re
from collections.abc import Iterable

from difflearn.models import (
    DiffStats,
    LineKind,
    ParsedFileDiff,
    ParsedHunk,
    ParsedLine,
)

# Git diff header patterns
_GIT_DIFF_HEADER_PREFIX = "diff --git"
_FILE_SPLIT_RE = re.compile(r"^(?=diff --git )", re.MULTILINE)
_HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$")
_UNQUOTED_PATHS_RE = re.compile(r"^a/(.+?) b/(.+)$")

_NEW_FILE_MARKER = "new file mode"
_DELETED_FILE_MARKER = "deleted file mode"
_RENAME_FROM_MARKER = "rename from "
_RENAME_TO_MARKER = "rename to "
_BINARY_MARKERS = ("Binary files ", "GIT binary patch")
_DEV_NULL = "/dev/null"

# Hunk headers omit the count for single-line ranges
_DEFAULT_HUNK_COUNT = 1

_LINE_KINDS = {
    "+": LineKind.ADDITION,
    "-": LineKind.DELETION,
    " ": LineKind.CONTEXT,
}


def _parse_git_path(path: str) -> str:
    """Extract the path from a git diff header component.

    Handles both:
    - Unquoted: b/path or a/path
    - Quoted: "b/path" or "a/path"

    Args:
        path: The path component from the diff header (e.g., 'b/file.txt' or '"b/file.txt"')

    Returns:
        The file path without the a/ or b/ prefix
    """
    # A truncated header may lack the closing quote
    if path.startswith('"'):
        path = path[1:]
    if path.endswith('"'):
        path = path[:-1]

    if path.startswith("a/") or path.startswith("b/"):
        path = path[2:]

    return path


def _split_quoted_pair(remainder: str) -> tuple[str, str] | None:
    """Split a quoted ``"a/old" "b/new"`` header remainder."""
    first_quote_end = remainder.find('"', 1)
    if first_quote_end == -1:
        return None
    second_quote_start = remainder.find('"', first_quote_end + 1)
    if second_quote_start == -1:
        return None
    second_quote_end = remainder.find('"', second_quote_start + 1)
    if second_quote_end == -1:
        second_quote_end = len(remainder)
    return (
        remainder[: first_quote_end + 1],
        remainder[second_quote_start: second_quote_end + 1],
    )


def _extract_paths(line: str) -> tuple[str, str] | None:
    """Extract the old and new paths from a 'diff --git' line.

    Handles both quoted and unquoted formats:
    - diff --git a/path b/path
    - diff --git "a/path with spaces" "b/path with spaces"

    Returns:
        (old_path, new_path) without prefixes, or None if parsing fails
    """
    if not line.startswith(_GIT_DIFF_HEADER_PREFIX):
        return None

    remainder = line[len(_GIT_DIFF_HEADER_PREFIX):].strip()
    if not remainder:
        return None

    if remainder.startswith('"'):
        pair = _split_quoted_pair(remainder)
        if pair is None:
            return None
        return _parse_git_path(pair[0]), _parse_git_path(pair[1])

    # When both sides name the same file the header is symmetric, which
    # also covers paths that themselves contain " b/".
    half = (len(remainder) - 1) // 2
    if len(remainder) % 2 == 1 and remainder[half] == " ":
        old, new = remainder[:half], remainder[half + 1:]
        if old.startswith("a/") and new.startswith("b/") and old[2:] == new[2:]:
            return old[2:], new[2:]

    match = _UNQUOTED_PATHS_RE.match(remainder)
    if match is None:
        return None
    return match.group(1), match.group(2)


class DiffParser:
    """Parser for git unified diff output.

    Parsing is total: malformed input yields a partial or empty result,
    never an exception.
    """

    def parse(self, diff_output: str) -> list[ParsedFileDiff]:
        """Parse raw diff text into one ParsedFileDiff per file block."""
        if not diff_output or not diff_output.strip():
            return []

        files = []
        for block in _FILE_SPLIT_RE.split(diff_output):
            if not block.startswith(_GIT_DIFF_HEADER_PREFIX):
                continue
            parsed = self._parse_file_block(block)
            if parsed is not None:
                files.append(parsed)
        return files

    def _parse_file_block(self, block: str) -> ParsedFileDiff | None:  # noqa: PLR0912
        lines = block.split("\n")
        paths = _extract_paths(lines[0])
        if paths is None:
            return None
        old_path, new_path = paths

        is_binary = False
        is_new = False
        is_deleted = False
        rename_marked = False

        hunks: list[ParsedHunk] = []
        header: dict | None = None
        hunk_lines: list[ParsedLine] = []
        old_line_number = 0
        new_line_number = 0

        for line in lines[1:]:
            match = _HUNK_HEADER_RE.match(line)
            if match:
                if header is not None:
                    hunks.append(ParsedHunk(**header, lines=hunk_lines))
                old_start = int(match.group(1))
                new_start = int(match.group(3))
                header = {
                    "old_start": old_start,
                    "old_line_count": _count(match.group(2)),
                    "new_start": new_start,
                    "new_line_count": _count(match.group(4)),
                    "header_text": line,
                }
                hunk_lines = []
                old_line_number = old_start
                new_line_number = new_start
                continue

            if header is None:
                # File metadata before the first hunk
                if line.startswith(_NEW_FILE_MARKER):
                    is_new = True
                elif line.startswith(_DELETED_FILE_MARKER):
                    is_deleted = True
                elif line.startswith(_RENAME_FROM_MARKER):
                    rename_marked = True
                    old_path = line[len(_RENAME_FROM_MARKER):]
                elif line.startswith(_RENAME_TO_MARKER):
                    rename_marked = True
                    new_path = line[len(_RENAME_TO_MARKER):]
                elif line.startswith(_BINARY_MARKERS):
                    is_binary = True
                continue

            kind = _LINE_KINDS.get(line[:1])
            if kind is LineKind.ADDITION:
                hunk_lines.append(ParsedLine(kind=kind, text=line[1:], new_line_number=new_line_number))
                new_line_number += 1
            elif kind is LineKind.DELETION:
                hunk_lines.append(ParsedLine(kind=kind, text=line[1:], old_line_number=old_line_number))
                old_line_number += 1
            elif kind is LineKind.CONTEXT:
                hunk_lines.append(
                    ParsedLine(
                        kind=kind,
                        text=line[1:],
                        old_line_number=old_line_number,
                        new_line_number=new_line_number,
                    )
                )
                old_line_number += 1
                new_line_number += 1

        if header is not None:
            hunks.append(ParsedHunk(**header, lines=hunk_lines))

        if is_binary:
            hunks = []

        return ParsedFileDiff(
            old_path=old_path,
            new_path=new_path,
            is_binary=is_binary,
            is_new=is_new,
            is_deleted=is_deleted,
            is_renamed=rename_marked or old_path != new_path,
            hunks=hunks,
        )

    def get_stats(self, files: Iterable[ParsedFileDiff]) -> DiffStats:
        """Get overall stats for a set of parsed file diffs."""
        stats = DiffStats()
        for diff_file in files:
            stats.files += 1
            stats.additions += diff_file.additions
            stats.deletions += diff_file.deletions
        return stats

    def to_unified_format(self, diff_file: ParsedFileDiff) -> str:
        """Convert a parsed file diff back to unified diff text."""
        lines = [f"diff --git a/{diff_file.old_path} b/{diff_file.new_path}"]

        if diff_file.is_new:
            lines.append(f"{_NEW_FILE_MARKER} 100644")
        elif diff_file.is_deleted:
            lines.append(f"{_DELETED_FILE_MARKER} 100644")

        if diff_file.is_renamed:
            lines.append(f"{_RENAME_FROM_MARKER}{diff_file.old_path}")
            lines.append(f"{_RENAME_TO_MARKER}{diff_file.new_path}")

        old_side = _DEV_NULL if diff_file.is_new else f"a/{diff_file.old_path}"
        new_side = _DEV_NULL if diff_file.is_deleted else f"b/{diff_file.new_path}"

        if diff_file.is_binary:
            lines.append(f"Binary files {old_side} and {new_side} differ")
            return "\n".join(lines)

        if diff_file.hunks:
            lines.append(f"--- {old_side}")
            lines.append(f"+++ {new_side}")

        for hunk in diff_file.hunks:
            lines.append(hunk.header_text)
            for line in hunk.lines:
                lines.append(line.prefix + line.text)

        return "\n".join(lines)


def _count(value: str | None) -> int:
    return int(value) if value is not None else _DEFAULT_HUNK_COUNT
