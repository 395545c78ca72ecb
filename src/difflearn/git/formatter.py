"""Render parsed diffs for terminals, reports and JSON consumers."""
from __future__ import annotations

import json
from collections.abc import Sequence

from rich.text import Text

from difflearn.git.diff_parser import DiffParser
from difflearn.models import LineKind, ParsedFileDiff, ParsedLine

_RULE_WIDTH = 60

_LINE_STYLES = {
    LineKind.ADDITION: "green",
    LineKind.DELETION: "red",
    LineKind.CONTEXT: "bright_black",
}


def _status_label(diff_file: ParsedFileDiff) -> str:
    if diff_file.is_new:
        return "new"
    if diff_file.is_deleted:
        return "deleted"
    if diff_file.is_renamed:
        return "renamed"
    return "modified"


class DiffFormatter:
    """Formatter for parsed file diffs."""

    def __init__(self, parser: DiffParser | None = None):
        self.parser = parser or DiffParser()

    def to_terminal(
        self,
        files: Sequence[ParsedFileDiff],
        show_line_numbers: bool = True,
        show_stats: bool = True,
    ) -> Text:
        """Build a styled rich Text with one section per file."""
        out = Text()
        for diff_file in files:
            out.append("─" * _RULE_WIDTH + "\n", style="bold")
            out.append_text(self._file_header(diff_file))
            out.append("\n")
            if show_stats:
                out.append("  ")
                out.append(f"+{diff_file.additions}", style="green")
                out.append(" ")
                out.append(f"-{diff_file.deletions}", style="red")
                out.append("\n")
            if diff_file.is_binary:
                out.append("  Binary file\n", style="dim")
            out.append("\n")
            for hunk in diff_file.hunks:
                out.append(hunk.header_text + "\n", style="cyan")
                for line in hunk.lines:
                    out.append_text(self._format_line(line, show_line_numbers))
                    out.append("\n")
                out.append("\n")
        return out

    def _file_header(self, diff_file: ParsedFileDiff) -> Text:
        if diff_file.is_new:
            return Text(f"+ New: {diff_file.new_path}", style="bold green")
        if diff_file.is_deleted:
            return Text(f"- Deleted: {diff_file.old_path}", style="bold red")
        if diff_file.is_renamed:
            return Text(f"→ Renamed: {diff_file.old_path} → {diff_file.new_path}", style="bold yellow")
        return Text(f"Modified: {diff_file.new_path}", style="bold blue")

    def _format_line(self, line: ParsedLine, show_line_numbers: bool) -> Text:
        out = Text()
        if show_line_numbers:
            old_num = f"{line.old_line_number:4d}" if line.old_line_number is not None else "    "
            new_num = f"{line.new_line_number:4d}" if line.new_line_number is not None else "    "
            out.append(f"{old_num} {new_num} │ ", style="bright_black")
        out.append(line.prefix + line.text, style=_LINE_STYLES[line.kind])
        return out

    def to_text(self, files: Sequence[ParsedFileDiff], show_line_numbers: bool = True) -> str:
        """Plain, unstyled rendering of to_terminal."""
        return self.to_terminal(files, show_line_numbers=show_line_numbers).plain

    def to_markdown(self, files: Sequence[ParsedFileDiff]) -> str:
        """Render a Markdown report with a fenced diff block per file."""
        stats = self.parser.get_stats(files)
        out = [
            "# Git Diff Summary",
            "",
            f"**Files changed:** {stats.files}",
            f"**Additions:** +{stats.additions} | **Deletions:** -{stats.deletions}",
            "",
        ]
        for diff_file in files:
            status = _status_label(diff_file)
            heading = f"## {diff_file.display_path}"
            if status != "modified":
                heading += f" ({status})"
            out.append(heading)
            if diff_file.additions or diff_file.deletions:
                out.extend([f"*+{diff_file.additions} -{diff_file.deletions}*", ""])
            out.append("```diff")
            for hunk in diff_file.hunks:
                out.append(hunk.header_text)
                out.extend(line.prefix + line.text for line in hunk.lines)
            out.extend(["```", ""])
        return "\n".join(out)

    def to_json(self, files: Sequence[ParsedFileDiff]) -> str:
        """Serialize the files with an aggregate summary."""
        payload = {
            "summary": self.parser.get_stats(files).model_dump(),
            "files": [diff_file.model_dump(mode="json") for diff_file in files],
        }
        return json.dumps(payload, indent=2)

    def to_summary(self, files: Sequence[ParsedFileDiff]) -> str:
        """One line per file prefixed by its status marker."""
        markers = {"new": "+", "deleted": "-", "renamed": "→", "modified": "M"}
        stats = self.parser.get_stats(files)
        listing = [f"{markers[_status_label(f)]} {f.display_path}" for f in files]
        return f"{stats.files} file(s) changed, +{stats.additions} -{stats.deletions}\n\n" + "\n".join(listing)

    def to_unified(self, files: Sequence[ParsedFileDiff]) -> str:
        """Re-serialize every file as unified diff text."""
        return "\n".join(self.parser.to_unified_format(f) for f in files)
