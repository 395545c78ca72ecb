"""Domain entities for difflearn."""
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, computed_field, model_validator


class LineKind(str, Enum):
    """Kind of a line inside a hunk."""
    CONTEXT = "context"
    ADDITION = "addition"
    DELETION = "deletion"


class BranchKind(str, Enum):
    """Namespace a branch ref lives in."""
    LOCAL = "local"
    REMOTE = "remote"


class BranchMode(str, Enum):
    """How two branches are compared.

    ``triple`` diffs target against the merge base (``base...target``),
    ``double`` diffs the two tips directly (``base..target``).
    """
    TRIPLE = "triple"
    DOUBLE = "double"

    @classmethod
    def normalize(cls, value: BranchMode | str | None) -> BranchMode:
        """Map any value other than ``double`` to ``triple``."""
        if value is None:
            return cls.TRIPLE
        if isinstance(value, BranchMode):
            return value
        if value.strip().lower() == cls.DOUBLE.value:
            return cls.DOUBLE
        return cls.TRIPLE

    def range_expr(self, base: str, target: str) -> str:
        """Build the git range expression for this mode."""
        separator = ".." if self is BranchMode.DOUBLE else "..."
        return f"{base}{separator}{target}"


class DiffKind(str, Enum):
    """Query shapes accepted by raw diff retrieval."""
    LOCAL = "local"
    STAGED = "staged"
    COMMIT = "commit"
    BRANCH = "branch"


class ParsedLine(BaseModel):
    """One line within a hunk, prefix stripped."""
    kind: LineKind
    text: str
    old_line_number: int | None = None
    new_line_number: int | None = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_line_numbers(self) -> ParsedLine:
        if self.kind is LineKind.ADDITION and self.old_line_number is not None:
            raise ValueError("addition lines carry no old line number")
        if self.kind is LineKind.DELETION and self.new_line_number is not None:
            raise ValueError("deletion lines carry no new line number")
        return self

    @property
    def prefix(self) -> str:
        if self.kind is LineKind.ADDITION:
            return "+"
        if self.kind is LineKind.DELETION:
            return "-"
        return " "


class ParsedHunk(BaseModel):
    """A contiguous change region bounded by an ``@@`` header."""
    old_start: int = Field(ge=0)
    old_line_count: int = Field(ge=0)
    new_start: int = Field(ge=0)
    new_line_count: int = Field(ge=0)
    header_text: str
    lines: list[ParsedLine] = Field(default_factory=list)

    model_config = {"frozen": True}


class ParsedFileDiff(BaseModel):
    """One file's change."""
    old_path: str
    new_path: str
    is_binary: bool = False
    is_new: bool = False
    is_deleted: bool = False
    is_renamed: bool = False
    hunks: list[ParsedHunk] = Field(default_factory=list)

    model_config = {"frozen": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def additions(self) -> int:
        return sum(
            1 for hunk in self.hunks for line in hunk.lines if line.kind is LineKind.ADDITION
        )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def deletions(self) -> int:
        return sum(
            1 for hunk in self.hunks for line in hunk.lines if line.kind is LineKind.DELETION
        )

    @property
    def display_path(self) -> str:
        """Path to show for the file; the old path for deletions."""
        return self.old_path if self.is_deleted else self.new_path


class DiffStats(BaseModel):
    """Aggregate counters over a set of file diffs."""
    files: int = 0
    additions: int = 0
    deletions: int = 0


class BranchEntry(BaseModel):
    """One branch ref known to the repository at enumeration time."""
    name: str
    full_ref: str
    kind: BranchKind
    is_current: bool = False
    remote_name: str | None = None
    local_name: str
    needs_localization: bool = False
    commit_id: str = ""

    model_config = {"frozen": True}


class BranchResolution(BaseModel):
    """Outcome of resolving a user-supplied branch reference."""
    input: str
    resolved_local_branch_name: str
    was_remote: bool = False
    localized: bool = False
    remote_ref: str | None = None
    message: str | None = None

    model_config = {"frozen": True}


class SwitchOutcome(BaseModel):
    """Result of a guarded branch switch, with its audit trail."""
    previous_branch: str
    current_branch: str
    stash_created: bool = False
    stash_message: str | None = None
    localized_branch: str | None = None
    messages: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class BranchComparison(BaseModel):
    """Metadata describing how a branch diff was produced."""
    base_resolved: str
    target_resolved: str
    mode: BranchMode
    localized_branches: list[str] = Field(default_factory=list)
    messages: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}


class BranchDiff(BaseModel):
    """A branch-to-branch diff paired with its comparison metadata."""
    files: list[ParsedFileDiff] = Field(default_factory=list)
    comparison: BranchComparison

    model_config = {"frozen": True}
