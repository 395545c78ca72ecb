"""difflearn - structured git change extraction and branch resolution."""
from difflearn.models import (
    BranchDiff,
    BranchEntry,
    BranchResolution,
    ParsedFileDiff,
    ParsedHunk,
    ParsedLine,
    SwitchOutcome,
)

__version__ = "0.1.0"

__all__ = [
    "BranchDiff",
    "BranchEntry",
    "BranchResolution",
    "ParsedFileDiff",
    "ParsedHunk",
    "ParsedLine",
    "SwitchOutcome",
]
