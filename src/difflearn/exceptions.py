"""Custom exceptions for difflearn."""
from __future__ import annotations


class DiffLearnError(Exception):
    """Base exception for difflearn."""
    pass


class ConfigError(DiffLearnError):
    """Configuration errors."""
    pass


class InvalidArgumentError(DiffLearnError):
    """A required identifier is missing or invalid."""
    pass


class BranchNotFoundError(DiffLearnError):
    """No local or remote branch matched the requested name."""

    def __init__(self, branch: str):
        self.branch = branch
        super().__init__(f"branch not found: {branch}")


class GitCommandError(DiffLearnError):
    """A git invocation exited non-zero or could not be started."""

    def __init__(self, args: list[str], returncode: int | None, stderr: str = ""):
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr.strip()
        detail = self.stderr or f"exit status {returncode}"
        super().__init__(f"git {' '.join(self.args_list)} failed: {detail}")


class BranchAlreadyExistsError(GitCommandError):
    """Branch creation failed because the local branch is already there."""

    def __init__(self, branch: str, args: list[str], returncode: int | None, stderr: str = ""):
        self.branch = branch
        super().__init__(args, returncode, stderr)
