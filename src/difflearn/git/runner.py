"""Git runner implementation using subprocess."""
from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from difflearn.exceptions import BranchAlreadyExistsError, GitCommandError

logger = logging.getLogger(__name__)

# Minimum parts expected in git log format output
_MIN_LOG_PARTS = 4
_LOG_FIELD_SEPARATOR = "\x1f"
_LOG_RECORD_SEPARATOR = "\x1e"
_LOG_FORMAT = "%x1e%H%x1f%s%x1f%an%x1f%aI"

# Tab-separated refname, short name and object id per ref
REF_FORMAT = "%(refname)%09%(refname:short)%09%(objectname)"
_MIN_REF_PARTS = 2

_STASH_REF = "refs/stash"
_EXIT_REF_MISSING = 1


@dataclass
class Commit:
    """Represents a git commit."""
    hash: str
    message: str
    author: str
    date: datetime
    files_changed: list[str] = field(default_factory=list)


@dataclass
class RefRecord:
    """One line of ``for-each-ref`` output."""
    ref: str
    short_name: str
    commit_id: str = ""


class GitRunner:
    """Git runner using subprocess to execute git commands.

    Every method maps onto one or two git invocations. Failures surface as
    GitCommandError carrying git's own stderr, never as empty output.
    """

    def __init__(self, repo_path: Path | str | None = None, git_executable: str = "git"):
        """Initialize the GitRunner.

        Args:
            repo_path: Path to the git repository. Defaults to current directory.
            git_executable: Name or path of the git binary.
        """
        self.repo_path = Path(repo_path) if repo_path else Path.cwd()
        self.git_executable = git_executable

    def _run_git(self, args: list[str], strip: bool = True) -> str:
        """Run a git command and return the output.

        Args:
            args: Git command arguments.
            strip: Strip surrounding whitespace from stdout. Diff output is
                returned untouched since trailing context lines may be blank.

        Returns:
            Command output.

        Raises:
            GitCommandError: If the git command fails or git is missing.
        """
        cmd = [self.git_executable, "-C", str(self.repo_path), *args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(  # noqa: S603
                cmd,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=True,
            )
        except FileNotFoundError as e:
            raise GitCommandError(args, None, f"git executable not found: {self.git_executable}") from e
        except subprocess.CalledProcessError as e:
            raise GitCommandError(args, e.returncode, e.stderr or "") from e
        return result.stdout.strip() if strip else result.stdout

    def _probe(self, args: list[str]) -> int:
        """Run a git command for its exit code only."""
        cmd = [self.git_executable, "-C", str(self.repo_path), *args]
        logger.debug("Probing %s", " ".join(cmd))
        try:
            result = subprocess.run(  # noqa: S603
                cmd,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except FileNotFoundError as e:
            raise GitCommandError(args, None, f"git executable not found: {self.git_executable}") from e
        return result.returncode

    def is_repo(self) -> bool:
        """Return True if repo_path is inside a git work tree."""
        try:
            return self._probe(["rev-parse", "--is-inside-work-tree"]) == 0
        except GitCommandError:
            return False

    def get_repo_root(self) -> Path:
        """Get the absolute top-level directory of the work tree."""
        return Path(self._run_git(["rev-parse", "--show-toplevel"]))

    def get_diff(
        self,
        range_expr: str | None = None,
        staged: bool = False,
        context_lines: int | None = None,
        path: str | None = None,
    ) -> str:
        """Get raw unified diff text.

        Args:
            range_expr: Tree-ish or range expression (``a..b``, ``a^..a``,
                ``base...target``). Omit for the working tree.
            staged: Diff the index against HEAD instead of the working tree.
            context_lines: Number of context lines (``-U<n>``).
            path: Restrict the diff to a single path.

        Returns:
            The diff content.
        """
        # Fixed prefixes regardless of diff.noprefix or diff.mnemonicPrefix
        args = ["diff", "--no-color", "--no-ext-diff", "--src-prefix=a/", "--dst-prefix=b/"]
        if staged:
            args.append("--cached")
        if context_lines is not None:
            args.append(f"-U{context_lines}")
        if range_expr:
            args.append(range_expr)
        if path:
            args.extend(["--", path])
        return self._run_git(args, strip=False)

    def get_commits(self, limit: int = 20, since: str | None = None, offset: int = 0) -> list[Commit]:
        """Get commits with the files each one touched, in a single git call.

        Args:
            limit: Maximum number of commits to return.
            since: Get commits after this date (optional).
            offset: Number of commits to skip.

        Returns:
            List of Commit objects, newest first.
        """
        args = ["log", f"--max-count={limit}", "--name-only", f"--format={_LOG_FORMAT}"]
        if since:
            args.append(f"--since={since}")
        if offset > 0:
            args.append(f"--skip={offset}")

        output = self._run_git(args)
        return self._parse_commits(output)

    def _parse_commits(self, output: str) -> list[Commit]:
        """Parse ``git log --name-only`` output into Commit objects."""
        commits = []
        for record in output.split(_LOG_RECORD_SEPARATOR):
            if not record.strip():
                continue
            header, _, file_block = record.partition("\n")
            parts = header.split(_LOG_FIELD_SEPARATOR)
            if len(parts) < _MIN_LOG_PARTS:
                continue
            commit_hash, message, author, date_str = parts[:_MIN_LOG_PARTS]
            commits.append(Commit(
                hash=commit_hash.strip(),
                message=message,
                author=author,
                date=datetime.fromisoformat(date_str.strip()),
                files_changed=[f.strip() for f in file_block.split("\n") if f.strip()],
            ))
        return commits

    def get_current_branch(self) -> str:
        """Get the short name of the checked-out branch (``HEAD`` when detached)."""
        return self._run_git(["rev-parse", "--abbrev-ref", "HEAD"])

    def list_refs(self) -> list[RefRecord]:
        """Enumerate local and remote-tracking branch refs."""
        output = self._run_git(["for-each-ref", f"--format={REF_FORMAT}", "refs/heads", "refs/remotes"])
        records = []
        for line in output.split("\n"):
            line = line.strip()
            if not line:
                continue
            parts = line.split("\t")
            if len(parts) < _MIN_REF_PARTS:
                continue
            records.append(RefRecord(
                ref=parts[0],
                short_name=parts[1],
                commit_id=parts[2] if len(parts) > _MIN_REF_PARTS else "",
            ))
        return records

    def local_branch_exists(self, name: str) -> bool:
        """Check for ``refs/heads/<name>`` via exit status, not output text."""
        return self._probe(["show-ref", "--verify", "--quiet", f"refs/heads/{name}"]) == 0

    def fetch(self, remote: str, branch: str) -> None:
        """Fetch a single branch from a remote."""
        self._run_git(["fetch", remote, branch])

    def create_tracking_branch(self, local_name: str, remote: str, branch: str) -> None:
        """Create ``local_name`` tracking ``remote/branch``.

        Raises:
            BranchAlreadyExistsError: If creation failed because the branch exists.
            GitCommandError: For any other failure.
        """
        args = ["branch", "--track", local_name, f"{remote}/{branch}"]
        try:
            self._run_git(args)
        except GitCommandError as e:
            if self.local_branch_exists(local_name):
                raise BranchAlreadyExistsError(local_name, args, e.returncode, e.stderr) from e
            raise

    def has_uncommitted_changes(self) -> bool:
        """Report whether the work tree has staged, unstaged or untracked changes."""
        return bool(self._run_git(["status", "--porcelain"]))

    def _stash_head(self) -> str | None:
        if self._probe(["rev-parse", "-q", "--verify", _STASH_REF]) == _EXIT_REF_MISSING:
            return None
        return self._run_git(["rev-parse", "-q", "--verify", _STASH_REF])

    def stash_push(self, message: str) -> bool:
        """Stash all changes including untracked files.

        Returns:
            True if a stash entry was created, False if there was nothing to stash.
        """
        before = self._stash_head()
        self._run_git(["stash", "push", "-u", "-m", message])
        return self._stash_head() != before

    def stash_pop(self) -> None:
        """Restore the most recent stash entry."""
        self._run_git(["stash", "pop"])

    def checkout(self, branch: str) -> None:
        """Check out a local branch."""
        self._run_git(["checkout", branch])
