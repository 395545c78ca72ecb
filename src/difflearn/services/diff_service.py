"""Change retrieval service for difflearn."""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from difflearn.config import DEFAULT_CONTEXT_LINES, DEFAULT_HISTORY_LIMIT
from difflearn.exceptions import InvalidArgumentError
from difflearn.git.branches import BranchResolver
from difflearn.git.diff_parser import DiffParser
from difflearn.git.runner import Commit, GitRunner
from difflearn.models import (
    BranchComparison,
    BranchDiff,
    BranchEntry,
    BranchMode,
    DiffKind,
    ParsedFileDiff,
    SwitchOutcome,
)

logger = logging.getLogger(__name__)


def _require(value: str | None, field_name: str) -> str:
    if not value or not value.strip():
        raise InvalidArgumentError(f"{field_name} is required")
    return value.strip()


def _commit_range(commit1: str, commit2: str | None) -> str:
    if commit2:
        return f"{commit1}..{commit2}"
    return f"{commit1}^..{commit1}"


class DiffService:
    """Answer "what changed" queries against one repository.

    Holds no state beyond its collaborators. Only switch_branch and branch
    localization mutate the repository, and callers sharing a repository
    across requests must serialize those themselves.
    """

    def __init__(
        self,
        runner: GitRunner,
        parser: DiffParser | None = None,
        resolver: BranchResolver | None = None,
        context_lines: int = DEFAULT_CONTEXT_LINES,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        self.runner = runner
        self.parser = parser or DiffParser()
        self.resolver = resolver or BranchResolver(runner)
        self.context_lines = context_lines
        self.history_limit = history_limit

    def is_repo(self) -> bool:
        """Check whether the configured path is a git work tree."""
        return self.runner.is_repo()

    def get_local_diff(self, staged: bool = False, context_lines: int | None = None) -> list[ParsedFileDiff]:
        """Diff the working tree against the index, or the index against HEAD."""
        context = self.context_lines if context_lines is None else context_lines
        raw = self.runner.get_diff(staged=staged, context_lines=context)
        return self.parser.parse(raw)

    def get_all_local_changes(self) -> tuple[list[ParsedFileDiff], list[ParsedFileDiff]]:
        """Return (staged, unstaged) changes."""
        staged = self.get_local_diff(staged=True)
        unstaged = self.get_local_diff(staged=False)
        return staged, unstaged

    def get_commit_diff(self, commit1: str, commit2: str | None = None) -> list[ParsedFileDiff]:
        """Diff one commit against its parent, or the range between two commits."""
        commit1 = _require(commit1, "commit1")
        raw = self.runner.get_diff(_commit_range(commit1, commit2), context_lines=self.context_lines)
        return self.parser.parse(raw)

    def get_file_diff(self, path: str, commit: str | None = None) -> list[ParsedFileDiff]:
        """Diff a single path in the working tree or within one commit."""
        path = _require(path, "path")
        range_expr = _commit_range(commit, None) if commit else None
        raw = self.runner.get_diff(range_expr, context_lines=self.context_lines, path=path)
        return self.parser.parse(raw)

    def get_branch_diff(
        self,
        base: str,
        target: str,
        mode: BranchMode | str | None = None,
    ) -> BranchDiff:
        """Compare two branches, localizing remote-only names first.

        A request without a mode compares in triple-dot mode.
        """
        base = _require(base, "base")
        target = _require(target, "target")
        effective_mode = BranchMode.normalize(mode)

        # Sequential: both resolutions may fetch and create branches
        base_resolved = self.resolver.ensure_local_branch(base)
        target_resolved = self.resolver.ensure_local_branch(target)

        raw = self.runner.get_diff(
            effective_mode.range_expr(
                base_resolved.resolved_local_branch_name,
                target_resolved.resolved_local_branch_name,
            ),
            context_lines=self.context_lines,
        )

        localized_branches: list[str] = []
        messages: list[str] = []
        for resolution in (base_resolved, target_resolved):
            name = resolution.resolved_local_branch_name
            if resolution.localized and name not in localized_branches:
                localized_branches.append(name)
            if resolution.message and resolution.message not in messages:
                messages.append(resolution.message)

        return BranchDiff(
            files=self.parser.parse(raw),
            comparison=BranchComparison(
                base_resolved=base_resolved.resolved_local_branch_name,
                target_resolved=target_resolved.resolved_local_branch_name,
                mode=effective_mode,
                localized_branches=localized_branches,
                messages=messages,
            ),
        )

    def get_raw_diff(
        self,
        kind: DiffKind | str,
        commit1: str | None = None,
        commit2: str | None = None,
        base: str | None = None,
        target: str | None = None,
        mode: BranchMode | str | None = None,
    ) -> str:
        """Get unparsed diff text for prompt building.

        Branch names are passed to git as given; no localization happens here.
        """
        try:
            kind = DiffKind(kind)
        except ValueError as e:
            raise InvalidArgumentError(f"unknown diff type: {kind}") from e

        if kind is DiffKind.LOCAL:
            return self.runner.get_diff()
        if kind is DiffKind.STAGED:
            return self.runner.get_diff(staged=True)
        if kind is DiffKind.COMMIT:
            return self.runner.get_diff(_commit_range(_require(commit1, "commit1"), commit2))
        return self.runner.get_diff(
            BranchMode.normalize(mode).range_expr(_require(base, "base"), _require(target, "target"))
        )

    def get_commit_history(self, limit: int | None = None, since: str | None = None) -> list[Commit]:
        """List recent commits with their touched files.

        Args:
            limit: Maximum number of commits; non-positive uses the default.
            since: Only commits after this date (any form ``git log --since`` accepts).
        """
        if limit is None or limit <= 0:
            limit = self.history_limit
        return self.runner.get_commits(limit=limit, since=since)

    def get_current_branch(self) -> str:
        return self.runner.get_current_branch()

    def list_branches(self) -> list[BranchEntry]:
        return self.resolver.list_branches()

    def switch_branch(self, branch_ref: str, auto_stash: bool = False) -> SwitchOutcome:
        """Check out ``branch_ref``, localizing and stashing as needed.

        Returns:
            The switch outcome with an ordered audit trail of side effects.
        """
        branch_ref = _require(branch_ref, "branch")
        previous_branch = self.runner.get_current_branch()
        resolution = self.resolver.ensure_local_branch(branch_ref)
        target = resolution.resolved_local_branch_name

        messages: list[str] = []
        if resolution.message:
            messages.append(resolution.message)

        stash_created = False
        stash_message = None
        if auto_stash and self.runner.has_uncommitted_changes():
            timestamp = datetime.now(timezone.utc).isoformat()
            candidate = f"DiffLearn auto-stash before switching to {target} at {timestamp}"
            if self.runner.stash_push(candidate):
                stash_created = True
                stash_message = candidate
                messages.append(f"Created stash: {candidate}")
                logger.info("Stashed local changes: %s", candidate)

        self.runner.checkout(target)
        current_branch = self.runner.get_current_branch()
        messages.append(f"Switched from {previous_branch} to {current_branch}.")
        logger.info("Switched from %s to %s", previous_branch, current_branch)

        return SwitchOutcome(
            previous_branch=previous_branch,
            current_branch=current_branch,
            stash_created=stash_created,
            stash_message=stash_message,
            localized_branch=target if resolution.localized else None,
            messages=messages,
        )
