"""Branch enumeration and resolution for difflearn.

Resolution runs as a single pass per call: enumerate refs, match the
requested name, and for a remote-only match fetch it and create a local
tracking branch. Nothing is cached between calls because fetches,
checkouts and new commits can change the ref set at any time.
"""
from __future__ import annotations

import logging

from difflearn.exceptions import (
    BranchAlreadyExistsError,
    BranchNotFoundError,
    GitCommandError,
    InvalidArgumentError,
)
from difflearn.git.runner import GitRunner
from difflearn.models import BranchEntry, BranchKind, BranchResolution

logger = logging.getLogger(__name__)

_LOCAL_PREFIX = "refs/heads/"
_REMOTE_PREFIX = "refs/remotes/"
_PREFERRED_REMOTE = "origin"


class BranchResolver:
    """Resolve user-supplied branch names to local branches."""

    def __init__(self, runner: GitRunner):
        self.runner = runner

    def list_branches(self) -> list[BranchEntry]:
        """Enumerate local and remote branches.

        Locals come first, then remotes, each sorted by name. A remote entry
        needs localization when no local branch shares its local name.
        """
        try:
            current_branch = self.runner.get_current_branch()
        except GitCommandError:
            # Unborn HEAD in a repository without commits
            current_branch = ""

        local_branches: dict[str, BranchEntry] = {}
        remote_records = []

        for record in self.runner.list_refs():
            # Symbolic remote HEADs, shortened by git to "<remote>/HEAD" or "<remote>"
            if record.ref.endswith("/HEAD") or record.short_name.endswith("/HEAD"):
                continue

            if record.ref.startswith(_LOCAL_PREFIX):
                local_branches[record.short_name] = BranchEntry(
                    name=record.short_name,
                    full_ref=record.ref,
                    kind=BranchKind.LOCAL,
                    is_current=record.short_name == current_branch,
                    local_name=record.short_name,
                    commit_id=record.commit_id,
                )
            elif record.ref.startswith(_REMOTE_PREFIX):
                remote_name, _, local_name = record.short_name.partition("/")
                if not local_name:
                    continue
                remote_records.append((record, remote_name, local_name))

        remote_branches = [
            BranchEntry(
                name=record.short_name,
                full_ref=record.ref,
                kind=BranchKind.REMOTE,
                remote_name=remote_name,
                local_name=local_name,
                needs_localization=local_name not in local_branches,
                commit_id=record.commit_id,
            )
            for record, remote_name, local_name in remote_records
        ]

        return sorted(local_branches.values(), key=lambda b: b.name) + sorted(
            remote_branches, key=lambda b: b.name
        )

    def find_branch(self, branch_ref: str, branches: list[BranchEntry]) -> BranchEntry | None:
        """Match a branch reference against enumerated entries.

        Priority: short name, full ref, canonical ``refs/heads/<name>`` or
        ``refs/remotes/<name>`` form, then a remote branch whose local name
        equals the input (preferring ``origin``).
        """
        wanted = branch_ref.strip()
        if not wanted:
            return None

        for branch in branches:
            if branch.name == wanted:
                return branch

        for branch in branches:
            if branch.full_ref == wanted:
                return branch

        for branch in branches:
            prefix = _LOCAL_PREFIX if branch.kind is BranchKind.LOCAL else _REMOTE_PREFIX
            if f"{prefix}{branch.name}" == wanted:
                return branch

        candidates = [
            branch for branch in branches
            if branch.kind is BranchKind.REMOTE and branch.local_name == wanted
        ]
        for branch in candidates:
            if branch.remote_name == _PREFERRED_REMOTE:
                return branch
        return candidates[0] if candidates else None

    def ensure_local_branch(self, branch_ref: str) -> BranchResolution:
        """Resolve ``branch_ref`` to a local branch, creating one if needed.

        Repeated calls converge: once the tracking branch exists the short
        name matches it directly and no further mutation happens.

        Raises:
            InvalidArgumentError: If branch_ref is empty.
            BranchNotFoundError: If nothing matches.
            GitCommandError: If fetch or branch creation fails.
        """
        if not branch_ref or not branch_ref.strip():
            raise InvalidArgumentError("branch name is required")

        selected = self.find_branch(branch_ref, self.list_branches())
        if selected is None:
            raise BranchNotFoundError(branch_ref)

        if selected.kind is BranchKind.LOCAL:
            return BranchResolution(
                input=branch_ref,
                resolved_local_branch_name=selected.name,
            )

        remote_name = selected.remote_name or ""
        local_name = selected.local_name
        logger.info("Fetching %s from %s", local_name, remote_name)
        self.runner.fetch(remote_name, local_name)

        localized = False
        if not self.runner.local_branch_exists(local_name):
            try:
                self.runner.create_tracking_branch(local_name, remote_name, local_name)
                localized = True
                logger.info("Created local branch %s tracking %s", local_name, selected.name)
            except BranchAlreadyExistsError:
                logger.info("Local branch %s appeared concurrently; reusing it", local_name)

        action = "created a local tracking branch" if localized else "resolved to local branch"
        return BranchResolution(
            input=branch_ref,
            resolved_local_branch_name=local_name,
            was_remote=True,
            localized=localized,
            remote_ref=selected.name,
            message=f"DiffLearn fetched {selected.name} and {action} {local_name} for comparison and learning.",
        )
