"""Tests for branch enumeration and remote branch localization."""
from __future__ import annotations

from pathlib import Path

import pytest

from difflearn.exceptions import (
    BranchAlreadyExistsError,
    BranchNotFoundError,
    InvalidArgumentError,
)
from difflearn.git.branches import BranchResolver
from difflearn.git.runner import GitRunner
from difflearn.models import BranchEntry, BranchKind
from tests.helpers_git import git


@pytest.fixture
def resolver(cloned_repo: Path) -> BranchResolver:
    return BranchResolver(GitRunner(cloned_repo))


def _local_names(entries: list[BranchEntry]) -> list[str]:
    return [e.name for e in entries if e.kind is BranchKind.LOCAL]


class TestListBranches:
    """Enumeration of local and remote refs."""

    def test_locals_then_remotes(self, resolver: BranchResolver):
        entries = resolver.list_branches()

        kinds = [e.kind for e in entries]
        assert kinds == sorted(kinds, key=lambda k: k is BranchKind.REMOTE)
        assert _local_names(entries) == ["main"]
        assert [e.name for e in entries if e.kind is BranchKind.REMOTE] == ["origin/main", "origin/release"]

    def test_remote_head_is_skipped(self, resolver: BranchResolver):
        assert all(not e.name.endswith("/HEAD") for e in resolver.list_branches())

    def test_entry_fields(self, resolver: BranchResolver):
        entries = {e.name: e for e in resolver.list_branches()}

        main = entries["main"]
        assert main.is_current
        assert main.full_ref == "refs/heads/main"
        assert main.remote_name is None
        assert main.local_name == "main"
        assert len(main.commit_id) == 40

        release = entries["origin/release"]
        assert release.kind is BranchKind.REMOTE
        assert release.remote_name == "origin"
        assert release.local_name == "release"
        assert release.full_ref == "refs/remotes/origin/release"
        assert not release.is_current

    def test_needs_localization(self, resolver: BranchResolver):
        entries = {e.name: e for e in resolver.list_branches()}

        assert entries["origin/release"].needs_localization is True
        assert entries["origin/main"].needs_localization is False
        assert entries["main"].needs_localization is False

    def test_enumeration_reflects_new_branches(self, resolver: BranchResolver, cloned_repo: Path):
        assert "topic" not in _local_names(resolver.list_branches())
        git(cloned_repo, "branch", "topic")
        assert "topic" in _local_names(resolver.list_branches())

    def test_repository_without_commits(self, temp_dir: Path):
        empty = temp_dir / "empty"
        empty.mkdir()
        git(empty, "init", "-q")

        assert BranchResolver(GitRunner(empty)).list_branches() == []


class TestFindBranch:
    """Matching priority for user input."""

    def test_short_name_beats_remote_local_name(self, resolver: BranchResolver):
        match = resolver.find_branch("main", resolver.list_branches())
        assert match is not None
        assert match.kind is BranchKind.LOCAL

    def test_full_ref(self, resolver: BranchResolver):
        match = resolver.find_branch("refs/remotes/origin/release", resolver.list_branches())
        assert match is not None
        assert match.name == "origin/release"

    def test_remote_short_name_fallback(self, resolver: BranchResolver):
        match = resolver.find_branch("release", resolver.list_branches())
        assert match is not None
        assert match.name == "origin/release"

    def test_input_is_trimmed(self, resolver: BranchResolver):
        match = resolver.find_branch("  main ", resolver.list_branches())
        assert match is not None
        assert match.name == "main"

    def test_no_match(self, resolver: BranchResolver):
        assert resolver.find_branch("nope", resolver.list_branches()) is None
        assert resolver.find_branch("   ", resolver.list_branches()) is None

    def test_prefers_origin_among_remotes(self, resolver: BranchResolver):
        entries = [
            BranchEntry(
                name=f"{remote}/shared",
                full_ref=f"refs/remotes/{remote}/shared",
                kind=BranchKind.REMOTE,
                remote_name=remote,
                local_name="shared",
                needs_localization=True,
            )
            for remote in ("fork", "origin")
        ]
        match = resolver.find_branch("shared", entries)
        assert match is not None
        assert match.remote_name == "origin"


class TestEnsureLocalBranch:
    """Resolution, localization and idempotency."""

    def test_local_branch_resolves_without_mutation(self, resolver: BranchResolver):
        before = resolver.list_branches()
        resolution = resolver.ensure_local_branch("main")

        assert resolution.resolved_local_branch_name == "main"
        assert resolution.was_remote is False
        assert resolution.localized is False
        assert resolution.remote_ref is None
        assert resolution.message is None
        assert resolver.list_branches() == before

    def test_remote_only_branch_is_localized(self, resolver: BranchResolver):
        resolution = resolver.ensure_local_branch("release")

        assert resolution.input == "release"
        assert resolution.resolved_local_branch_name == "release"
        assert resolution.was_remote is True
        assert resolution.localized is True
        assert resolution.remote_ref == "origin/release"
        assert "created a local tracking branch" in resolution.message
        assert "release" in _local_names(resolver.list_branches())

    def test_tracking_branch_is_configured(self, resolver: BranchResolver, cloned_repo: Path):
        resolver.ensure_local_branch("origin/release")
        upstream = git(cloned_repo, "rev-parse", "--abbrev-ref", "release@{upstream}")
        assert upstream == "origin/release"

    def test_second_resolution_is_idempotent(self, resolver: BranchResolver):
        first = resolver.ensure_local_branch("release")
        second = resolver.ensure_local_branch("release")

        assert first.localized is True
        assert second.localized is False
        assert second.resolved_local_branch_name == "release"

    def test_remote_ref_with_existing_local_is_reused(self, resolver: BranchResolver):
        resolution = resolver.ensure_local_branch("origin/main")

        assert resolution.was_remote is True
        assert resolution.localized is False
        assert resolution.resolved_local_branch_name == "main"
        assert "resolved to local branch" in resolution.message

    def test_concurrent_creation_is_treated_as_success(self, resolver: BranchResolver, monkeypatch):
        def raise_exists(local_name: str, remote: str, branch: str) -> None:
            raise BranchAlreadyExistsError(local_name, ["branch"], 128, "already exists")

        monkeypatch.setattr(resolver.runner, "create_tracking_branch", raise_exists)

        resolution = resolver.ensure_local_branch("release")

        assert resolution.resolved_local_branch_name == "release"
        assert resolution.localized is False

    def test_unknown_branch_raises(self, resolver: BranchResolver):
        with pytest.raises(BranchNotFoundError, match="branch not found: ghost"):
            resolver.ensure_local_branch("ghost")

    def test_empty_name_raises(self, resolver: BranchResolver):
        with pytest.raises(InvalidArgumentError):
            resolver.ensure_local_branch("")
