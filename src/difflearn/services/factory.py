"""Service factory for dependency injection."""
from __future__ import annotations

from pathlib import Path

from difflearn.config import DiffLearnConfig, get_config
from difflearn.git import BranchResolver, DiffFormatter, DiffParser, GitRunner
from difflearn.services.diff_service import DiffService


class ServiceFactory:
    """Factory for creating service instances bound to one repository."""

    def __init__(self, repo_path: Path | str | None = None, config: DiffLearnConfig | None = None):
        """Initialize the service factory.

        Args:
            repo_path: Path to the git repository. Defaults to None (cwd).
            config: Explicit configuration; loaded from the environment if omitted.
        """
        self.repo_path = repo_path
        self._config = config or get_config()

    @property
    def config(self) -> DiffLearnConfig:
        return self._config

    def create_git_runner(self) -> GitRunner:
        """Create a GitRunner for the factory's repository."""
        return GitRunner(self.repo_path, git_executable=self._config.git_executable)

    def create_diff_parser(self) -> DiffParser:
        return DiffParser()

    def create_formatter(self) -> DiffFormatter:
        return DiffFormatter(self.create_diff_parser())

    def create_branch_resolver(self, runner: GitRunner | None = None) -> BranchResolver:
        return BranchResolver(runner or self.create_git_runner())

    def create_diff_service(self) -> DiffService:
        """Create a DiffService wired with a shared runner.

        Returns:
            A DiffService configured from the app config.
        """
        runner = self.create_git_runner()
        return DiffService(
            runner=runner,
            parser=self.create_diff_parser(),
            resolver=self.create_branch_resolver(runner),
            context_lines=self._config.context_lines,
            history_limit=self._config.history_limit,
        )


def get_service_factory(repo_path: Path | str | None = None) -> ServiceFactory:
    """Create a ServiceFactory instance.

    Returns:
        A ServiceFactory instance.
    """
    return ServiceFactory(repo_path=repo_path)
