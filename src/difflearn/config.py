"""Configuration management."""
from functools import lru_cache

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from difflearn.exceptions import ConfigError
from difflearn.models import BranchMode

DEFAULT_CONTEXT_LINES = 3
DEFAULT_HISTORY_LIMIT = 20


class DiffLearnConfig(BaseSettings):
    """Configuration for difflearn.

    The repository path is deliberately absent: it is supplied by the
    caller when a GitRunner or ServiceFactory is constructed.
    """

    model_config = SettingsConfigDict(
        env_prefix="DIFFLEARN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Git settings
    git_executable: str = "git"

    # Diff settings
    context_lines: int = Field(default=DEFAULT_CONTEXT_LINES, ge=0)
    history_limit: int = Field(default=DEFAULT_HISTORY_LIMIT, gt=0)
    branch_mode: BranchMode = BranchMode.TRIPLE

    # Branch switching
    auto_stash: bool = False

    # Logging
    verbose: bool = False


@lru_cache
def _get_config_cached() -> DiffLearnConfig:
    try:
        return DiffLearnConfig()
    except ValidationError as e:
        raise ConfigError(f"Invalid difflearn configuration: {e}") from e


def get_config(clear_cache: bool = False) -> DiffLearnConfig:
    """Get configuration instance.

    Args:
        clear_cache: If True, clear the cache before returning config.
    """
    if clear_cache:
        _get_config_cached.cache_clear()
    return _get_config_cached()
