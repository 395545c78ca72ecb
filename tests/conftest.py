"""Pytest configuration and fixtures for difflearn tests."""
from __future__ import annotations

import tempfile
from collections.abc import Iterator
from pathlib import Path

import pytest

from difflearn.config import DiffLearnConfig
from difflearn.git.diff_parser import DiffParser
from difflearn.git.runner import GitRunner
from tests.helpers_git import commit_file, configure_identity, git, init_repo


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for test data."""
    with tempfile.TemporaryDirectory() as tmp:
        yield Path(tmp)


@pytest.fixture
def temp_git_repo(temp_dir: Path) -> Path:
    """Create a temporary git repository on main with one commit."""
    return init_repo(temp_dir / "test_repo")


@pytest.fixture
def cloned_repo(temp_dir: Path) -> Path:
    """Clone of an upstream whose ``release`` branch exists only remotely."""
    upstream = init_repo(temp_dir / "upstream")
    git(upstream, "checkout", "-q", "-b", "release")
    commit_file(upstream, "release.txt", "release notes\n", "add release notes")
    git(upstream, "checkout", "-q", "main")

    clone = temp_dir / "clone"
    git(temp_dir, "clone", "-q", str(upstream), str(clone))
    configure_identity(clone)
    return clone


@pytest.fixture
def runner(temp_git_repo: Path) -> GitRunner:
    return GitRunner(temp_git_repo)


@pytest.fixture
def test_config() -> DiffLearnConfig:
    """Create a config that ignores the environment's defaults."""
    return DiffLearnConfig(
        git_executable="git",
        context_lines=3,
        history_limit=20,
        auto_stash=False,
        verbose=True,
    )


@pytest.fixture
def diff_parser() -> DiffParser:
    """Create a diff parser instance."""
    return DiffParser()


@pytest.fixture
def sample_diff_output() -> str:
    """Sample git diff output for testing."""
    return """diff --git a/src/main.py b/src/main.py
new file mode 100644
index 0000000..e69de29
--- /dev/null
+++ b/src/main.py
@@ -0,0 +1,5 @@
+def hello():
+    print("Hello, world!")
+
+if __name__ == "__main__":
+    hello()
diff --git a/src/utils.py b/src/utils.py
deleted file mode 100644
--- a/src/utils.py
+++ /dev/null
@@ -1,3 +0,0 @@
-def old_func():
-    pass
-
diff --git a/src/app.py b/src/app.py
index 1111111..2222222 100644
--- a/src/app.py
+++ b/src/app.py
@@ -1,5 +1,6 @@
+import new_module
 def main():
-    old_call()
+    new_call()
     return True
"""
