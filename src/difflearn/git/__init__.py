"""Git module for difflearn."""
from difflearn.git.branches import BranchResolver
from difflearn.git.diff_parser import DiffParser
from difflearn.git.formatter import DiffFormatter
from difflearn.git.runner import Commit, GitRunner

__all__ = ["BranchResolver", "Commit", "DiffFormatter", "DiffParser", "GitRunner"]
