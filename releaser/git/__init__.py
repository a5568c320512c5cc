"""Git queries."""

from .repository import GitError, current_branch, head_commit

__all__ = ["GitError", "current_branch", "head_commit"]
