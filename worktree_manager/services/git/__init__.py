"""Git-related services for worktree-manager."""

from .porcelain import parse_porcelain
from .repository import RepositoryService, find_repository_root
from .worktrees import WorktreeService, default_worktree_path

__all__ = [
    "parse_porcelain",
    "RepositoryService",
    "find_repository_root",
    "WorktreeService",
    "default_worktree_path",
]
