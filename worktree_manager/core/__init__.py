"""Core worktree management for worktree-manager."""

from .worktree_manager import WorktreeManager

__all__ = ["WorktreeManager"]
