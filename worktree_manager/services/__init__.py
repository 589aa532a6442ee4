"""Services for worktree-manager."""
