"""Removal and staleness policy for worktrees."""

from typing import Iterable, List, Optional, Tuple
from pathlib import Path

from worktree_manager.exceptions import ProtectedWorktreeError, WorktreeLockedError
from worktree_manager.models.worktree import WorktreeRecord

BARE_REMOVAL_MESSAGE = "cannot remove the main worktree (bare repository location)"


class RemovalPolicy:
    """Decides which worktrees may be removed or pruned."""

    @staticmethod
    def is_main_branch(record: WorktreeRecord, main_branch: Optional[str]) -> bool:
        """
        Check if a worktree has the main branch checked out.

        Args:
            record: Worktree record
            main_branch: Detected main branch, None when unknown

        Returns:
            True if the stripped branch name equals the main branch
        """
        if not main_branch or record.branch_ref is None:
            return False
        return record.branch_name == main_branch

    @staticmethod
    def check_removable(record: WorktreeRecord, main_branch: Optional[str], force: bool = False) -> None:
        """
        Raise if the worktree must not be removed.

        The bare location and the main branch worktree are never removable,
        force or not. A locked worktree needs force.

        Raises:
            ProtectedWorktreeError: bare location or main branch
            WorktreeLockedError: locked and force not given
        """
        if record.bare:
            raise ProtectedWorktreeError(record.path, BARE_REMOVAL_MESSAGE)

        if RemovalPolicy.is_main_branch(record, main_branch):
            raise ProtectedWorktreeError(
                record.path,
                f"cannot remove the worktree for the main branch '{main_branch}' at {record.path}",
            )

        if record.locked and not force:
            raise WorktreeLockedError(record.path, record.locked_reason)

    @staticmethod
    def is_removable(record: WorktreeRecord, main_branch: Optional[str]) -> bool:
        """True if the worktree may be offered for removal (locked ones included)."""
        return not record.bare and not RemovalPolicy.is_main_branch(record, main_branch)

    @staticmethod
    def prune_candidates(records: Iterable[WorktreeRecord]) -> List[Tuple[Path, str]]:
        """(path, reason) for every worktree git marked prunable."""
        return [(r.path, r.prunable) for r in records if r.prunable is not None]
