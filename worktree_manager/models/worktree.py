"""Worktree data models."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from worktree_manager.constants import (
    DETACHED_LABEL,
    LOCAL_BRANCH_PREFIX,
    REMOTE_BRANCH_PREFIX,
)


def strip_ref_namespace(ref: str) -> str:
    """Strip `refs/heads/` or `refs/remotes/` from a ref.

    `refs/heads/feature` -> `feature`, `refs/remotes/origin/feature` ->
    `origin/feature`. Anything else is returned unchanged.
    """
    if ref.startswith(LOCAL_BRANCH_PREFIX):
        return ref[len(LOCAL_BRANCH_PREFIX):]
    if ref.startswith(REMOTE_BRANCH_PREFIX):
        return ref[len(REMOTE_BRANCH_PREFIX):]
    return ref


@dataclass(frozen=True)
class WorktreeRecord:
    """One entry of `git worktree list --porcelain`."""

    path: Path
    head: Optional[str] = None
    branch_ref: Optional[str] = None  # refs/heads/x or refs/remotes/<remote>/x
    locked: bool = False
    locked_reason: Optional[str] = None
    prunable: Optional[str] = None  # "" still means prunable
    bare: bool = False

    @property
    def is_detached(self) -> bool:
        return self.branch_ref is None

    @property
    def is_local_branch(self) -> bool:
        return bool(self.branch_ref and self.branch_ref.startswith(LOCAL_BRANCH_PREFIX))

    @property
    def is_remote_branch(self) -> bool:
        return bool(self.branch_ref and self.branch_ref.startswith(REMOTE_BRANCH_PREFIX))

    @property
    def is_prunable(self) -> bool:
        return self.prunable is not None

    @property
    def display_branch(self) -> str:
        """Branch for display: namespace stripped, remote name kept."""
        if self.branch_ref is None:
            return DETACHED_LABEL
        return strip_ref_namespace(self.branch_ref)

    @property
    def branch_name(self) -> Optional[str]:
        """Short branch name with the namespace and any remote name stripped."""
        if self.branch_ref is None:
            return None
        if self.is_remote_branch:
            _, _, name = strip_ref_namespace(self.branch_ref).partition("/")
            return name or None
        return strip_ref_namespace(self.branch_ref)

    @property
    def match_names(self) -> frozenset:
        """Names under which this worktree can be targeted by branch."""
        if self.branch_ref is None:
            return frozenset()
        names = {self.display_branch}
        if self.branch_name:
            names.add(self.branch_name)
        return frozenset(names)

    def flags(self) -> list[str]:
        """Human-readable state flags (locked, prunable, bare)."""
        parts = []
        if self.locked:
            parts.append(f"locked: {self.locked_reason}" if self.locked_reason else "locked")
        if self.prunable is not None:
            parts.append(f"prunable: {self.prunable}" if self.prunable else "prunable")
        if self.bare:
            parts.append("bare")
        return parts

    def to_dict(self) -> dict:
        """JSON-serialisable representation."""
        return {
            "path": str(self.path),
            "head": self.head,
            "branch": self.branch_ref,
            "locked": self.locked,
            "locked_reason": self.locked_reason,
            "prunable": self.prunable,
            "bare": self.bare,
        }

    def __str__(self) -> str:
        flags = self.flags()
        suffix = f" [{', '.join(flags)}]" if flags else ""
        return f"{self.display_branch} @ {self.path}{suffix}"
