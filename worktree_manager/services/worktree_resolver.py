"""Resolve a user-supplied target to a single worktree."""

import os
from pathlib import Path
from typing import Iterable, List, Optional

from worktree_manager.exceptions import AmbiguousTargetError, WorktreeNotFoundError
from worktree_manager.models.worktree import WorktreeRecord, strip_ref_namespace


def _target_paths(target: str, base_dir: Optional[Path] = None) -> set:
    paths = {Path(target)}
    if not os.path.isabs(target):
        base = Path(base_dir) if base_dir is not None else Path(os.getcwd())
        paths.add(Path(os.path.normpath(base / target)))
    return paths


def matches_target(record: WorktreeRecord, target: str, base_dir: Optional[Path] = None) -> bool:
    """Check whether a record answers to `target` by path or by branch name.

    Branch matching is exact and case-sensitive against the name with its
    `refs/heads/` or `refs/remotes/` namespace stripped. A remote branch
    answers to both `origin/x` and `x`. The target may itself carry a
    namespace prefix. A relative path target is also tried against
    `base_dir` (the process cwd when omitted).
    """
    if record.path in _target_paths(target, base_dir):
        return True

    if record.branch_ref is None:
        return False

    return strip_ref_namespace(target) in record.match_names


def find_worktree(
    records: Iterable[WorktreeRecord], target: str, base_dir: Optional[Path] = None
) -> WorktreeRecord:
    """Find the unique worktree matching `target`.

    Raises:
        WorktreeNotFoundError: nothing matches
        AmbiguousTargetError: more than one worktree matches; the error lists
            every matching path
    """
    matches: List[WorktreeRecord] = [r for r in records if matches_target(r, target, base_dir)]

    if not matches:
        raise WorktreeNotFoundError(target)
    if len(matches) > 1:
        raise AmbiguousTargetError(target, [r.path for r in matches])
    return matches[0]
