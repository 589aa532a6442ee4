"""Repository-level git queries for worktree-manager."""

import os
from pathlib import Path
from typing import List, Optional

from worktree_manager.constants import (
    DEFAULT_REMOTE,
    LOCAL_BRANCH_PREFIX,
    MAIN_BRANCH_CANDIDATES,
    PREVIEW_COMMIT_COUNT,
    REMOTE_BRANCH_PREFIX,
)
from worktree_manager.exceptions import GitError, GitExecutableNotFoundError, NotARepositoryError
from worktree_manager.logging_config import get_logger
from worktree_manager.services.git.runner import run_git, try_git

logger = get_logger(__name__)


def find_repository_root(start: Optional[Path] = None) -> Path:
    """Resolve the top-level directory of the repository containing `start`.

    Args:
        start: Directory to resolve from (defaults to the current directory)

    Raises:
        NotARepositoryError: start is not inside a git repository
        GitError: git itself could not be run
    """
    directory = Path(start) if start is not None else Path(os.getcwd())
    if not directory.is_dir():
        raise NotARepositoryError(directory)

    try:
        output = run_git(directory, "rev-parse", "--show-toplevel", operation="resolve repository root")
    except GitExecutableNotFoundError:
        raise
    except GitError as e:
        raise NotARepositoryError(directory) from e

    root = output.strip()
    if not root:
        # rev-parse succeeds with empty output inside a bare repository
        raise NotARepositoryError(directory)
    return Path(root)


class RepositoryService:
    """Queries against a single repository."""

    def __init__(self, repo_root: Path):
        """Initialize the repository service.

        Args:
            repo_root: Top-level directory of the repository
        """
        self.repo_root = Path(repo_root)

    @property
    def name(self) -> str:
        return self.repo_root.name or str(self.repo_root)

    def main_branch(self) -> Optional[str]:
        """Best-effort detection of the main branch.

        Order: origin's symbolic HEAD, then a local `main`, then a local
        `master`. Returns None when none is found; callers treat that as
        "no main branch protection".
        """
        remote_head_ref = f"{REMOTE_BRANCH_PREFIX}{DEFAULT_REMOTE}/HEAD"
        symbolic = try_git(self.repo_root, "symbolic-ref", remote_head_ref)
        if symbolic:
            prefix = f"{REMOTE_BRANCH_PREFIX}{DEFAULT_REMOTE}/"
            symbolic = symbolic.strip()
            if symbolic.startswith(prefix) and len(symbolic) > len(prefix):
                branch = symbolic[len(prefix):]
                logger.debug(f"Main branch from {remote_head_ref}: {branch}")
                return branch

        for candidate in MAIN_BRANCH_CANDIDATES:
            if self.local_branch_exists(candidate):
                logger.debug(f"Main branch from local candidate: {candidate}")
                return candidate

        logger.debug("Could not determine main branch")
        return None

    def local_branch_exists(self, branch: str) -> bool:
        return try_git(
            self.repo_root, "show-ref", "--verify", "--quiet", f"{LOCAL_BRANCH_PREFIX}{branch}"
        ) is not None

    def remote_branch_exists(self, branch: str) -> bool:
        """Check whether any remote has a branch with exactly this name.

        `origin/feature/x` does not count as a remote `x`.
        """
        try:
            remote_branches = self.remote_branches()
        except GitError as e:
            logger.debug(f"Could not list remote branches: {e}")
            return False
        return any(b.partition("/")[2] == branch for b in remote_branches)

    def branch_exists(self, branch: str) -> bool:
        """Check if a branch exists locally or on any remote."""
        return self.local_branch_exists(branch) or self.remote_branch_exists(branch)

    def local_branches(self) -> List[str]:
        output = run_git(
            self.repo_root, "branch", "--format=%(refname:short)", operation="list local branches"
        )
        return [line.strip() for line in output.splitlines() if line.strip()]

    def remote_branches(self) -> List[str]:
        """Remote-tracking branches as `<remote>/<name>`, HEAD pointers excluded."""
        output = run_git(
            self.repo_root, "branch", "-r", "--format=%(refname:short)", operation="list remote branches"
        )
        branches = []
        for line in output.splitlines():
            branch = line.strip()
            if not branch or branch.endswith("/HEAD") or "/" not in branch:
                continue
            branches.append(branch)
        return branches

    @staticmethod
    def is_dirty(path: Path) -> bool:
        """Whether a worktree has uncommitted changes; False if it cannot be checked."""
        output = try_git(path, "status", "--porcelain")
        return bool(output and output.strip())

    @staticmethod
    def status_summary(path: Path) -> Optional[str]:
        """Short `git status -sb` output, or None on failure."""
        return try_git(path, "status", "-sb")

    @staticmethod
    def recent_commits(path: Path, count: int = PREVIEW_COMMIT_COUNT) -> Optional[str]:
        return try_git(path, "log", "-n", str(count), "--oneline", "--decorate")

    @staticmethod
    def changed_files(path: Path) -> List[str]:
        output = try_git(path, "status", "--porcelain=v1")
        if not output:
            return []
        return [line for line in output.splitlines() if line.strip()]
