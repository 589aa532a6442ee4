"""Worktree operations service for worktree-manager."""

from pathlib import Path
from typing import List, Optional

from worktree_manager.constants import UNCOMMITTED_CHANGES_HINTS
from worktree_manager.exceptions import FileSystemError, GitError, UserError
from worktree_manager.logging_config import get_logger
from worktree_manager.models.worktree import WorktreeRecord, strip_ref_namespace
from worktree_manager.services.git.porcelain import parse_porcelain
from worktree_manager.services.git.repository import RepositoryService
from worktree_manager.services.git.runner import run_git

logger = get_logger(__name__)


def default_worktree_path(repo_root: Path, branch: str) -> Path:
    """Default location for a new worktree.

    `<parent of repo root>/<repo name>-<branch with "/" replaced by "-">`,
    e.g. /home/user/proj + feature/x -> /home/user/proj-feature-x.

    Raises:
        FileSystemError: repo_root has no parent or no name
    """
    repo_root = Path(repo_root)
    if not repo_root.name or repo_root.parent == repo_root:
        raise FileSystemError(f"cannot derive a worktree path from repository root {repo_root}")
    sanitized = branch.replace("/", "-")
    return repo_root.parent / f"{repo_root.name}-{sanitized}"


class WorktreeService:
    """Service for managing git worktrees."""

    def __init__(self, repo_root: Path, repository: Optional[RepositoryService] = None):
        """Initialize the worktree service.

        Args:
            repo_root: Top-level directory of the repository
            repository: Repository queries (created from repo_root when omitted)
        """
        self.repo_root = Path(repo_root)
        self.repository = repository or RepositoryService(self.repo_root)

    def list_worktrees(self) -> List[WorktreeRecord]:
        """Get all worktrees, in the order git reports them.

        Raises:
            GitError: the listing command failed or its output was malformed
        """
        output = run_git(self.repo_root, "worktree", "list", "--porcelain", operation="list worktrees")
        records = parse_porcelain(output)
        logger.debug(f"Found {len(records)} worktrees")
        for record in records:
            logger.debug(f"  {record}")
        return records

    def find_by_path(self, path: Path) -> Optional[WorktreeRecord]:
        """Best-effort lookup of the record for a path; None on any failure."""
        try:
            records = self.list_worktrees()
        except GitError as e:
            logger.debug(f"Could not list worktrees: {e}")
            return None
        for record in records:
            if record.path == path:
                return record
        return None

    def find_containing(self, directory: Path) -> Optional[WorktreeRecord]:
        """Record of the worktree containing `directory` (deepest match wins)."""
        directory = Path(directory)
        best: Optional[WorktreeRecord] = None
        for record in self.list_worktrees():
            if directory == record.path or record.path in directory.parents:
                if best is None or len(record.path.parts) > len(best.path.parts):
                    best = record
        return best

    def branch_worktree(self, branch: str) -> Optional[WorktreeRecord]:
        """Worktree that has the local branch checked out, if any."""
        for record in self.list_worktrees():
            if record.is_local_branch and record.branch_name == branch:
                return record
        return None

    def available_branches(self) -> List[str]:
        """Local and remote branches that are not checked out in a worktree.

        Remote branches are returned as `<remote>/<name>`.
        """
        checked_out = set()
        for record in self.list_worktrees():
            if record.branch_ref:
                checked_out.add(strip_ref_namespace(record.branch_ref))
                if record.branch_name:
                    checked_out.add(record.branch_name)

        branches = [b for b in self.repository.local_branches() if b not in checked_out]
        for remote_branch in self.repository.remote_branches():
            _, _, name = remote_branch.partition("/")
            if name not in checked_out and remote_branch not in checked_out:
                branches.append(remote_branch)

        return sorted(set(branches))

    def add_worktree(self, branch: str, path: Path, track: Optional[str] = None) -> Optional[str]:
        """Create a worktree for `branch` at `path`.

        - track: create `branch` tracking `<track>/<branch>`
        - otherwise an existing local or remote branch is checked out, and a
          missing branch is created with -b

        Returns:
            The tracked remote branch, if any

        Raises:
            UserError: path exists or branch already has a worktree
            GitError: git worktree add failed
        """
        path = Path(path)
        if path.exists():
            raise UserError(f"path already exists: {path}\nChoose a different path with --path")

        existing = self.branch_worktree(branch)
        if existing is not None:
            raise UserError(f"worktree for branch '{branch}' already exists at: {existing.path}")

        if track:
            remote_branch = f"{track}/{branch}"
            run_git(
                self.repo_root, "worktree", "add", "--track", "-b", branch, str(path), remote_branch,
                operation=f"add worktree tracking {remote_branch}",
            )
            logger.info(f"Created worktree at {path} tracking {remote_branch}")
            return remote_branch

        if self.repository.branch_exists(branch):
            run_git(self.repo_root, "worktree", "add", str(path), branch, operation="add worktree")
        else:
            run_git(
                self.repo_root, "worktree", "add", "-b", branch, str(path),
                operation=f"create worktree with new branch '{branch}'",
            )
        logger.info(f"Created worktree at {path} for {branch}")
        return None

    def remove_worktree(self, record: WorktreeRecord, force: bool = False) -> None:
        """Remove a worktree.

        Policy checks (bare, main branch, locked) are the caller's job. With
        force, local changes are discarded; a locked worktree needs force twice
        on the git side.

        Raises:
            UserError: worktree has uncommitted changes and force is not set
            GitError: git worktree remove failed
        """
        args = ["worktree", "remove"]
        if force:
            args.append("--force")
            if record.locked:
                args.append("--force")
        args.append(str(record.path))

        try:
            run_git(self.repo_root, *args, operation="remove worktree")
        except GitError as e:
            detail = (e.detail or "").lower()
            if not force and any(hint in detail for hint in UNCOMMITTED_CHANGES_HINTS):
                raise UserError(
                    "worktree has uncommitted changes; use --force to remove anyway\n"
                    f"Original error: {e.detail}"
                ) from e
            raise
        logger.info(f"Removed worktree at {record.path}")

    def prune_worktrees(self) -> None:
        """Prune stale worktree metadata.

        Raises:
            GitError: git worktree prune failed
        """
        run_git(self.repo_root, "worktree", "prune", operation="prune worktrees")
        logger.info("Pruned stale worktree metadata")
