"""Worktree row and picker candidate formatting utilities."""

from pathlib import Path
from typing import List, Sequence, Tuple

from worktree_manager.constants import COLUMN_SEPARATOR
from worktree_manager.exceptions import UserError
from worktree_manager.models.worktree import WorktreeRecord


def format_flags(record: WorktreeRecord) -> str:
    """
    Format worktree state flags.

    Args:
        record: Worktree record

    Returns:
        Comma-separated flags, e.g. "locked, prunable: gitdir missing", or ""
    """
    return ", ".join(record.flags())


def display_path(repo_root: Path, path: Path) -> str:
    """
    Format a worktree path relative to the repository root when inside it.

    Args:
        repo_root: Repository top-level directory
        path: Worktree path

    Returns:
        Relative path for nested worktrees, "." for the root itself,
        the absolute path otherwise
    """
    try:
        relative = Path(path).relative_to(repo_root)
    except ValueError:
        return str(path)
    return str(relative)


def format_list_lines(records: Sequence[WorktreeRecord], repo_root: Path) -> List[str]:
    """
    Format records as aligned `<branch>  <path>  [flags]` lines.

    Args:
        records: Worktree records
        repo_root: Repository root used to shorten nested paths

    Returns:
        One line per record, branch column padded to the widest branch
    """
    rows = [
        (record.display_branch, display_path(repo_root, record.path), format_flags(record))
        for record in records
    ]
    width = max((len(branch) for branch, _, _ in rows), default=0)

    lines = []
    for branch, path, flags in rows:
        line = f"{branch:<{width}}{COLUMN_SEPARATOR}{path}"
        if flags:
            line += f"{COLUMN_SEPARATOR}[{flags}]"
        lines.append(line)
    return lines


def format_candidates(records: Sequence[WorktreeRecord]) -> List[str]:
    """
    Format picker candidates as `<branch>  <path>` with the branch column aligned.

    Example:
        main            /home/user/proj
        feature-branch  /home/user/proj-feature-branch
    """
    width = max((len(record.display_branch) for record in records), default=0)
    return [
        f"{record.display_branch:<{width}}{COLUMN_SEPARATOR}{record.path}"
        for record in records
    ]


def format_all_candidates(entries: Sequence[Tuple[str, WorktreeRecord]]) -> List[str]:
    """
    Format cross-repository candidates as `<repo>  <branch>  <path>`.

    Args:
        entries: (repository name, record) pairs

    Returns:
        Candidate lines with the repository and branch columns aligned
    """
    repo_width = max((len(repo) for repo, _ in entries), default=0)
    branch_width = max((len(record.display_branch) for _, record in entries), default=0)
    return [
        f"{repo:<{repo_width}}{COLUMN_SEPARATOR}"
        f"{record.display_branch:<{branch_width}}{COLUMN_SEPARATOR}{record.path}"
        for repo, record in entries
    ]


def extract_path(line: str) -> str:
    """
    Extract the path from a `<branch>  <path>` candidate line.

    Padding makes the separator repeat, so the path is whatever follows the
    first separator with surrounding blanks trimmed. Paths that themselves
    contain a single space survive.

    Raises:
        UserError: the line has no path column
    """
    _, separator, rest = line.rstrip("\n").partition(COLUMN_SEPARATOR)
    path = rest.strip()
    if not separator or not path:
        raise UserError(f"failed to extract path from fzf output: {line}")
    return path


def extract_path_from_all(line: str) -> str:
    """
    Extract the path from a `<repo>  <branch>  <path>` candidate line.

    Raises:
        UserError: the line has fewer than three columns
    """
    parts = [part.strip() for part in line.rstrip("\n").split(COLUMN_SEPARATOR)]
    parts = [part for part in parts if part]
    if len(parts) < 3:
        raise UserError(f"failed to extract path from fzf output: {line}")
    return COLUMN_SEPARATOR.join(parts[2:])


def strip_remote_prefix(branch: str) -> str:
    """`origin/feature` -> `feature`; names without a remote part are unchanged."""
    _, separator, name = branch.partition("/")
    return name if separator and name else branch
