"""Thin wrapper around GitPython's command layer."""

from pathlib import Path
from typing import Optional, Union

import git

from worktree_manager.exceptions import GitError, GitExecutableNotFoundError
from worktree_manager.logging_config import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


def _get_git(cwd: PathLike) -> git.Git:
    """Get a git command runner bound to a working directory."""
    return git.Git(str(cwd))


def describe_command_error(e: git.exc.CommandError) -> str:
    """Extract a readable message from a GitPython command error."""
    stderr = (getattr(e, "stderr", "") or "").strip()
    # GitPython prefixes captured stderr with "stderr: '" and quotes it
    if stderr.startswith("stderr:"):
        stderr = stderr[len("stderr:"):].strip().strip("'").strip()
    status = getattr(e, "status", None)

    if stderr:
        return f"exit {status}: {stderr}"
    return f"exit {status}"


def run_git(cwd: PathLike, *args: str, operation: Optional[str] = None) -> str:
    """Run `git <args>` in cwd and return stdout.

    Raises:
        GitError: git exited non-zero or could not be spawned
    """
    operation = operation or f"git {' '.join(args)}"
    logger.debug(f"Running git {' '.join(args)} in {cwd}")
    try:
        return _get_git(cwd).execute(["git", *args])
    except git.exc.GitCommandNotFound as e:
        logger.debug(f"{operation} failed: {e}")
        raise GitExecutableNotFoundError() from e
    except git.exc.CommandError as e:
        message = describe_command_error(e)
        logger.debug(f"{operation} failed: {message}")
        raise GitError(operation, message) from e


def try_git(cwd: PathLike, *args: str) -> Optional[str]:
    """Run git for a best-effort query; None when the command fails."""
    try:
        return run_git(cwd, *args)
    except GitError:
        return None
