"""Custom exceptions for worktree-manager"""

from enum import Enum
from pathlib import Path
from typing import Optional, Sequence


class ErrorCode(Enum):
    """Machine-readable error categories."""
    USER_ERROR = "user_error"
    NOT_FOUND = "not_found"
    GIT_ERROR = "git_error"
    CONFIG_ERROR = "config_error"
    IO_ERROR = "io_error"

    @property
    def exit_code(self) -> int:
        """Process exit code for this category."""
        return _EXIT_CODES[self]


_EXIT_CODES = {
    ErrorCode.USER_ERROR: 1,
    ErrorCode.NOT_FOUND: 2,
    ErrorCode.GIT_ERROR: 3,
    ErrorCode.CONFIG_ERROR: 4,
    ErrorCode.IO_ERROR: 5,
}


class WorktreeManagerError(Exception):
    """Base exception for all worktree-manager errors."""

    code = ErrorCode.USER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    @property
    def exit_code(self) -> int:
        return self.code.exit_code

    def to_json(self) -> dict:
        """Convert to the JSON error object printed in --json mode."""
        return {
            "error": True,
            "code": self.code.value,
            "message": self.message,
        }

    def format_human(self) -> str:
        """Single line error message for human output."""
        return f"error[{self.code.value}]: {self.message}"


class UserError(WorktreeManagerError):
    """Invalid input, ambiguous target or a disallowed operation."""
    code = ErrorCode.USER_ERROR


class NotFoundError(WorktreeManagerError):
    """Repository, worktree or branch could not be found."""
    code = ErrorCode.NOT_FOUND


class GitError(WorktreeManagerError):
    """Exception raised when git (or another external tool) fails."""
    code = ErrorCode.GIT_ERROR

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation
        self.detail = message

        error_msg = f"{operation} failed"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class ConfigError(WorktreeManagerError):
    """Configuration could not be read, parsed or written."""
    code = ErrorCode.CONFIG_ERROR


class FileSystemError(WorktreeManagerError):
    """Path encoding or directory errors."""
    code = ErrorCode.IO_ERROR


class NotARepositoryError(NotFoundError):
    """Exception raised when a directory is not inside a git repository."""

    def __init__(self, directory: Path):
        self.directory = directory
        super().__init__(f"not inside a git repository: {directory}")


class WorktreeNotFoundError(NotFoundError):
    """Exception raised when no worktree matches a target."""

    def __init__(self, target: str):
        self.target = target
        super().__init__(f"no worktree found matching '{target}'")


class AmbiguousTargetError(UserError):
    """Exception raised when a target matches more than one worktree."""

    def __init__(self, target: str, paths: Sequence[Path]):
        self.target = target
        self.paths = list(paths)
        listing = "\n  ".join(str(p) for p in self.paths)
        super().__init__(f"target '{target}' matches multiple worktrees:\n  {listing}")


class ProtectedWorktreeError(UserError):
    """Exception raised when removing the bare location or the main branch."""

    def __init__(self, path: Path, message: str):
        self.path = path
        super().__init__(message)


class WorktreeLockedError(UserError):
    """Exception raised when removing a locked worktree without --force."""

    def __init__(self, path: Path, reason: Optional[str] = None):
        self.path = path
        self.reason = reason
        message = f"worktree '{path}' is locked"
        if reason:
            message += f" ({reason})"
        message += (
            f"; run `git worktree unlock {path}` first"
            " or pass --force to remove it anyway"
        )
        super().__init__(message)


class PorcelainParseError(GitError):
    """Exception raised when `git worktree list --porcelain` output is malformed."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__("parse worktree list", message)


class PickerError(UserError):
    """Exception raised when fzf cannot be run or exits unexpectedly."""


class GitExecutableNotFoundError(GitError):
    """Exception raised when the git binary cannot be spawned."""

    def __init__(self, message: Optional[str] = None):
        super().__init__("run git", message or "git executable not found (is git installed?)")
