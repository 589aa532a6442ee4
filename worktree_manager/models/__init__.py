"""Data models for worktree-manager."""

from .worktree import WorktreeRecord, strip_ref_namespace
from .picker import PickerOutcome, PickerResult

__all__ = [
    "WorktreeRecord",
    "strip_ref_namespace",
    "PickerOutcome",
    "PickerResult",
]
