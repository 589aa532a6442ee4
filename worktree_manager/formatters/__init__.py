"""Formatting utilities for worktree-manager.

This package provides formatting functions for worktree output:
- worktree: list rows, picker candidates and candidate parsing
- output: JSON and preview sections
"""

# Worktree formatters
from .worktree import (
    format_flags,
    display_path,
    format_list_lines,
    format_candidates,
    format_all_candidates,
    extract_path,
    extract_path_from_all,
    strip_remote_prefix,
)

# Output formatters
from .output import format_json, format_section, format_dirty

__all__ = [
    # Worktree
    "format_flags",
    "display_path",
    "format_list_lines",
    "format_candidates",
    "format_all_candidates",
    "extract_path",
    "extract_path_from_all",
    "strip_remote_prefix",
    # Output
    "format_json",
    "format_section",
    "format_dirty",
]
