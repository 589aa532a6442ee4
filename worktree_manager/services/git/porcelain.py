"""Parser for `git worktree list --porcelain` output."""

from pathlib import Path
from typing import Any, Dict, List, Optional

from worktree_manager.exceptions import PorcelainParseError
from worktree_manager.models.worktree import WorktreeRecord

# Literal that older tooling reported instead of a commit id
HEAD_DETACHED = "detached"

_FIELD_KEYS = {"HEAD", "branch", "locked", "prunable", "bare"}


def parse_porcelain(output: str) -> List[WorktreeRecord]:
    """Parse porcelain worktree listing into records, in input order.

    Format (blocks separated by blank lines):
        worktree /path/to/worktree
        HEAD <sha>            (or the literal "detached")
        branch refs/heads/x   (missing when detached)
        locked [<reason>]
        prunable [<reason>]
        bare

    Unknown keys are ignored. The last block does not need a trailing blank
    line. Any structural error fails the whole parse.

    Raises:
        PorcelainParseError: malformed input
    """
    records: List[WorktreeRecord] = []
    seen_paths: set = set()
    current: Optional[Dict[str, Any]] = None

    def flush() -> None:
        nonlocal current
        if current is None:
            return
        record = WorktreeRecord(**current)
        if record.path in seen_paths:
            raise PorcelainParseError(f"duplicate worktree path: {record.path}")
        seen_paths.add(record.path)
        records.append(record)
        current = None

    for line_number, raw_line in enumerate(output.splitlines(), start=1):
        line = raw_line.rstrip()

        if not line:
            flush()
            continue

        key, sep, value = line.partition(" ")
        rest: Optional[str] = value if sep else None

        if key == "worktree":
            flush()
            if not rest:
                raise PorcelainParseError("missing worktree path", line_number)
            current = {"path": Path(rest)}
            continue

        if key not in _FIELD_KEYS:
            # Newer git versions add keys; ignore them.
            continue

        if current is None:
            raise PorcelainParseError(f"'{key}' before any worktree line", line_number)

        if key == "HEAD":
            if not rest:
                raise PorcelainParseError("missing HEAD value", line_number)
            current["head"] = None if rest == HEAD_DETACHED else rest
        elif key == "branch":
            current["branch_ref"] = rest or None
        elif key == "locked":
            current["locked"] = True
            current["locked_reason"] = rest or None
        elif key == "prunable":
            current["prunable"] = rest or ""
        elif key == "bare":
            current["bare"] = True

    flush()
    return records
