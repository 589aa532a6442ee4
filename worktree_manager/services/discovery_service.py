"""Discovery of git repositories under configured search roots."""

import os
from pathlib import Path
from typing import Iterable, List

from worktree_manager.constants import DISCOVERY_MAX_DEPTH
from worktree_manager.exceptions import GitError, NotFoundError
from worktree_manager.logging_config import get_logger
from worktree_manager.services.git.repository import find_repository_root

logger = get_logger(__name__)


def discover_repositories(search_paths: Iterable[str], max_depth: int = DISCOVERY_MAX_DEPTH) -> List[Path]:
    """Find repository roots below each search path.

    Walks up to `max_depth` levels without following symlinks. Every `.git`
    directory or file marks a candidate whose root is resolved through git, so
    linked worktrees resolve to their own top-level directory. Results are
    de-duplicated and sorted. Missing roots and unresolvable candidates are
    logged and skipped.
    """
    roots = set()

    for search_path in search_paths:
        base = Path(search_path).expanduser()
        if not base.exists():
            logger.warning(f"Search path does not exist: {base}")
            continue
        if not base.is_dir():
            logger.warning(f"Search path is not a directory: {base}")
            continue

        base_depth = len(base.parts)
        for dirpath, dirnames, filenames in os.walk(base, followlinks=False):
            current = Path(dirpath)
            depth = len(current.parts) - base_depth

            if ".git" in dirnames or ".git" in filenames:
                try:
                    roots.add(find_repository_root(current))
                except (GitError, NotFoundError) as e:
                    logger.warning(f"Failed to resolve repository root for {current}: {e}")

            # The .git entry itself sits one level below `current`
            if depth + 1 >= max_depth:
                dirnames[:] = []
            else:
                dirnames[:] = [d for d in dirnames if d != ".git"]

    repos = sorted(roots)
    logger.debug(f"Discovered {len(repos)} repositories")
    return repos
