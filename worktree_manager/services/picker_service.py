"""Fuzzy picker (fzf) integration."""

import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence

from worktree_manager.constants import (
    DEFAULT_FZF_HEIGHT,
    DEFAULT_FZF_LAYOUT,
    DEFAULT_FZF_PREVIEW_WINDOW,
    FZF_BINARY,
    FZF_EXIT_CANCELLED,
    FZF_EXIT_NO_MATCH,
)
from worktree_manager.exceptions import PickerError
from worktree_manager.logging_config import get_logger
from worktree_manager.models.picker import PickerResult

logger = get_logger(__name__)


@dataclass
class FzfOptions:
    """Options for one fzf invocation."""

    height: str = DEFAULT_FZF_HEIGHT
    layout: str = DEFAULT_FZF_LAYOUT
    preview_window: str = DEFAULT_FZF_PREVIEW_WINDOW
    preview: Optional[str] = None
    prompt: Optional[str] = None
    header: Optional[str] = None
    expect: Optional[str] = None  # comma-separated keys, e.g. "ctrl-e"

    def to_args(self) -> List[str]:
        """Build the fzf command line arguments."""
        args = [
            "--height", self.height,
            "--layout", self.layout,
            "--preview-window", self.preview_window,
        ]
        if self.preview:
            args += ["--preview", self.preview]
        if self.prompt:
            args += ["--prompt", self.prompt]
        if self.header:
            args += ["--header", self.header]
        if self.expect:
            args += ["--expect", self.expect]
        return args


class PickerService:
    """Runs fzf over a list of candidate lines."""

    def __init__(self, binary: str = FZF_BINARY):
        self.binary = binary

    def pick(self, candidates: Sequence[str], options: Optional[FzfOptions] = None) -> PickerResult:
        """Let the user pick one candidate.

        The whole candidate list is written to fzf's stdin and the pipe is
        closed before the selection is read.

        Returns:
            PickerResult: Selected (line and --expect key), Cancelled (exit 1,
            exit 130 or empty output) or Failed (spawn error, other exit codes,
            signals)
        """
        options = options or FzfOptions()
        command = [self.binary, *options.to_args()]
        stdin_text = "".join(f"{candidate}\n" for candidate in candidates)
        logger.debug(f"Running {' '.join(command)} with {len(candidates)} candidates")

        try:
            completed = subprocess.run(
                command,
                input=stdin_text,
                stdout=subprocess.PIPE,
                stderr=None,  # fzf draws its UI on the terminal
                text=True,
                check=False,
            )
        except OSError as e:
            return PickerResult.failed(f"failed to spawn {self.binary} (is it installed?): {e}")

        return self._interpret(completed.returncode, completed.stdout or "", options)

    @staticmethod
    def _interpret(returncode: int, stdout: str, options: FzfOptions) -> PickerResult:
        if returncode == 0:
            lines = stdout.splitlines()
            if options.expect:
                # --expect prints the pressed key (empty for Enter) on the first line
                if len(lines) < 2 or not lines[1].strip():
                    return PickerResult.cancelled()
                return PickerResult.selected(lines[1].rstrip(), key=lines[0].strip())
            selection = stdout.strip()
            if not selection:
                return PickerResult.cancelled()
            return PickerResult.selected(selection)

        if returncode in (FZF_EXIT_NO_MATCH, FZF_EXIT_CANCELLED):
            logger.debug(f"fzf cancelled (exit {returncode})")
            return PickerResult.cancelled()

        if returncode < 0:
            return PickerResult.failed(f"fzf was terminated by signal {-returncode}")
        return PickerResult.failed(f"fzf exited with unexpected code: {returncode}")


def require_selection(result: PickerResult) -> Optional[PickerResult]:
    """Turn a picker result into a selection, None on cancel.

    Raises:
        PickerError: the picker failed
    """
    if result.is_failed:
        raise PickerError(result.detail or "fzf failed")
    if result.is_cancelled:
        return None
    return result
