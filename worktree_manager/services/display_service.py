"""Display service for worktree output"""
from pathlib import Path
from typing import Optional, Sequence, Tuple

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from worktree_manager.formatters import display_path, format_flags
from worktree_manager.logging_config import get_logger
from worktree_manager.models.worktree import WorktreeRecord

# stdout carries command output (parsed by the shell wrapper and by agents),
# everything meant for a human goes to stderr
console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)
logger = get_logger(__name__)


class DisplayService:
    def __init__(self, quiet: bool = False):
        """
        Args:
            quiet: Suppress progress and success messages
        """
        self.quiet = quiet

    def display_worktree_table(self, records: Sequence[WorktreeRecord], repo_root: Path) -> None:
        """Display worktrees of one repository."""
        table = Table(show_edge=False, box=None, pad_edge=False)
        table.add_column("Branch", style="cyan", no_wrap=True)
        table.add_column("Path", overflow="fold")
        table.add_column("HEAD", style="dim", no_wrap=True)
        table.add_column("Flags", style="yellow")

        for record in records:
            table.add_row(
                escape(record.display_branch),
                escape(display_path(repo_root, record.path)),
                (record.head or "")[:7],
                escape(format_flags(record)),
            )

        console.print(table)

    def display_all_table(self, entries: Sequence[Tuple[Path, WorktreeRecord]]) -> None:
        """Display worktrees across repositories, grouped by repository root."""
        table = Table(show_edge=False, box=None, pad_edge=False)
        table.add_column("Repository", style="bold", no_wrap=True)
        table.add_column("Branch", style="cyan", no_wrap=True)
        table.add_column("Path", overflow="fold")
        table.add_column("Flags", style="yellow")

        for repo_root, record in entries:
            table.add_row(
                escape(repo_root.name),
                escape(record.display_branch),
                escape(str(record.path)),
                escape(format_flags(record)),
            )

        console.print(table)

    def print_output(self, text: str) -> None:
        """Print plain command output to stdout, no markup or wrapping."""
        console.print(text, markup=False, soft_wrap=True)

    @staticmethod
    def print_machine(text: str) -> None:
        """Print a line for another program (JSON, shell wrapper actions)."""
        print(text, flush=True)

    def info(self, message: str) -> None:
        if not self.quiet:
            err_console.print(escape(message), soft_wrap=True)

    def success(self, message: str) -> None:
        if not self.quiet:
            err_console.print(f"[green]{escape(message)}[/green]", soft_wrap=True)

    def warning(self, message: str) -> None:
        logger.debug(message)
        err_console.print(f"[yellow]{escape(message)}[/yellow]", soft_wrap=True)

    @staticmethod
    def error(message: str, hint: Optional[str] = None) -> None:
        err_console.print(f"[red]{escape(message)}[/red]", soft_wrap=True)
        if hint:
            err_console.print(f"[dim]{escape(hint)}[/dim]", soft_wrap=True)
