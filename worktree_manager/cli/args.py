"""Command-line argument parsing for worktree-manager."""

import argparse
import sys
from typing import List, Optional

from worktree_manager.__version__ import __version__
from worktree_manager.constants import SUPPORTED_SHELLS
from worktree_manager.exceptions import UserError


class ArgumentParser(argparse.ArgumentParser):
    """argparse parser whose usage errors map to the user error category."""

    def error(self, message):
        self.print_usage(sys.stderr)
        raise UserError(message)


def _add_output_flags(parser: argparse.ArgumentParser, quiet: bool = True) -> None:
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    if quiet:
        parser.add_argument(
            "-q", "--quiet", action="store_true", help="Suppress progress and success messages"
        )


def build_parser() -> argparse.ArgumentParser:
    """Build the `wt` argument parser."""
    parser = ArgumentParser(
        prog="wt",
        description="Git worktree manager: list, create, remove and jump between worktrees",
        epilog="Run `wt init` once to install the shell wrapper that lets `wt` change directory.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information and write wt.log to the config directory"
    )
    parser.add_argument(
        "--config-dir",
        metavar="DIR",
        help="Config directory (default: $WT_CONFIG_DIR or ~/.config/worktree-manager)",
    )
    parser.add_argument("--version", action="version", version=f"wt {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    list_parser = subparsers.add_parser("list", help="List worktrees")
    list_parser.add_argument("--json", action="store_true", help="Output as JSON")
    list_parser.add_argument(
        "--all", action="store_true", help="List worktrees across all discovered repositories"
    )

    add_parser = subparsers.add_parser("add", help="Create a worktree (picker when BRANCH is omitted)")
    add_parser.add_argument("branch", nargs="?", help="Branch to check out or create")
    add_parser.add_argument(
        "-p", "--path", help="Worktree directory (default: <repo parent>/<repo>-<branch>)"
    )
    add_parser.add_argument("--track", metavar="REMOTE", help="Create the branch tracking REMOTE/BRANCH")
    _add_output_flags(add_parser)

    remove_parser = subparsers.add_parser(
        "remove", help="Remove a worktree (picker when TARGET is omitted)"
    )
    remove_parser.add_argument("target", nargs="?", help="Branch name or worktree path")
    remove_parser.add_argument(
        "-f", "--force", action="store_true",
        help="Skip confirmation, discard local changes and override a lock",
    )
    _add_output_flags(remove_parser)

    prune_parser = subparsers.add_parser("prune", help="Prune stale worktree metadata")
    _add_output_flags(prune_parser)

    preview_parser = subparsers.add_parser("preview", help="Show status and recent commits of a worktree")
    preview_parser.add_argument("--path", required=True, help="Worktree path")
    _add_output_flags(preview_parser, quiet=False)

    interactive_parser = subparsers.add_parser(
        "interactive", help="Pick a worktree to cd into (default command)"
    )
    interactive_parser.add_argument(
        "--all", action="store_true", help="Pick across all discovered repositories"
    )

    config_parser = subparsers.add_parser("config", help="Manage configuration")
    config_subparsers = config_parser.add_subparsers(dest="config_command", metavar="ACTION", required=True)
    config_subparsers.add_parser("init", help="Create a default config file")
    show_parser = config_subparsers.add_parser("show", help="Show the effective configuration")
    show_parser.add_argument("--json", action="store_true", help="Output as JSON")
    editor_parser = config_subparsers.add_parser("set-editor", help="Set the default editor")
    editor_parser.add_argument("editor", help="Editor command, e.g. nvim or code")
    paths_parser = config_subparsers.add_parser(
        "set-discovery-paths", help="Set the directories searched by --all"
    )
    paths_parser.add_argument("paths", nargs="+", metavar="PATH", help="Directories to search")

    init_parser = subparsers.add_parser(
        "init", help="Print shell integration code, or set it up when SHELL is omitted"
    )
    init_parser.add_argument("shell", nargs="?", choices=SUPPORTED_SHELLS, help="Target shell")

    agent_parser = subparsers.add_parser("agent", help="Compact output for coding agents")
    agent_subparsers = agent_parser.add_subparsers(dest="agent_command", metavar="ACTION", required=True)
    context_parser = agent_subparsers.add_parser("context", help="Current and other worktrees")
    context_parser.add_argument("--json", action="store_true", help="Output as JSON")
    status_parser = agent_subparsers.add_parser("status", help="Minimal one-line status")
    status_parser.add_argument("--json", action="store_true", help="Output as JSON")
    agent_subparsers.add_parser("onboard", help="Print a workflow reference for agents")

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Raises:
        UserError: invalid arguments
    """
    return build_parser().parse_args(argv)
