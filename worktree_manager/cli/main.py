"""Command-line interface for worktree-manager"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from rich.markup import escape

from worktree_manager.config import ConfigStore, default_config_root
from worktree_manager.core import WorktreeManager
from worktree_manager.exceptions import WorktreeManagerError
from worktree_manager.formatters import format_json
from worktree_manager.logging_config import get_logger, setup_logging
from worktree_manager.services.display_service import err_console

from .args import parse_args

logger = get_logger(__name__)

EXIT_INTERRUPTED = 130
UNKNOWN_ERROR_CODE = "unknown"


def _report_error(error: dict, json_output: bool) -> None:
    """Print an error object: JSON on stdout, `error[<code>]: <message>` on stderr."""
    if json_output:
        print(format_json(error, pretty=False), flush=True)
    else:
        tag = escape(f"error[{error['code']}]:")
        err_console.print(f"[red]{tag}[/red] {escape(error['message'])}", soft_wrap=True)


def run_command(manager: WorktreeManager, args: argparse.Namespace) -> int:
    """Dispatch parsed arguments to the manager."""
    command = args.command or "interactive"

    if command == "list":
        return manager.list_worktrees(json_output=args.json, all_repos=args.all)
    if command == "add":
        if args.branch:
            return manager.add(args.branch, path=args.path, track=args.track, json_output=args.json, quiet=args.quiet)
        return manager.interactive_add(path=args.path, track=args.track, json_output=args.json, quiet=args.quiet)
    if command == "remove":
        if args.target:
            return manager.remove(args.target, force=args.force, json_output=args.json, quiet=args.quiet)
        return manager.interactive_remove(force=args.force, json_output=args.json, quiet=args.quiet)
    if command == "prune":
        return manager.prune(json_output=args.json, quiet=args.quiet)
    if command == "preview":
        return manager.preview(args.path, json_output=args.json)
    if command == "interactive":
        return manager.interactive(all_repos=getattr(args, "all", False))
    if command == "config":
        if args.config_command == "init":
            return manager.config_init()
        if args.config_command == "show":
            return manager.config_show(json_output=args.json)
        if args.config_command == "set-editor":
            return manager.config_set_editor(args.editor)
        return manager.config_set_discovery_paths(args.paths)
    if command == "init":
        if args.shell:
            return manager.shell_init(args.shell)
        return manager.shell_setup()
    if command == "agent":
        if args.agent_command == "context":
            return manager.agent_context(json_output=args.json)
        if args.agent_command == "status":
            return manager.agent_status(json_output=args.json)
        return manager.agent_onboard()

    raise ValueError(f"unhandled command: {command}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    json_output = False
    debug = False
    try:
        # Parse command line arguments
        parsed_args = parse_args(argv)
        json_output = getattr(parsed_args, "json", False)
        debug = parsed_args.debug

        if parsed_args.config_dir:
            config_root = Path(parsed_args.config_dir).expanduser()
        else:
            config_root = default_config_root()

        setup_logging(verbose=parsed_args.verbose, debug=debug, log_dir=config_root)
        logger.debug(f"Arguments: {vars(parsed_args)}")
        logger.debug(f"Config root: {config_root}")

        manager = WorktreeManager(ConfigStore(config_root))
        return run_command(manager, parsed_args)
    except WorktreeManagerError as e:
        logger.debug(f"{type(e).__name__}: {e}")
        _report_error(e.to_json(), json_output)
        return e.exit_code
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.debug("Unexpected error", exc_info=True)
        _report_error({"error": True, "code": UNKNOWN_ERROR_CODE, "message": str(e)}, json_output)
        if debug:
            err_console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
