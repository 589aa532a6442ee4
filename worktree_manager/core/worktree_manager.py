"""Core functionality for worktree-manager"""

import dataclasses
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

import yaml
from rich.prompt import Confirm, Prompt

from worktree_manager.config import Config, ConfigStore
from worktree_manager.constants import (
    ACTION_CD,
    ACTION_EDIT,
    CREATE_NEW_BRANCH_OPTION,
    EDIT_KEY,
    SHELL_MARKER,
    UNKNOWN_LABEL,
)
from worktree_manager.exceptions import GitError, NotFoundError, UserError
from worktree_manager.formatters import (
    extract_path,
    extract_path_from_all,
    format_all_candidates,
    format_candidates,
    format_dirty,
    format_json,
    format_list_lines,
    format_section,
    strip_remote_prefix,
)
from worktree_manager.logging_config import get_logger
from worktree_manager.models.worktree import WorktreeRecord
from worktree_manager.services.discovery_service import discover_repositories
from worktree_manager.services.display_service import DisplayService, console, err_console
from worktree_manager.services.git import (
    RepositoryService,
    WorktreeService,
    default_worktree_path,
    find_repository_root,
)
from worktree_manager.services.picker_service import FzfOptions, PickerService, require_selection
from worktree_manager.services.removal_policy import RemovalPolicy
from worktree_manager.services.worktree_resolver import find_worktree
from worktree_manager.services import shell_integration

logger = get_logger(__name__)

ONBOARD_TEXT = """# wt - Git Worktree Manager

## Quick Reference

| Command | Description | Agent Flags |
|---------|-------------|-------------|
| `wt list` | List all worktrees | `--json`, `--all` |
| `wt add <branch>` | Create worktree | `--json`, `--quiet` |
| `wt remove <target>` | Remove worktree | `--json`, `--quiet`, `--force` |
| `wt prune` | Clean stale worktrees | `--json`, `--quiet` |
| `wt preview --path <p>` | Preview worktree | `--json` |
| `wt agent context` | Full worktree context | `--json` |
| `wt agent status` | Minimal status | `--json` |

## JSON Output Examples

### wt list --json
```json
[{"path": "/path/to/wt", "head": "abc123", "branch": "refs/heads/main", "locked": false, "locked_reason": null, "prunable": null, "bare": false}]
```

### wt add <branch> --json --quiet
```json
{"success": true, "branch": "feature-x", "path": "/path/to/repo-feature-x"}
```

### wt remove <target> --json --force
```json
{"success": true, "removed": true, "branch": "feature-x", "path": "/path/to/wt"}
```

### wt agent status --json
```json
{"current": {"path": "/path/to/wt", "branch": "main", "dirty": true}, "count": 3}
```

### Errors (any command with --json)
```json
{"error": true, "code": "not_found", "message": "no worktree found matching 'x'"}
```

## Common Workflows

```bash
# Create worktree for feature branch
wt add feature-x --json --quiet

# List all worktrees
wt list --json

# Check current state
wt agent status --json

# Remove worktree after PR merge
wt remove feature-x --force --json

# Clean up stale worktrees
wt prune --quiet --json
```

## Best Practices

1. Always use `--json` for programmatic parsing
2. Use `--quiet` to suppress progress messages
3. Use `--force` with remove in scripts; without it removal asks for confirmation
4. Run `wt agent context` at session start for full layout
5. Check `dirty` status before switching worktrees
"""


class WorktreeManager:
    """Main class for managing git worktrees."""

    def __init__(
        self,
        config_store: ConfigStore,
        cwd: Optional[Path] = None,
        picker: Optional[PickerService] = None,
    ):
        """Initialize WorktreeManager.

        Args:
            config_store: Store for the YAML config (root already resolved)
            cwd: Directory commands run from (defaults to the process cwd)
            picker: fzf picker (replaced in tests)
        """
        self.config_store = config_store
        self.cwd = Path(cwd) if cwd is not None else Path(os.getcwd())
        self.picker = picker or PickerService()
        self._config: Optional[Config] = None

    @property
    def config(self) -> Config:
        if self._config is None:
            self._config = self.config_store.load()
        return self._config

    def _repo_root(self) -> Path:
        return find_repository_root(self.cwd)

    def _services(self) -> Tuple[Path, RepositoryService, WorktreeService]:
        root = self._repo_root()
        repository = RepositoryService(root)
        return root, repository, WorktreeService(root, repository)

    def _fzf_options(self, **kwargs) -> FzfOptions:
        fzf = self.config.fzf
        return FzfOptions(
            height=fzf.height, layout=fzf.layout, preview_window=fzf.preview_window, **kwargs
        )

    @staticmethod
    def _require_prompt(quiet: bool, json_output: bool) -> None:
        """Quiet and JSON modes cannot ask for confirmation."""
        if quiet or json_output:
            raise UserError(
                "refusing to remove a worktree without confirmation; pass --force with --quiet or --json"
            )

    def _absolute(self, path: str) -> Path:
        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            candidate = self.cwd / candidate
        return Path(os.path.normpath(candidate))

    # ------------------------------------------------------------------
    # list
    # ------------------------------------------------------------------

    def list_worktrees(self, json_output: bool = False, all_repos: bool = False) -> int:
        """List worktrees of the current repository, or of every discovered one."""
        display = DisplayService()
        if all_repos:
            return self._list_all(display, json_output)

        root, _, worktrees = self._services()
        records = worktrees.list_worktrees()

        if json_output:
            display.print_machine(format_json([record.to_dict() for record in records]))
        elif console.is_terminal:
            display.display_worktree_table(records, root)
        else:
            for line in format_list_lines(records, root):
                display.print_output(line)
        return 0

    def _list_all(self, display: DisplayService, json_output: bool) -> int:
        entries = self._collect_all_worktrees(display)

        if json_output:
            data = []
            for repo_root, record in entries:
                item = record.to_dict()
                item["repository"] = str(repo_root)
                data.append(item)
            display.print_machine(format_json(data))
        elif console.is_terminal:
            display.display_all_table(entries)
        else:
            for line in format_all_candidates([(root.name, record) for root, record in entries]):
                display.print_output(line)
        return 0

    def _discovered_repositories(self) -> List[Path]:
        paths = self.config.discovery_paths
        if not paths:
            raise UserError(
                "no auto-discovery paths configured; run: wt config set-discovery-paths <paths...>"
            )
        repos = discover_repositories(paths)
        if not repos:
            raise NotFoundError("no git repositories found in configured discovery paths")
        return repos

    def _collect_all_worktrees(self, display: DisplayService) -> List[Tuple[Path, WorktreeRecord]]:
        """Worktrees of every discovered repository; unreadable ones are skipped."""
        entries: List[Tuple[Path, WorktreeRecord]] = []
        for repo_root in self._discovered_repositories():
            try:
                records = WorktreeService(repo_root).list_worktrees()
            except GitError as e:
                display.warning(f"Warning: failed to list worktrees for {repo_root.name}: {e}")
                continue
            entries.extend((repo_root, record) for record in records)

        if not entries:
            raise NotFoundError("no worktrees found in any discovered repository")
        return entries

    # ------------------------------------------------------------------
    # add
    # ------------------------------------------------------------------

    def add(
        self,
        branch: str,
        path: Optional[str] = None,
        track: Optional[str] = None,
        json_output: bool = False,
        quiet: bool = False,
    ) -> int:
        """Create a worktree for a branch.

        Args:
            branch: Branch to check out (created when it does not exist)
            path: Target directory, defaults to a sibling of the repository root
            track: Remote to track, creates `branch` from `<track>/<branch>`
        """
        branch = branch.strip()
        if not branch:
            raise UserError("branch name cannot be empty")

        display = DisplayService(quiet=quiet or json_output)
        root, _, worktrees = self._services()
        target = self._absolute(path) if path else default_worktree_path(root, branch)

        display.info(f"Creating worktree at: {target}")
        tracking = worktrees.add_worktree(branch, target, track=track)

        if json_output:
            result = {"success": True, "branch": branch, "path": str(target)}
            if tracking:
                result["tracking"] = tracking
            display.print_machine(format_json(result, pretty=False))
        else:
            display.success("Worktree created successfully")
        return 0

    def interactive_add(
        self,
        path: Optional[str] = None,
        track: Optional[str] = None,
        json_output: bool = False,
        quiet: bool = False,
    ) -> int:
        """Pick a branch with fzf, then add a worktree for it."""
        _, repository, worktrees = self._services()
        branches = worktrees.available_branches()
        remote_branches = set(repository.remote_branches())

        result = require_selection(self.picker.pick(
            [CREATE_NEW_BRANCH_OPTION, *branches],
            self._fzf_options(prompt="Branch> ", header="Select a branch for the new worktree"),
        ))
        if result is None:
            logger.debug("Branch selection cancelled")
            return 0

        selection = result.value
        if selection == CREATE_NEW_BRANCH_OPTION:
            branch = Prompt.ask("Enter new branch name", default="", console=err_console).strip()
            if not branch:
                DisplayService(quiet=quiet or json_output).info("Cancelled.")
                return 0
        elif selection in remote_branches:
            branch = strip_remote_prefix(selection)
        else:
            branch = selection

        return self.add(branch, path=path, track=track, json_output=json_output, quiet=quiet)

    # ------------------------------------------------------------------
    # remove
    # ------------------------------------------------------------------

    def remove(
        self,
        target: str,
        force: bool = False,
        json_output: bool = False,
        quiet: bool = False,
    ) -> int:
        """Remove the worktree matching a branch name or path.

        The bare location and the main branch worktree are refused even with
        force. Without force a locked worktree is refused, and the user is
        asked to confirm; quiet and JSON modes cannot ask and need force.
        """
        display = DisplayService(quiet=quiet or json_output)
        _, repository, worktrees = self._services()
        record = find_worktree(worktrees.list_worktrees(), target, base_dir=self.cwd)

        RemovalPolicy.check_removable(record, repository.main_branch(), force=force)

        branch = None if record.is_detached else record.display_branch
        if not force:
            self._require_prompt(quiet, json_output)
            question = f"Remove worktree '{branch or '<detached>'}' at {record.path}?"
            if not Confirm.ask(question, default=False, console=err_console):
                display.info("Cancelled.")
                return 0

        worktrees.remove_worktree(record, force=force)

        if json_output:
            display.print_machine(format_json(
                {"success": True, "removed": True, "branch": branch, "path": str(record.path)},
                pretty=False,
            ))
        else:
            display.success("Worktree removed.")
        return 0

    def interactive_remove(self, force: bool = False, json_output: bool = False, quiet: bool = False) -> int:
        """Pick a removable worktree with fzf, then remove it."""
        if not force:
            self._require_prompt(quiet, json_output)
        _, repository, worktrees = self._services()
        main_branch = repository.main_branch()
        candidates = [
            record for record in worktrees.list_worktrees()
            if RemovalPolicy.is_removable(record, main_branch)
        ]
        if not candidates:
            raise NotFoundError("no removable worktrees found")

        result = require_selection(self.picker.pick(
            format_candidates(candidates),
            self._fzf_options(
                prompt="Remove> ",
                header="Select a worktree to remove",
                preview="wt preview --path {2}",
            ),
        ))
        if result is None:
            logger.debug("Removal cancelled")
            return 0

        return self.remove(extract_path(result.value), force=force, json_output=json_output, quiet=quiet)

    # ------------------------------------------------------------------
    # prune
    # ------------------------------------------------------------------

    def prune(self, json_output: bool = False, quiet: bool = False) -> int:
        """Report prunable worktrees, then run `git worktree prune`."""
        display = DisplayService(quiet=quiet or json_output)
        _, _, worktrees = self._services()
        stale = RemovalPolicy.prune_candidates(worktrees.list_worktrees())

        if not stale:
            if json_output:
                display.print_machine(format_json({"success": True, "pruned": []}, pretty=False))
            display.info("No stale worktrees found.")
            return 0

        display.info("Stale worktrees to prune:")
        for path, reason in stale:
            display.info(f"  - {path} ({reason or 'prunable'})")

        worktrees.prune_worktrees()

        if json_output:
            pruned = [{"path": str(path), "reason": reason} for path, reason in stale]
            display.print_machine(format_json({"success": True, "pruned": pruned}, pretty=False))
        else:
            display.success("Pruned stale worktrees.")
        return 0

    # ------------------------------------------------------------------
    # preview
    # ------------------------------------------------------------------

    def preview(self, path: str, json_output: bool = False) -> int:
        """Show repository, branch, status and recent commits for a worktree.

        Everything after locating the repository is best effort.
        """
        target = self._absolute(path)
        if target.exists():
            target = target.resolve()

        root = find_repository_root(target)
        record = WorktreeService(root).find_by_path(target)
        branch = record.display_branch if record is not None else UNKNOWN_LABEL

        status = RepositoryService.status_summary(target)
        commits = RepositoryService.recent_commits(target)
        changed = RepositoryService.changed_files(target)

        display = DisplayService()
        if json_output:
            display.print_machine(format_json({
                "repository": root.name,
                "branch": branch,
                "path": str(target),
                "status": status.rstrip() if status is not None else None,
                "recent_commits": commits.splitlines() if commits is not None else None,
                "changed_files": changed,
            }))
            return 0

        lines = [
            f"Repo:   {root.name}",
            f"Branch: {branch}",
            f"Path:   {target}",
            "",
            format_section("Status", status, fallback="(failed to read status)"),
            format_section("Recent commits", commits, fallback="(failed to read log)"),
        ]
        if changed:
            lines.append(format_section("Changed files", "\n".join(changed)))
        display.print_output("\n".join(lines))
        return 0

    # ------------------------------------------------------------------
    # interactive
    # ------------------------------------------------------------------

    def interactive(self, all_repos: bool = False) -> int:
        """Pick a worktree and print `cd|PATH` or `edit|PATH` for the shell wrapper.

        Cancelling prints nothing.
        """
        display = DisplayService()
        if all_repos:
            entries = self._collect_all_worktrees(display)
            candidates = format_all_candidates([(root.name, record) for root, record in entries])
            preview_column, extract = "{3}", extract_path_from_all
        else:
            _, _, worktrees = self._services()
            records = worktrees.list_worktrees()
            if not records:
                raise NotFoundError("no worktrees found in repository")
            candidates = format_candidates(records)
            preview_column, extract = "{2}", extract_path

        result = require_selection(self.picker.pick(
            candidates,
            self._fzf_options(
                preview=f"wt preview --path {preview_column}",
                prompt="Worktree> ",
                header="Enter: cd | Ctrl-E: edit",
                expect=EDIT_KEY,
            ),
        ))
        if result is None:
            logger.debug("Worktree selection cancelled")
            return 0

        action = ACTION_EDIT if result.key == EDIT_KEY else ACTION_CD
        display.print_machine(f"{action}|{extract(result.value)}")
        return 0

    # ------------------------------------------------------------------
    # config
    # ------------------------------------------------------------------

    def config_init(self) -> int:
        display = DisplayService()
        if self.config_store.init():
            display.success(f"Created config at {self.config_store.path}")
        else:
            display.info(f"Config already exists at {self.config_store.path}")
        return 0

    def config_show(self, json_output: bool = False) -> int:
        display = DisplayService()
        config = self.config
        if json_output:
            display.print_machine(format_json(config.to_dict()))
            return 0

        if self.config_store.exists():
            display.info(f"# {self.config_store.path}")
        else:
            display.info(f"# {self.config_store.path} (not created yet, showing defaults)")
        display.print_output(yaml.safe_dump(config.to_dict(), default_flow_style=False, sort_keys=False).rstrip())
        return 0

    def config_set_editor(self, editor: str) -> int:
        editor = editor.strip()
        if not editor:
            raise UserError("editor cannot be empty")
        self._save_config(dataclasses.replace(self.config, editor=editor))
        DisplayService().success(f"Default editor set to: {editor}")
        return 0

    def config_set_discovery_paths(self, paths: List[str]) -> int:
        if not paths:
            raise UserError("at least one discovery path is required")
        resolved = [str(self._absolute(p)) for p in paths]
        discovery = dataclasses.replace(self.config.auto_discovery, enabled=True, paths=resolved)
        self._save_config(dataclasses.replace(self.config, auto_discovery=discovery))

        display = DisplayService()
        display.success("Auto-discovery paths configured:")
        for p in resolved:
            display.info(f"  {p}")
        display.info("\nYou can now use:")
        display.info("  wt list --all         # List worktrees across all repos")
        display.info("  wt interactive --all  # Interactive picker across all repos")
        return 0

    def _save_config(self, config: Config) -> None:
        self.config_store.save(config)
        self._config = config

    # ------------------------------------------------------------------
    # shell integration
    # ------------------------------------------------------------------

    def shell_init(self, shell: str) -> int:
        """Print the wrapper function for a shell."""
        DisplayService.print_machine(shell_integration.shell_init(shell, editor=self.config.editor))
        return 0

    def shell_setup(self, home: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> int:
        """Detect the shell and add the integration line to its rc file."""
        display = DisplayService()
        shell = shell_integration.detect_shell(environ)
        home = Path(home) if home is not None else Path.home()
        rc_path = shell_integration.shell_config_path(shell, home, environ)

        if shell_integration.is_configured(rc_path):
            display.info(f"Shell integration already configured in {rc_path}")
            return 0

        display.info(f"Detected shell: {shell}")
        display.info(f"Will add to {rc_path}:")
        display.info(f"  {SHELL_MARKER}")
        display.info(f"  {shell_integration.integration_line(shell)}")
        if not Confirm.ask("Proceed?", default=True, console=err_console):
            display.info("Cancelled.")
            return 0

        shell_integration.append_integration(rc_path, shell)
        display.success(f"Shell integration added to {rc_path}")
        display.info(f"Restart your shell or run: {shell_integration.reload_command(shell, rc_path)}")
        return 0

    # ------------------------------------------------------------------
    # agent
    # ------------------------------------------------------------------

    @staticmethod
    def _agent_info(record: WorktreeRecord) -> Dict:
        return {
            "path": str(record.path),
            "branch": None if record.is_detached else record.display_branch,
            "head": record.head,
            "dirty": RepositoryService.is_dirty(record.path),
        }

    def agent_context(self, json_output: bool = False) -> int:
        """Summarise the current worktree, the others and their dirty state."""
        root, _, worktrees = self._services()
        records = worktrees.list_worktrees()
        current = worktrees.find_containing(self.cwd)

        current_info = None
        others = []
        for record in records:
            info = self._agent_info(record)
            if current is not None and record.path == current.path:
                current_info = info
            else:
                others.append(info)

        display = DisplayService()
        if json_output:
            display.print_machine(format_json({
                "current_worktree": current_info,
                "other_worktrees": others,
                "repository": {"root": str(root), "total_worktrees": len(records)},
            }))
            return 0

        lines = ["## Worktree Context", ""]
        if current_info is not None:
            lines.append(f"Current: {current_info['branch'] or '<detached>'} @ {current_info['path']}")
            lines.append(f"Status: {'dirty' if current_info['dirty'] else 'clean'}")
        else:
            lines.append("Not currently in a worktree")
        lines.append("")

        if others:
            lines.append("Other worktrees:")
            for info in others:
                lines.append(f"  - {info['branch'] or '<detached>'} @ {info['path']}{format_dirty(info['dirty'])}")
            lines.append("")

        lines += [
            f"Repository: {root}",
            f"Total worktrees: {len(records)}",
            "",
            "## Quick Commands",
            "",
            "  wt                  # Interactive picker",
            "  wt list --json      # List all worktrees",
            "  wt add <branch>     # Create new worktree",
            "  wt remove <target>  # Remove worktree",
            "  wt prune            # Clean stale worktrees",
        ]
        display.print_output("\n".join(lines))
        return 0

    def agent_status(self, json_output: bool = False) -> int:
        """Minimal one-line status, cheap enough to run on every prompt."""
        _, _, worktrees = self._services()
        records = worktrees.list_worktrees()
        current = worktrees.find_containing(self.cwd)

        display = DisplayService()
        if json_output:
            current_data = None
            if current is not None:
                info = self._agent_info(current)
                current_data = {"path": info["path"], "branch": info["branch"], "dirty": info["dirty"]}
            display.print_machine(format_json({"current": current_data, "count": len(records)}, pretty=False))
            return 0

        if current is not None:
            branch = None if current.is_detached else current.display_branch
            dirty = format_dirty(RepositoryService.is_dirty(current.path))
            display.print_output(f"{branch or '<detached>'} @ {current.path}{dirty}")
        else:
            display.print_output("Not in a worktree")
        display.print_output(f"Total: {len(records)} worktrees")
        return 0

    def agent_onboard(self) -> int:
        DisplayService().print_output(ONBOARD_TEXT.rstrip())
        return 0
