"""Shell integration code generation and setup.

`wt interactive` prints `cd|PATH` or `edit|PATH`; a child process cannot change
its parent shell's directory, so a shell function wraps the binary and acts on
that line.
"""

import os
from pathlib import Path
from typing import Mapping, Optional

from worktree_manager.constants import SHELL_MARKER, SUPPORTED_SHELLS
from worktree_manager.exceptions import ConfigError, UserError
from worktree_manager.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_EDITOR = "vim"

_POSIX_TEMPLATE = r"""# wt - git worktree manager shell integration ({shell})

__wt_cd() {{
    local dir="$1"
    if [[ -d "$dir" ]]; then
        builtin cd "$dir" || return 1
    else
        echo "wt: directory not found: $dir" >&2
        return 1
    fi
}}

__wt_edit() {{
    local dir="$1"
    if [[ -d "$dir" ]]; then
        builtin cd "$dir" || return 1
        "${{EDITOR:-{editor}}}" .
    else
        echo "wt: directory not found: $dir" >&2
        return 1
    fi
}}

wt() {{
    if [[ $# -eq 0 ]] || [[ "$1" == "interactive" ]]; then
        local output
        output=$(command wt "$@")
        local exit_code=$?

        if [[ $exit_code -ne 0 ]]; then
            [[ -n "$output" ]] && echo "$output" >&2
            return $exit_code
        fi

        case "$output" in
            cd\|*)
                __wt_cd "${{output#cd|}}"
                ;;
            edit\|*)
                __wt_edit "${{output#edit|}}"
                ;;
            *)
                [[ -n "$output" ]] && echo "$output"
                ;;
        esac
    else
        command wt "$@"
    fi
}}
"""

_FISH_TEMPLATE = r"""# wt - git worktree manager shell integration (fish)

function __wt_cd
    set -l dir $argv[1]
    if test -d "$dir"
        builtin cd "$dir"
    else
        echo "wt: directory not found: $dir" >&2
        return 1
    end
end

function __wt_edit
    set -l dir $argv[1]
    if test -d "$dir"
        builtin cd "$dir"
        if set -q EDITOR
            $EDITOR .
        else
            {editor} .
        end
    else
        echo "wt: directory not found: $dir" >&2
        return 1
    end
end

function wt
    if test (count $argv) -eq 0; or test "$argv[1]" = "interactive"
        set -l output (command wt $argv)
        set -l exit_code $status

        if test $exit_code -ne 0
            if test -n "$output"
                echo "$output" >&2
            end
            return $exit_code
        end

        switch "$output"
            case 'cd|*'
                __wt_cd (string replace 'cd|' '' "$output")
            case 'edit|*'
                __wt_edit (string replace 'edit|' '' "$output")
            case '*'
                if test -n "$output"
                    echo "$output"
                end
        end
    else
        command wt $argv
    end
end
"""


def shell_init(shell: str, editor: Optional[str] = None) -> str:
    """Return the wrapper code for a shell.

    Args:
        shell: bash, zsh or fish
        editor: Editor used when $EDITOR is unset (configured editor)

    Raises:
        UserError: unsupported shell
    """
    editor = editor or DEFAULT_EDITOR
    if shell == "fish":
        return _FISH_TEMPLATE.format(editor=editor)
    if shell in ("bash", "zsh"):
        return _POSIX_TEMPLATE.format(shell=shell, editor=editor)
    raise UserError(f"unsupported shell: {shell} (supported: {', '.join(SUPPORTED_SHELLS)})")


def integration_line(shell: str) -> str:
    """Line added to the shell rc file."""
    if shell == "fish":
        return "wt init fish | source"
    return f'eval "$(wt init {shell})"'


def detect_shell(environ: Optional[Mapping[str, str]] = None) -> str:
    """Detect the user's shell from $SHELL.

    Raises:
        UserError: $SHELL unset or not a supported shell
    """
    environ = os.environ if environ is None else environ
    shell_path = environ.get("SHELL")
    if not shell_path:
        raise UserError("$SHELL environment variable not set; run: wt init <shell>")

    name = Path(shell_path).name
    for shell in SUPPORTED_SHELLS:
        if shell in name:
            return shell
    raise UserError(
        f"unsupported shell: {shell_path}\nSupported shells: {', '.join(SUPPORTED_SHELLS)}\n"
        "For manual setup, run: wt init <shell>"
    )


def shell_config_path(shell: str, home: Path, environ: Optional[Mapping[str, str]] = None) -> Path:
    """Pick the rc file for a shell under `home`."""
    environ = os.environ if environ is None else environ
    home = Path(home)

    if shell == "zsh":
        zshrc = home / ".zshrc"
        if zshrc.exists():
            return zshrc
        zdotdir = environ.get("ZDOTDIR")
        return Path(zdotdir) / ".zshrc" if zdotdir else zshrc

    if shell == "bash":
        bashrc = home / ".bashrc"
        if bashrc.exists():
            return bashrc
        bash_profile = home / ".bash_profile"
        return bash_profile if bash_profile.exists() else bashrc

    return home / ".config" / "fish" / "config.fish"


def is_configured(config_path: Path) -> bool:
    """Whether the rc file already sources the integration."""
    if not config_path.exists():
        return False
    try:
        contents = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"failed to read {config_path}: {e}") from e

    known_lines = [integration_line(shell) for shell in SUPPORTED_SHELLS]
    return SHELL_MARKER in contents or any(line in contents for line in known_lines)


def append_integration(config_path: Path, shell: str) -> None:
    """Append the marker and integration line to the rc file.

    Raises:
        ConfigError: the file or its directory could not be written
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        existing = config_path.read_text(encoding="utf-8") if config_path.exists() else ""
        with open(config_path, "a", encoding="utf-8") as f:
            if existing and not existing.endswith("\n"):
                f.write("\n")
            f.write(f"\n{SHELL_MARKER}\n{integration_line(shell)}\n")
    except OSError as e:
        raise ConfigError(f"failed to update {config_path}: {e}") from e
    logger.info(f"Added shell integration to {config_path}")


def reload_command(shell: str, config_path: Path) -> str:
    if shell == "fish":
        return "exec fish"
    return f"source {config_path}"
