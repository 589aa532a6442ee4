"""Shared constants for worktree-manager."""

# Ref namespaces reported by `git worktree list --porcelain`
LOCAL_BRANCH_PREFIX = "refs/heads/"
REMOTE_BRANCH_PREFIX = "refs/remotes/"

# Conventional main branch names, checked in order
MAIN_BRANCH_CANDIDATES = ("main", "master")
DEFAULT_REMOTE = "origin"

DETACHED_LABEL = "(detached)"
UNKNOWN_LABEL = "(unknown)"

# Picker defaults
FZF_BINARY = "fzf"
DEFAULT_FZF_HEIGHT = "40%"
DEFAULT_FZF_LAYOUT = "reverse"
DEFAULT_FZF_PREVIEW_WINDOW = "right:60%"

# fzf exit codes
FZF_EXIT_NO_MATCH = 1
FZF_EXIT_CANCELLED = 130

# Candidate line column separator
COLUMN_SEPARATOR = "  "

CREATE_NEW_BRANCH_OPTION = "[+] Create new branch..."

# Actions printed by `wt interactive` for the shell wrapper
ACTION_CD = "cd"
ACTION_EDIT = "edit"
EDIT_KEY = "ctrl-e"

# Config
CONFIG_VERSION = "1.0.0"
CONFIG_DIR_NAME = "worktree-manager"
CONFIG_FILE_NAME = "config.yaml"
CONFIG_DIR_ENV = "WT_CONFIG_DIR"
LOG_FILE_NAME = "wt.log"

# Discovery
DISCOVERY_MAX_DEPTH = 3

# Preview
PREVIEW_COMMIT_COUNT = 5

# Marker comment written next to the shell integration line
SHELL_MARKER = "# wt shell integration"
SUPPORTED_SHELLS = ("bash", "zsh", "fish")

# Messages from `git worktree remove` when the worktree has local changes
UNCOMMITTED_CHANGES_HINTS = (
    "uncommitted changes",
    "modified or untracked files",
    "contains modified",
    "changes would be lost",
)
