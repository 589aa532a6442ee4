"""Configuration handling for worktree-manager"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

import yaml

from worktree_manager.constants import (
    CONFIG_DIR_ENV,
    CONFIG_DIR_NAME,
    CONFIG_FILE_NAME,
    CONFIG_VERSION,
    DEFAULT_FZF_HEIGHT,
    DEFAULT_FZF_LAYOUT,
    DEFAULT_FZF_PREVIEW_WINDOW,
)
from worktree_manager.exceptions import ConfigError
from worktree_manager.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class FzfConfig:
    """Picker appearance."""

    height: str = DEFAULT_FZF_HEIGHT
    layout: str = DEFAULT_FZF_LAYOUT
    preview_window: str = DEFAULT_FZF_PREVIEW_WINDOW

    def __post_init__(self):
        for name in ("height", "layout", "preview_window"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"fzf.{name} must be a non-empty string, got {value!r}")


@dataclass
class AutoDiscoveryConfig:
    """Search roots for cross-repository commands."""

    enabled: bool = True
    paths: List[str] = field(default_factory=list)

    def __post_init__(self):
        if not isinstance(self.enabled, bool):
            raise ValueError(f"auto_discovery.enabled must be true or false, got {self.enabled!r}")
        if not isinstance(self.paths, list):
            raise ValueError("auto_discovery.paths must be a list")
        if not all(isinstance(p, str) for p in self.paths):
            raise ValueError("auto_discovery.paths must contain only strings")


@dataclass
class Config:
    """Configuration for worktree-manager with validation."""

    version: str = CONFIG_VERSION
    fzf: FzfConfig = field(default_factory=FzfConfig)
    auto_discovery: AutoDiscoveryConfig = field(default_factory=AutoDiscoveryConfig)
    editor: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not isinstance(self.version, str) or not self.version.strip():
            raise ValueError("version cannot be empty")
        if self.editor is not None:
            self.editor = self.editor.strip() or None

    @property
    def discovery_paths(self) -> List[str]:
        """Discovery roots, empty when discovery is disabled."""
        if not self.auto_discovery.enabled:
            return []
        return list(self.auto_discovery.paths)

    def to_dict(self) -> dict:
        """Convert config to a plain dictionary (YAML/JSON document)."""
        data = {
            "version": self.version,
            "fzf": {
                "height": self.fzf.height,
                "layout": self.fzf.layout,
                "preview_window": self.fzf.preview_window,
            },
            "auto_discovery": {
                "enabled": self.auto_discovery.enabled,
                "paths": list(self.auto_discovery.paths),
            },
        }
        if self.editor:
            data["editor"] = self.editor
        return data

    @classmethod
    def from_dict(cls, config_dict: Mapping) -> "Config":
        """Create Config from dictionary; unknown keys are ignored."""
        fzf_data = config_dict.get("fzf") or {}
        discovery_data = config_dict.get("auto_discovery") or {}
        if not isinstance(fzf_data, Mapping) or not isinstance(discovery_data, Mapping):
            raise ValueError("fzf and auto_discovery must be mappings")

        fzf = FzfConfig(**{k: str(v) for k, v in fzf_data.items() if k in {"height", "layout", "preview_window"}})
        discovery = AutoDiscoveryConfig(
            **{k: v for k, v in discovery_data.items() if k in {"enabled", "paths"}}
        )
        editor = config_dict.get("editor")
        return cls(
            version=str(config_dict.get("version", CONFIG_VERSION)),
            fzf=fzf,
            auto_discovery=discovery,
            editor=str(editor) if editor is not None else None,
        )


def default_config_root(environ: Optional[Mapping[str, str]] = None, home: Optional[Path] = None) -> Path:
    """Resolve the default config directory.

    Order: $WT_CONFIG_DIR, $XDG_CONFIG_HOME/worktree-manager,
    ~/.config/worktree-manager.
    """
    environ = os.environ if environ is None else environ
    explicit = environ.get(CONFIG_DIR_ENV)
    if explicit:
        return Path(explicit).expanduser()
    xdg = environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg).expanduser() / CONFIG_DIR_NAME
    home = home if home is not None else Path.home()
    return home / ".config" / CONFIG_DIR_NAME


class ConfigStore:
    """Loads and saves the YAML config file under an explicit root directory."""

    def __init__(self, root: Path):
        """Initialize the store.

        Args:
            root: Config directory; config.yaml lives directly inside it
        """
        self.root = Path(root)

    @property
    def path(self) -> Path:
        return self.root / CONFIG_FILE_NAME

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Config:
        """Load config from disk, defaults when the file does not exist.

        Raises:
            ConfigError: file unreadable or invalid
        """
        if not self.exists():
            logger.debug(f"No config at {self.path}, using defaults")
            return Config()

        try:
            content = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"failed to read config file {self.path}: {e}") from e

        try:
            data = yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"failed to parse config file {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"config file {self.path} must contain a mapping")

        try:
            config = Config.from_dict(data)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid config file {self.path}: {e}") from e

        logger.debug(f"Loaded config from {self.path}")
        return config

    def save(self, config: Config) -> Path:
        """Write config to disk, creating the directory if needed.

        Raises:
            ConfigError: directory or file could not be written
        """
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigError(f"failed to create config directory {self.root}: {e}") from e

        content = yaml.safe_dump(config.to_dict(), default_flow_style=False, sort_keys=False)
        try:
            self.path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"failed to write config file {self.path}: {e}") from e

        logger.info(f"Saved config to {self.path}")
        return self.path

    def init(self) -> bool:
        """Create a default config file. Returns False if one already exists."""
        if self.exists():
            return False
        self.save(Config())
        return True
