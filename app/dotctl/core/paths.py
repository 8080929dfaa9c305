"""Path management for dotctl.

Settings follow the XDG Base Directory Specification. The state dotctl
leaves behind on a provisioned machine (bare repository, backup root and
ledgers) lives directly in the home directory so it stays visible to the
user; those defaults are defined here and can be overridden in settings.

XDG defaults:
- Config: ~/.config/dotctl/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "dotctl"

# Probed before anything else; present only inside a Termux userland
TERMUX_MARKER_DIR = Path("/data/data/com.termux/files/usr/etc/termux")

OS_RELEASE_PATH = Path("/etc/os-release")

DEFAULT_REPO_DIRNAME = ".dotfiles"
DEFAULT_BACKUP_DIRNAME = ".dotfiles_backups"
DEFAULT_PACKAGE_LEDGER_NAME = ".package_manifest.log"
BACKUP_LEDGER_NAME = "manifest.log"


def get_home_dir() -> Path:
    """Get the home directory the overlay is deployed onto.

    Returns:
        Path to the current user's home directory.
    """
    return Path.home()


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/dotctl/ (or XDG_CONFIG_HOME/dotctl/).
    """
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_NAME
    return get_home_dir() / ".config" / APP_NAME


def get_config_path() -> Path:
    """Get the default settings file path.

    Returns:
        Path to ~/.config/dotctl/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_theme_path() -> Path:
    """Get the user theme override path.

    Returns:
        Path to ~/.config/dotctl/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def expand_home(path: str | Path, home: Path | None = None) -> Path:
    """Expand a leading ``~`` against the given home directory.

    Args:
        path: Path that may start with ``~``.
        home: Home directory to expand against. Defaults to the real home.

    Returns:
        Absolute path when ``path`` was home-relative, otherwise ``path`` unchanged.
    """
    raw = str(path)
    base = home or get_home_dir()
    if raw == "~":
        return base
    if raw.startswith("~/"):
        return base / raw[2:]
    return Path(raw)
