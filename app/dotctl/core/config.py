"""Settings models and file I/O.

Settings are optional: a missing config.toml yields the built-in
defaults, which reproduce the stock dotfile repository and package plan.
Files are validated with Pydantic and written atomically with tomli_w.
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dotctl.core.errors import DotctlError
from dotctl.core.paths import (
    BACKUP_LEDGER_NAME,
    DEFAULT_BACKUP_DIRNAME,
    DEFAULT_PACKAGE_LEDGER_NAME,
    DEFAULT_REPO_DIRNAME,
    expand_home,
    get_config_path,
)
from dotctl.models.package import PackageSpec

logger = logging.getLogger(__name__)

DEFAULT_REPO_URL = "git@github.com:ScottWiedemann/.dotfiles.git"


class ConfigError(DotctlError):
    """Base exception for settings-related errors."""


class ConfigParseError(ConfigError):
    """Raised when the settings file cannot be parsed."""


class ConfigValidationError(ConfigError):
    """Raised when settings content is invalid."""


class DotfilesConfig(BaseModel):
    """Where the dotfile repository comes from and where it is kept.

    Attributes:
        repo_url: Clone URL of the dotfile repository.
        repo_dir: Location of the bare clone.
        branch: Tracked branch checked out onto the home directory.
        backup_root: Directory holding backup generations and their ledger.
        alias_name: Shell alias wrapping git for the bare repository.
    """

    model_config = ConfigDict(extra="forbid")

    repo_url: Annotated[str, Field(min_length=1)] = DEFAULT_REPO_URL
    repo_dir: str = f"~/{DEFAULT_REPO_DIRNAME}"
    branch: Annotated[str, Field(min_length=1)] = "main"
    backup_root: str = f"~/{DEFAULT_BACKUP_DIRNAME}"
    alias_name: Annotated[str, Field(pattern=r"^[A-Za-z_][A-Za-z0-9_-]*$")] = "dot"

    def repo_path(self, home: Path) -> Path:
        return expand_home(self.repo_dir, home)

    def backup_path(self, home: Path) -> Path:
        return expand_home(self.backup_root, home)

    def backup_ledger_path(self, home: Path) -> Path:
        return self.backup_path(home) / BACKUP_LEDGER_NAME


class PackageGroup(BaseModel):
    """Ordered list of packages installed under one category."""

    model_config = ConfigDict(extra="forbid")

    category: Annotated[str, Field(min_length=1)]
    label: Annotated[str, Field(min_length=1)]
    packages: Annotated[list[str], Field(default_factory=list)]

    @field_validator("packages")
    @classmethod
    def validate_names(cls, value: list[str]) -> list[str]:
        """Reject blank package names."""
        for name in value:
            if not name.strip():
                msg = "Package names cannot be empty"
                raise ValueError(msg)
        return [name.strip() for name in value]

    def specs(self) -> list[PackageSpec]:
        """Return the group's packages as PackageSpec values, in order."""
        return [PackageSpec(name=name, category=self.category) for name in self.packages]


def default_package_groups() -> list[PackageGroup]:
    """Return the stock package plan.

    Order matters: core tools, editor, terminal multiplexer, then
    language runtimes.
    """
    return [
        PackageGroup(
            category="core",
            label="Core System Tools",
            packages=["git", "curl", "wget", "unzip", "build-essential"],
        ),
        PackageGroup(
            category="editor",
            label="Neovim Tools",
            packages=["neovim", "ripgrep", "fd-find"],
        ),
        PackageGroup(category="shell-multiplexer", label="Tmux", packages=["tmux"]),
        PackageGroup(category="python", label="Python", packages=["python3", "python3-pip"]),
        PackageGroup(category="nodejs", label="Node.js", packages=["nodejs", "npm"]),
        PackageGroup(category="go", label="Go", packages=["golang"]),
    ]


class PackagesConfig(BaseModel):
    """Package plan and the ledger recording what this tool installed."""

    model_config = ConfigDict(extra="forbid")

    ledger: str = f"~/{DEFAULT_PACKAGE_LEDGER_NAME}"
    groups: Annotated[list[PackageGroup], Field(default_factory=default_package_groups)]

    def ledger_path(self, home: Path) -> Path:
        return expand_home(self.ledger, home)


class SshConfig(BaseModel):
    """SSH key bootstrap settings."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    key_path: str = "~/.ssh/id_ed25519"
    legacy_key_path: str = "~/.ssh/id_rsa"


class Settings(BaseModel):
    """Complete dotctl settings."""

    model_config = ConfigDict(extra="forbid")

    dotfiles: Annotated[DotfilesConfig, Field(default_factory=DotfilesConfig)]
    packages: Annotated[PackagesConfig, Field(default_factory=PackagesConfig)]
    ssh: Annotated[SshConfig, Field(default_factory=SshConfig)]


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate settings from a TOML file.

    Args:
        path: Path to the settings file. If None, uses the default path.

    Returns:
        Validated Settings object; defaults when the file does not exist.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
    """
    settings_path = path or get_config_path()

    if not settings_path.exists():
        return Settings()

    try:
        with open(settings_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {settings_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read settings: {e}") from e

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid settings in {settings_path}: {e}") from e


def save_settings(settings: Settings, path: Path | None = None) -> Path:
    """Save settings to a TOML file.

    The file is written to a temporary file in the same directory and
    then moved into place with os.replace().

    Args:
        settings: The Settings object to save.
        path: Destination. If None, uses the default settings path.

    Returns:
        Path where the settings were saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    settings_path = path or get_config_path()
    data: dict[str, Any] = settings.model_dump(mode="json")

    tmp_path: Path | None = None
    try:
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=settings_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(settings_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write settings: {e}") from e

    return settings_path


def ensure_settings(path: Path | None = None) -> Settings:
    """Load settings, writing the defaults first if the file is missing.

    Gives a first setup run an editable config.toml. A failed write is
    logged and the defaults are used anyway.

    Raises:
        ConfigParseError: If an existing file has invalid TOML syntax.
        ConfigValidationError: If an existing file doesn't match the schema.
    """
    settings_path = path or get_config_path()
    if settings_path.exists():
        return load_settings(settings_path)

    settings = Settings()
    try:
        save_settings(settings, settings_path)
    except ConfigError as e:
        logger.warning("Could not write default settings: %s", e)
        return settings
    logger.info("Wrote default settings to %s", settings_path)
    return settings
