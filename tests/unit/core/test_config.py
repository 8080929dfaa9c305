"""Unit tests for settings loading and saving."""

from pathlib import Path

import pytest
from dotctl.core.config import (
    DEFAULT_REPO_URL,
    ConfigError,
    ConfigParseError,
    ConfigValidationError,
    PackageGroup,
    Settings,
    ensure_settings,
    load_settings,
    save_settings,
)


class TestDefaults:
    """Tests for built-in defaults."""

    def test_missing_file_yields_defaults(self, tmp_path: Path) -> None:
        """load_settings returns defaults when no file exists."""
        settings = load_settings(tmp_path / "config.toml")

        assert settings.dotfiles.repo_url == DEFAULT_REPO_URL
        assert settings.dotfiles.branch == "main"
        assert settings.dotfiles.alias_name == "dot"
        assert settings.ssh.enabled is True

    def test_default_group_order(self) -> None:
        """Stock groups install core tools first and language runtimes last."""
        categories = [group.category for group in Settings().packages.groups]

        assert categories == ["core", "editor", "shell-multiplexer", "python", "nodejs", "go"]

    def test_paths_expand_against_home(self, home: Path) -> None:
        """Home-relative settings resolve under the given home."""
        settings = Settings()

        assert settings.dotfiles.repo_path(home) == home / ".dotfiles"
        assert settings.dotfiles.backup_path(home) == home / ".dotfiles_backups"
        backups = home / ".dotfiles_backups"
        assert settings.dotfiles.backup_ledger_path(home) == backups / "manifest.log"
        assert settings.packages.ledger_path(home) == home / ".package_manifest.log"


class TestLoad:
    """Tests for load_settings."""

    def test_partial_override(self, tmp_path: Path) -> None:
        """Sections not present in the file keep their defaults."""
        path = tmp_path / "config.toml"
        path.write_text(
            '[dotfiles]\nrepo_url = "https://example.com/dots.git"\nbranch = "trunk"\n'
            "[ssh]\nenabled = false\n"
        )

        settings = load_settings(path)

        assert settings.dotfiles.repo_url == "https://example.com/dots.git"
        assert settings.dotfiles.branch == "trunk"
        assert settings.ssh.enabled is False
        assert settings.packages.groups[0].category == "core"

    def test_custom_groups_replace_defaults(self, tmp_path: Path) -> None:
        """Configured groups replace the stock plan."""
        path = tmp_path / "config.toml"
        path.write_text(
            '[[packages.groups]]\ncategory = "tools"\nlabel = "Tools"\npackages = ["htop"]\n'
        )

        groups = load_settings(path).packages.groups

        assert len(groups) == 1
        assert [spec.name for spec in groups[0].specs()] == ["htop"]

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Broken TOML raises ConfigParseError."""
        path = tmp_path / "config.toml"
        path.write_text("[dotfiles\n")

        with pytest.raises(ConfigParseError):
            load_settings(path)

    def test_unknown_key(self, tmp_path: Path) -> None:
        """Unknown keys are rejected."""
        path = tmp_path / "config.toml"
        path.write_text("[dotfiles]\nrepo = 'x'\n")

        with pytest.raises(ConfigValidationError):
            load_settings(path)

    def test_bad_alias_name(self, tmp_path: Path) -> None:
        """Alias names must be valid shell identifiers."""
        path = tmp_path / "config.toml"
        path.write_text('[dotfiles]\nalias_name = "rm -rf"\n')

        with pytest.raises(ConfigValidationError):
            load_settings(path)


class TestPackageGroup:
    """Tests for PackageGroup."""

    def test_blank_package_rejected(self) -> None:
        """Blank package names fail validation."""
        with pytest.raises(ValueError, match="cannot be empty"):
            PackageGroup(category="core", label="Core", packages=["git", " "])

    def test_specs_carry_category(self) -> None:
        """specs() tags every package with the group category."""
        group = PackageGroup(
            category="editor", label="Neovim Tools", packages=["neovim", "ripgrep"]
        )

        assert [(s.name, s.category) for s in group.specs()] == [
            ("neovim", "editor"),
            ("ripgrep", "editor"),
        ]


class TestSave:
    """Tests for save_settings."""

    def test_save_then_load(self, tmp_path: Path) -> None:
        """Saved settings load back equal."""
        settings = Settings()
        settings.dotfiles.branch = "dev"
        path = tmp_path / "nested" / "config.toml"

        assert save_settings(settings, path) == path
        assert load_settings(path) == settings
        assert list(path.parent.glob("*.tmp")) == []

    def test_save_reports_unwritable_dir(self, tmp_path: Path) -> None:
        """A settings path below a regular file is a ConfigError."""
        blocker = tmp_path / "file"
        blocker.write_text("")

        with pytest.raises(ConfigError, match="Failed to write settings"):
            save_settings(Settings(), blocker / "config.toml")


class TestEnsure:
    """Tests for ensure_settings."""

    def test_writes_defaults_when_missing(self, tmp_path: Path) -> None:
        """A missing file is created with the defaults."""
        path = tmp_path / "dotctl" / "config.toml"

        settings = ensure_settings(path)

        assert settings == Settings()
        assert load_settings(path) == Settings()
        assert "[dotfiles]" in path.read_text()

    def test_existing_file_untouched(self, tmp_path: Path) -> None:
        """An existing file is loaded, not overwritten."""
        path = tmp_path / "config.toml"
        path.write_text('[dotfiles]\nbranch = "dev"\n')

        assert ensure_settings(path).dotfiles.branch == "dev"
        assert path.read_text() == '[dotfiles]\nbranch = "dev"\n'

    def test_unwritable_location_falls_back(self, tmp_path: Path) -> None:
        """A failed write still yields the defaults."""
        blocker = tmp_path / "file"
        blocker.write_text("")

        assert ensure_settings(blocker / "config.toml") == Settings()
