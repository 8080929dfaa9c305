"""Unit tests for path management."""

from pathlib import Path
from unittest.mock import patch

import pytest
from dotctl.core.paths import (
    APP_NAME,
    expand_home,
    get_config_dir,
    get_config_path,
    get_theme_path,
)


class TestConfigDir:
    """Tests for XDG config resolution."""

    def test_default_location(self, monkeypatch: pytest.MonkeyPatch, home: Path) -> None:
        """Without XDG_CONFIG_HOME the config lives in ~/.config/dotctl."""
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        with patch("dotctl.core.paths.Path.home", return_value=home):
            assert get_config_dir() == home / ".config" / APP_NAME

    def test_xdg_override(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """XDG_CONFIG_HOME takes precedence."""
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))

        assert get_config_dir() == tmp_path / "xdg" / APP_NAME
        assert get_config_path() == tmp_path / "xdg" / APP_NAME / "config.toml"
        assert get_theme_path() == tmp_path / "xdg" / APP_NAME / "theme.toml"


class TestExpandHome:
    """Tests for expand_home."""

    def test_tilde_prefix(self, home: Path) -> None:
        """'~/x' expands under the given home."""
        assert expand_home("~/.dotfiles", home) == home / ".dotfiles"

    def test_bare_tilde(self, home: Path) -> None:
        """'~' alone is the home directory."""
        assert expand_home("~", home) == home

    def test_absolute_path_unchanged(self, home: Path) -> None:
        """Absolute paths are returned as is."""
        assert expand_home("/srv/dots", home) == Path("/srv/dots")
