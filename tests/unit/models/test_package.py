"""Unit tests for package models."""

import pytest
from dotctl.models.package import PackageSpec


class TestPackageSpec:
    """Tests for PackageSpec dataclass."""

    def test_create(self) -> None:
        """PackageSpec keeps name and category."""
        spec = PackageSpec(name="ripgrep", category="editor")

        assert spec.name == "ripgrep"
        assert spec.category == "editor"

    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty_name_rejected(self, name: str) -> None:
        """Empty names raise ValueError."""
        with pytest.raises(ValueError, match="cannot be empty"):
            PackageSpec(name=name, category="core")

    def test_whitespace_rejected(self) -> None:
        """Names with spaces cannot be passed to a package manager safely."""
        with pytest.raises(ValueError, match="whitespace"):
            PackageSpec(name="build essential", category="core")

    def test_is_immutable(self) -> None:
        """PackageSpec is frozen."""
        spec = PackageSpec(name="git", category="core")

        with pytest.raises(AttributeError):
            spec.name = "curl"  # type: ignore[misc]
