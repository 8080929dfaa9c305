"""Package models for provisioning.

This module defines the data structures describing which packages a
setup run installs and how they are grouped for presentation.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PackageSpec:
    """A single package requested by the provisioning plan.

    Categories only drive ordering and log output; every package is
    installed the same way regardless of its category.

    Attributes:
        name: Name of the package in the native package manager.
        category: Group the package belongs to (e.g. 'core', 'editor').
    """

    name: str
    category: str

    def __post_init__(self) -> None:
        """Validate package data after initialization."""
        if not self.name or not self.name.strip():
            msg = "Package name cannot be empty"
            raise ValueError(msg)
        if any(ch.isspace() for ch in self.name):
            msg = f"Package name cannot contain whitespace: {self.name!r}"
            raise ValueError(msg)
