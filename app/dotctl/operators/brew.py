"""Homebrew package operator implementation.

dotctl never installs Homebrew itself; the resolver only selects this
operator when brew is already on PATH.
"""

from dotctl.operators.base import Operator


class BrewOperator(Operator):
    """Operator for macOS via Homebrew. Runs without sudo."""

    @property
    def name(self) -> str:
        return "brew"

    @property
    def binary(self) -> str:
        return "brew"

    def install_args(self, package: str) -> list[str]:
        return ["brew", "install", package]

    def uninstall_args(self, package: str) -> list[str]:
        return ["brew", "uninstall", "--force", package]

    def query_args(self, package: str) -> list[str]:
        return ["brew", "list", package]

    def refresh_args(self) -> list[str] | None:
        return ["brew", "update"]
