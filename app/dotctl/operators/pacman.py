"""Pacman package operator implementation."""

from dotctl.operators.base import Operator


class PacmanOperator(Operator):
    """Operator for Arch Linux."""

    @property
    def name(self) -> str:
        return "pacman"

    @property
    def binary(self) -> str:
        return "pacman"

    def install_args(self, package: str) -> list[str]:
        return ["sudo", "pacman", "-S", "--noconfirm", package]

    def uninstall_args(self, package: str) -> list[str]:
        # -s also removes dependencies nothing else needs
        return ["sudo", "pacman", "-Rs", "--noconfirm", package]

    def query_args(self, package: str) -> list[str]:
        return ["pacman", "-Q", package]

    def refresh_args(self) -> list[str] | None:
        return ["sudo", "pacman", "-Sy", "--noconfirm"]
