"""DNF package operator implementation."""

from dotctl.operators.base import Operator


class DnfOperator(Operator):
    """Operator for Red Hat-family distributions (fedora, centos, rhel)."""

    @property
    def name(self) -> str:
        return "dnf"

    @property
    def binary(self) -> str:
        return "dnf"

    def install_args(self, package: str) -> list[str]:
        return ["sudo", "dnf", "install", "-y", package]

    def uninstall_args(self, package: str) -> list[str]:
        return ["sudo", "dnf", "remove", "-y", package]

    def query_args(self, package: str) -> list[str]:
        return ["rpm", "-q", package]

    def refresh_args(self) -> list[str] | None:
        return ["sudo", "dnf", "makecache"]
