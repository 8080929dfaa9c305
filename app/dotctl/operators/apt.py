"""APT package operator implementation.

Installs and purges packages with apt-get and queries dpkg.
"""

from dotctl.operators.base import Operator


class AptOperator(Operator):
    """Operator for Debian-family distributions (ubuntu, debian, pop).

    Requires sudo privileges for install and uninstall.
    """

    @property
    def name(self) -> str:
        return "apt"

    @property
    def binary(self) -> str:
        return "apt-get"

    def install_args(self, package: str) -> list[str]:
        return ["sudo", "apt-get", "install", "-y", package]

    def uninstall_args(self, package: str) -> list[str]:
        # purge also drops the configuration files the install created
        return ["sudo", "apt-get", "purge", "-y", package]

    def query_args(self, package: str) -> list[str]:
        return ["dpkg", "-s", package]

    def refresh_args(self) -> list[str] | None:
        return ["sudo", "apt-get", "update"]
