"""Termux package operator implementation.

Termux runs in userland: there is no sudo, and pkg has no per-package
query command, so installed state is read from ``pkg list-installed``.
"""

import logging

from dotctl.operators.base import Operator

logger = logging.getLogger(__name__)


class TermuxOperator(Operator):
    """Operator for the Termux Android userland."""

    @property
    def name(self) -> str:
        return "pkg"

    @property
    def binary(self) -> str:
        return "pkg"

    def install_args(self, package: str) -> list[str]:
        return ["pkg", "install", "-y", package]

    def uninstall_args(self, package: str) -> list[str]:
        return ["pkg", "uninstall", "-y", package]

    def query_args(self, package: str) -> list[str]:
        return ["pkg", "list-installed"]

    def refresh_args(self) -> list[str] | None:
        return ["pkg", "update", "-y"]

    def is_installed(self, package: str) -> bool:
        """Check for a ``<package>/`` line in the installed listing.

        Args:
            package: Package name.

        Returns:
            True if the listing succeeded and names the package.
        """
        result = self._run(self.query_args(package), timeout=self._QUERY_TIMEOUT)
        if not result.success:
            logger.debug("pkg list-installed failed: %s", result.output)
            return False
        prefix = f"{package}/"
        return any(line.startswith(prefix) for line in result.stdout.splitlines())
