"""Idempotent package installation tracked in a ledger.

Install only touches packages that are not installed yet and records
each one it installs; uninstall reverses exactly those, newest first.
"""

import logging

from dotctl.core.confirm import Confirmer
from dotctl.core.errors import CommandFailedError, LedgerError
from dotctl.core.ledger import OrderedLog
from dotctl.core.platform import PlatformProfile
from dotctl.models.action import ActionResult
from dotctl.models.package import PackageSpec
from dotctl.operators.base import Operator
from dotctl.utils.formatting import print_info, print_success, print_warning

logger = logging.getLogger(__name__)


class PackageManager:
    """Installs and uninstalls packages through the resolved platform.

    Attributes:
        profile: Resolved platform whose operator runs the commands.
        ledger: Installed-packages ledger.
    """

    def __init__(self, profile: PlatformProfile, ledger: OrderedLog, confirm: Confirmer) -> None:
        """Initialize the manager.

        Args:
            profile: Resolved platform profile.
            ledger: Ledger of packages installed by dotctl.
            confirm: Confirmation capability for per-package approval.
        """
        self.profile = profile
        self.ledger = ledger
        self._confirm = confirm

    @property
    def operator(self) -> Operator:
        """Package-manager variant of the resolved platform."""
        return self.profile.operator

    def refresh_index(self) -> None:
        """Refresh the package index; failure only warns."""
        result = self.operator.refresh()
        if result.failed:
            logger.warning("Package index refresh failed: %s", result.error)
            print_warning(
                f"Failed to refresh the {self.operator.name} package index. "
                "Installation might fail."
            )

    def install(self, category: str, packages: list[PackageSpec]) -> list[str]:
        """Install every package of a category that is not installed yet.

        Args:
            category: Label used in output.
            packages: Packages to install, in order.

        Returns:
            Names of the packages installed by this call.

        Raises:
            CommandFailedError: If an install command fails.
        """
        if not packages:
            print_info(f"No packages defined for '{category}', skipping.")
            return []

        print_info(f"Installing packages for '{category}' using {self.operator.name}...")
        installed: list[str] = []

        for spec in packages:
            if self.operator.is_installed(spec.name):
                print_info(f"'{spec.name}' is already installed, skipping.")
                continue

            if not self._confirm(f"Install '{spec.name}'?"):
                print_warning(f"Skipping installation of '{spec.name}' as requested.")
                continue

            result = self.operator.install(spec.name)
            if result.failed:
                raise CommandFailedError(
                    f"Failed to install '{spec.name}'",
                    self.operator.install_args(spec.name),
                    result.error or "",
                )
            print_success(f"'{spec.name}' installed.")
            installed.append(spec.name)

            try:
                self.ledger.append(spec.name)
            except LedgerError as e:
                logger.warning("Could not record %s: %s", spec.name, e)
                print_warning(
                    f"Failed to record '{spec.name}' in package ledger. "
                    "Takedown might be incomplete."
                )

        print_info(f"Package installation for '{category}' complete.")
        return installed

    def uninstall(self) -> list[ActionResult]:
        """Uninstall every package recorded in the ledger, newest first.

        Failures are reported and the pass continues with the next package.

        Returns:
            Results of the uninstall commands that were run.
        """
        if not self.ledger.exists():
            print_warning(
                f"Package ledger '{self.ledger.path}' not found. Skipping package uninstallation."
            )
            return []

        packages = self.ledger.entries()
        if not self._confirm(
            f"Uninstall packages listed in '{self.ledger.path}'? "
            "This will remove packages installed by dotctl."
        ):
            print_info("Skipping package uninstallation as requested.")
            return []

        results: list[ActionResult] = []
        for package in reversed(packages):
            if not self.operator.is_installed(package):
                print_info(f"'{package}' not found as installed, skipping uninstallation.")
                self._forget(package)
                continue

            result = self.operator.uninstall(package)
            results.append(result)
            if result.failed:
                logger.warning("Uninstall of %s failed: %s", package, result.error)
                print_warning(f"Failed to uninstall '{package}'. Manual removal may be required.")
                continue

            print_success(f"'{package}' uninstalled successfully.")
            self._forget(package)

        print_info("Package uninstallation from ledger complete.")

        if self._confirm(f"Delete the package ledger '{self.ledger.path}'? (Recommended)"):
            try:
                self.ledger.delete()
                print_info(f"Package ledger '{self.ledger.path}' deleted.")
            except LedgerError as e:
                print_warning(f"{e}. Manual removal may be required.")
        else:
            print_info(f"Keeping package ledger '{self.ledger.path}'.")

        return results

    def _forget(self, package: str) -> None:
        """Drop a reversed package from the ledger; failure only warns."""
        try:
            self.ledger.remove(package)
        except LedgerError as e:
            logger.warning("Could not remove %s from ledger: %s", package, e)
            print_warning(f"Could not remove '{package}' from the package ledger: {e}")
