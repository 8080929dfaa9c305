"""Abstract base class for package operators.

This module defines the Operator interface every package-manager variant
implements. A variant only describes its argv for install, query,
uninstall and index refresh; execution and result mapping are shared.
"""

import logging
import subprocess
from abc import ABC, abstractmethod

from dotctl.models.action import ActionResult, ActionType
from dotctl.utils.shell import CommandResult, command_exists, run_command

logger = logging.getLogger(__name__)


class Operator(ABC):
    """Abstract base class for all package operators.

    Operators are responsible for installing, querying and uninstalling
    single packages through one native package manager.

    Example:
        >>> operator = AptOperator()
        >>> if not operator.is_installed("tmux"):
        ...     result = operator.install("tmux")
        ...     print(result.success)
    """

    # Package transactions can be slow on first download
    _TIMEOUT: float = 900.0
    _QUERY_TIMEOUT: float = 60.0

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier of the package manager (e.g. 'apt')."""

    @property
    @abstractmethod
    def binary(self) -> str:
        """Executable that must be on PATH for this operator to work."""

    @abstractmethod
    def install_args(self, package: str) -> list[str]:
        """Return the argv installing a package."""

    @abstractmethod
    def uninstall_args(self, package: str) -> list[str]:
        """Return the argv uninstalling a package."""

    @abstractmethod
    def query_args(self, package: str) -> list[str]:
        """Return the argv whose exit status tells whether a package is installed."""

    def refresh_args(self) -> list[str] | None:
        """Return the argv refreshing the package index, if the manager has one."""
        return None

    def is_available(self) -> bool:
        """Check if the package manager executable is on PATH."""
        return command_exists(self.binary)

    def is_installed(self, package: str) -> bool:
        """Check whether a package is currently installed.

        Args:
            package: Package name.

        Returns:
            True if the query command succeeds.
        """
        result = self._run(self.query_args(package), timeout=self._QUERY_TIMEOUT)
        return result.success

    def install(self, package: str) -> ActionResult:
        """Install a single package.

        Args:
            package: Package name.

        Returns:
            ActionResult describing the outcome.
        """
        logger.info("Executing %s install for package: %s", self.name, package)
        result = self._run(self.install_args(package))
        return self._to_result(ActionType.INSTALL, package, result)

    def uninstall(self, package: str) -> ActionResult:
        """Uninstall a single package.

        Args:
            package: Package name.

        Returns:
            ActionResult describing the outcome.
        """
        logger.info("Executing %s uninstall for package: %s", self.name, package)
        result = self._run(self.uninstall_args(package))
        return self._to_result(ActionType.UNINSTALL, package, result)

    def refresh(self) -> ActionResult:
        """Refresh the package index.

        Returns:
            ActionResult; a manager without an index reports success.
        """
        args = self.refresh_args()
        if args is None:
            return ActionResult(
                action_type=ActionType.REFRESH,
                package=None,
                success=True,
                message="Nothing to refresh",
            )
        logger.info("Refreshing %s package index", self.name)
        result = self._run(args)
        return self._to_result(ActionType.REFRESH, None, result)

    def _run(self, args: list[str], timeout: float | None = None) -> CommandResult:
        """Run a command, mapping a missing executable or a timeout to a failed result."""
        try:
            return run_command(args, timeout=timeout or self._TIMEOUT)
        except subprocess.TimeoutExpired as e:
            logger.debug("Timed out running %s after %ss", args[0], e.timeout)
            return CommandResult(stdout="", stderr=f"Timed out after {e.timeout}s", returncode=124)
        except OSError as e:
            logger.debug("Could not execute %s: %s", args[0], e)
            return CommandResult(stdout="", stderr=str(e), returncode=127)

    def _to_result(
        self,
        action_type: ActionType,
        package: str | None,
        result: CommandResult,
    ) -> ActionResult:
        """Map a CommandResult to an ActionResult."""
        if result.success:
            return ActionResult(
                action_type=action_type,
                package=package,
                success=True,
                message="Operation completed",
            )
        error_msg = result.output or (
            f"{self.name} command failed with exit code {result.returncode}"
        )
        return ActionResult(
            action_type=action_type,
            package=package,
            success=False,
            error=error_msg,
        )
