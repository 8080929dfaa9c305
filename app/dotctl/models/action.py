"""Outcome records for package manager operations."""

from dataclasses import dataclass
from enum import Enum


class ActionType(Enum):
    """What an operator was asked to do."""

    INSTALL = "install"
    UNINSTALL = "uninstall"
    # Index update; carries no package name.
    REFRESH = "refresh"


@dataclass(frozen=True, slots=True)
class ActionResult:
    """One operator call and how it ended.

    Operators never raise for a failing package manager; the failure is
    reported here and the caller decides whether it is fatal.

    Attributes:
        action_type: Operation that was run.
        package: Target package, None for REFRESH.
        success: True when the package manager exited cleanly.
        message: Informational note on success.
        error: Package manager output or reason on failure.
    """

    action_type: ActionType
    package: str | None
    success: bool
    message: str | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        """Inverse of success."""
        return not self.success
