"""Exception hierarchy for dotctl.

Every fatal condition raises a subclass of DotctlError; the CLI converts
any of them into a non-zero exit. Best-effort failures are logged as
warnings and never raised.
"""


class DotctlError(Exception):
    """Base exception for all dotctl errors."""


class UnsupportedPlatformError(DotctlError):
    """Raised when the host OS or distribution has no package-manager variant."""


class MissingToolError(DotctlError):
    """Raised when a required external tool is not on PATH."""

    def __init__(self, tool: str) -> None:
        self.tool = tool
        super().__init__(f"'{tool}' is not installed. Please install it to proceed.")


class CommandFailedError(DotctlError):
    """Raised when an external command exits non-zero.

    Attributes:
        args_: The argv that was executed.
        detail: Captured stderr/stdout of the command.
    """

    def __init__(self, message: str, args_: list[str] | None = None, detail: str = "") -> None:
        self.args_ = list(args_ or [])
        self.detail = detail
        full = f"{message}: {detail}" if detail else message
        super().__init__(full)


class BackupError(DotctlError):
    """Raised when an existing file cannot be moved into a backup generation."""


class RestoreError(DotctlError):
    """Raised when a backed-up file cannot be moved back into place."""


class LedgerError(DotctlError):
    """Raised when a ledger file cannot be read or rewritten."""


class UserDeclinedError(DotctlError):
    """Raised when the operator declines a mandatory confirmation checkpoint."""


class RepositoryError(DotctlError):
    """Raised when the bare dotfile repository is missing or unusable."""
