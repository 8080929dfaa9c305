"""Subprocess helpers for git, package managers and the SSH toolchain.

Commands are argv lists; nothing is ever passed through a shell. Captured
runs return a CommandResult, interactive runs return only the exit code.
"""

import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured outcome of one command.

    Attributes:
        stdout: Text written to standard output.
        stderr: Text written to standard error.
        returncode: Exit status.
        args: The argv that produced this result, if known.
    """

    stdout: str
    stderr: str
    returncode: int
    args: tuple[str, ...] = ()

    @property
    def success(self) -> bool:
        """True when the command exited with status 0."""
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Stripped stdout and stderr joined by a newline, empty parts dropped."""
        return "\n".join(part for part in (self.stdout.strip(), self.stderr.strip()) if part)


def run_command(
    args: list[str],
    *,
    timeout: float | None = 60.0,
    cwd: str | None = None,
    env: dict[str, str] | None = None,
) -> CommandResult:
    """Run a command to completion with its output captured.

    A non-zero exit is reported through the result, not raised.

    Args:
        args: Executable followed by its arguments.
        timeout: Seconds before the command is killed; None waits forever.
        cwd: Working directory, defaults to the current one.
        env: Variables added on top of the current environment.

    Returns:
        CommandResult for the finished command.

    Raises:
        subprocess.TimeoutExpired: If the timeout elapses.
        OSError: If the executable cannot be started.
    """
    logger.debug("Running: %s", shlex.join(args))
    completed = subprocess.run(
        args,
        capture_output=True,
        text=True,
        check=False,
        timeout=timeout,
        cwd=cwd,
        env={**os.environ, **env} if env else None,
    )
    return CommandResult(
        stdout=completed.stdout,
        stderr=completed.stderr,
        returncode=completed.returncode,
        args=tuple(args),
    )


def command_exists(name: str) -> bool:
    """Check whether an executable is on PATH."""
    return shutil.which(name) is not None


def run_interactive(args: list[str], *, env: dict[str, str] | None = None) -> int:
    """Run a command attached to the terminal.

    Output is not captured, so prompts such as the ssh-keygen and
    ssh-add passphrase questions reach the operator.

    Args:
        args: Executable followed by its arguments.
        env: Variables added on top of the current environment.

    Returns:
        Exit status of the command.

    Raises:
        OSError: If the executable cannot be started.
    """
    logger.debug("Running interactively: %s", shlex.join(args))
    completed = subprocess.run(args, check=False, env={**os.environ, **(env or {})})
    return completed.returncode
