"""Bare git repository deployed against the home directory.

The repository stores only history; its work tree is the home directory,
selected per command with --work-tree.
"""

import logging
import shlex
import subprocess
from pathlib import Path

from dotctl.core.errors import CommandFailedError, RepositoryError
from dotctl.utils.shell import CommandResult, run_command

logger = logging.getLogger(__name__)

# Tracked paths never deployed onto the home directory
RESERVED_NAMES: frozenset[str] = frozenset(
    {".git", ".gitignore", ".mailmap", ".DS_Store", "README.md", "LICENSE"}
)

_UP_TO_DATE_MARKERS = ("Already up to date", "Already up-to-date")


def is_reserved(relative_path: str) -> bool:
    """Check whether a tracked path is excluded from deployment.

    Args:
        relative_path: Path relative to the repository root.

    Returns:
        True for the reserved top-level names and anything under .git/.
    """
    return relative_path in RESERVED_NAMES or relative_path.split("/", 1)[0] == ".git"


class BareRepository:
    """Wrapper around git commands for a bare dotfile clone.

    Attributes:
        git_dir: Location of the bare clone.
        work_tree: Directory the tracked files are checked out onto.
        branch: Tracked branch.
    """

    # Network operations run until git gives up on its own
    _NETWORK_TIMEOUT: float | None = None

    def __init__(self, git_dir: Path, work_tree: Path, branch: str = "main") -> None:
        self.git_dir = git_dir
        self.work_tree = work_tree
        self.branch = branch

    def exists(self) -> bool:
        """Check if git_dir already holds a bare clone."""
        return (self.git_dir / "HEAD").is_file()

    def _git_args(self, *args: str, with_work_tree: bool = False) -> list[str]:
        argv = ["git", f"--git-dir={self.git_dir}"]
        if with_work_tree:
            argv.append(f"--work-tree={self.work_tree}")
        argv.extend(args)
        return argv

    def _run(self, argv: list[str], timeout: float | None = 60.0) -> CommandResult:
        try:
            return run_command(argv, timeout=timeout)
        except subprocess.TimeoutExpired as e:
            msg = f"git timed out after {e.timeout}s"
            raise CommandFailedError(msg, argv, shlex.join(argv)) from e
        except OSError as e:
            raise CommandFailedError("Could not run git", argv, str(e)) from e

    def clone(self, url: str) -> None:
        """Create the bare clone.

        Raises:
            CommandFailedError: If git clone fails.
        """
        argv = ["git", "clone", "--bare", url, str(self.git_dir)]
        logger.info("Cloning %s into %s", url, self.git_dir)
        result = self._run(argv, timeout=self._NETWORK_TIMEOUT)
        if not result.success:
            raise CommandFailedError(
                "Failed to clone dotfiles repository. "
                "Ensure your SSH key is registered and the repository URL is correct",
                argv,
                result.output,
            )

    def pull(self) -> bool:
        """Pull the tracked branch from origin.

        "Already up to date" counts as success even when git exits non-zero.

        Returns:
            True if new commits were pulled, False if already current.

        Raises:
            CommandFailedError: If the pull fails for any other reason.
        """
        argv = self._git_args("pull", "origin", self.branch, with_work_tree=True)
        result = self._run(argv, timeout=self._NETWORK_TIMEOUT)
        up_to_date = any(marker in result.output for marker in _UP_TO_DATE_MARKERS)
        if not result.success and not up_to_date:
            raise CommandFailedError("Failed to pull dotfiles", argv, result.output)
        return not up_to_date

    def set_config(self, key: str, value: str) -> None:
        """Write a repository-local git config value.

        Raises:
            CommandFailedError: If git config fails.
        """
        argv = self._git_args("config", key, value)
        result = self._run(argv)
        if not result.success:
            raise CommandFailedError(
                f"Failed to set git config '{key} {value}'", argv, result.output
            )

    def tracked_files(self) -> list[str]:
        """List the deployable files tracked on the branch.

        Returns:
            Paths relative to the work tree, reserved names removed,
            in git's order.

        Raises:
            RepositoryError: If the bare clone does not exist.
            CommandFailedError: If git ls-tree fails.
        """
        if not self.exists():
            raise RepositoryError(
                f"Dotfiles bare repository '{self.git_dir}' not found. Cannot list repo files"
            )
        # -z keeps paths verbatim; without it git quotes non-ASCII names
        argv = self._git_args("ls-tree", "-r", "-z", "--name-only", self.branch)
        result = self._run(argv)
        if not result.success:
            raise CommandFailedError("Failed to list tracked dotfiles", argv, result.output)
        return [name for name in result.stdout.split("\0") if name and not is_reserved(name)]

    def checkout(self) -> None:
        """Force-checkout the tracked branch onto the work tree.

        Raises:
            CommandFailedError: If git checkout fails.
        """
        argv = self._git_args("checkout", self.branch, "--force", with_work_tree=True)
        result = self._run(argv)
        if not result.success:
            raise CommandFailedError("Failed to checkout dotfiles", argv, result.output)
