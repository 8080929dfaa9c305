"""SSH key bootstrap run before the dotfile repository is cloned.

Ensures an SSH key exists, an agent is reachable and holds the key, and
that the operator has registered the public key with the git host.
"""

import getpass
import logging
import os
import re
import shlex
import socket
import subprocess
from pathlib import Path

from dotctl.core.confirm import Confirmer
from dotctl.core.errors import CommandFailedError, DotctlError, MissingToolError, UserDeclinedError
from dotctl.utils.formatting import print_info, print_panel, print_warning
from dotctl.utils.shell import CommandResult, command_exists, run_command, run_interactive

logger = logging.getLogger(__name__)

REQUIRED_TOOLS = ("ssh-keygen", "ssh-agent", "ssh-add")

# ssh-add -l exits 2 when it cannot reach an agent
_NO_AGENT_EXIT = 2

_COMMAND_TIMEOUT = 30.0

_AGENT_VAR_RE = re.compile(r"(SSH_AUTH_SOCK|SSH_AGENT_PID)=([^;]+);")


def _capture(argv: list[str]) -> CommandResult:
    """Run a short SSH tool command, mapping timeouts and launch errors."""
    try:
        return run_command(argv, timeout=_COMMAND_TIMEOUT)
    except subprocess.TimeoutExpired as e:
        msg = f"{argv[0]} timed out after {e.timeout}s"
        raise CommandFailedError(msg, argv, shlex.join(argv)) from e
    except OSError as e:
        raise CommandFailedError(f"Could not run {argv[0]}", argv, str(e)) from e


def parse_agent_env(output: str) -> dict[str, str]:
    """Extract SSH_AUTH_SOCK and SSH_AGENT_PID from ``ssh-agent -s`` output."""
    return dict(_AGENT_VAR_RE.findall(output))


class SshBootstrap:
    """Prepares SSH authentication for the git host."""

    def __init__(self, key_path: Path, legacy_key_path: Path, confirm: Confirmer) -> None:
        self.key_path = key_path
        self.legacy_key_path = legacy_key_path
        self._confirm = confirm

    def run(self) -> Path:
        """Run the whole bootstrap.

        Returns:
            Private key in use.

        Raises:
            MissingToolError: If an SSH tool is missing.
            UserDeclinedError: If the operator declines a step.
            CommandFailedError: If an SSH command fails.
        """
        print_info("Setting up Git SSH authentication...")
        for tool in REQUIRED_TOOLS:
            if not command_exists(tool):
                raise MissingToolError(tool)

        key = self.ensure_key()
        self.ensure_agent()
        self.ensure_key_loaded(key)
        self.confirm_registered(key)
        print_info("Git SSH setup complete.")
        return key

    def ensure_key(self) -> Path:
        """Return an existing key, generating one if none exists."""
        if self.key_path.is_file():
            print_info(f"SSH key '{self.key_path}' already exists.")
            return self.key_path

        if self.legacy_key_path.is_file():
            print_warning(
                f"Older SSH key '{self.legacy_key_path}' found. "
                "Consider generating a new 'id_ed25519' key."
            )
            return self.legacy_key_path

        print_warning(
            f"No SSH key found. A new ED25519 key will be generated at '{self.key_path}'."
        )
        if not self._confirm("Generate a new SSH key now?"):
            raise UserDeclinedError(
                "SSH key generation cancelled. Git operations will likely fail without an SSH key"
            )

        self.key_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        comment = f"{getpass.getuser()}@{socket.gethostname()}-dotfiles"
        argv = ["ssh-keygen", "-t", "ed25519", "-f", str(self.key_path), "-C", comment]
        if run_interactive(argv) != 0:
            raise CommandFailedError("Failed to generate SSH key", argv)
        print_info("SSH key generated. Remember your passphrase if you set one.")
        return self.key_path

    def ensure_agent(self) -> None:
        """Start an agent and export its environment if none is reachable."""
        probe = _capture(["ssh-add", "-l"])
        if probe.returncode != _NO_AGENT_EXIT:
            print_info("SSH agent already running.")
            return

        print_info("SSH agent not running, starting it.")
        result = _capture(["ssh-agent", "-s"])
        agent_env = parse_agent_env(result.stdout)
        if not result.success or "SSH_AUTH_SOCK" not in agent_env:
            raise CommandFailedError(
                "Failed to start ssh-agent", ["ssh-agent", "-s"], result.output
            )
        os.environ.update(agent_env)
        logger.debug("Started ssh-agent: %s", agent_env)

    def ensure_key_loaded(self, key: Path) -> None:
        """Add the key to the agent unless its fingerprint is already listed."""
        fingerprint = _capture(["ssh-keygen", "-lf", str(key)])
        parts = fingerprint.stdout.split()
        loaded = _capture(["ssh-add", "-l"])
        if fingerprint.success and len(parts) > 1 and parts[1] in loaded.stdout:
            print_info(f"SSH key '{key}' already loaded in agent.")
            return

        print_info(f"Adding SSH key '{key}' to agent.")
        argv = ["ssh-add", str(key)]
        if run_interactive(argv) != 0:
            raise CommandFailedError(
                "Failed to add SSH key to agent. Check the passphrase if one is set", argv
            )

    def confirm_registered(self, key: Path) -> None:
        """Show the public key and require confirmation it was registered."""
        public_key = key.with_name(key.name + ".pub")
        if not public_key.is_file():
            raise DotctlError(f"Public SSH key file '{public_key}' not found")

        print_warning(
            "Add the following public SSH key to your git host "
            "(e.g. GitHub -> Settings -> SSH keys)."
        )
        print_panel(str(public_key), public_key.read_text(encoding="utf-8"))
        if not self._confirm("Have you added the public SSH key to your git host?"):
            raise UserDeclinedError("Public SSH key not registered; git operations may fail")
