"""Shell alias for working with the bare repository.

Setup appends a marker comment and an alias line to the user's shell rc
file; takedown removes exactly that pair.
"""

import logging
from pathlib import Path

from dotctl.core.confirm import Confirmer
from dotctl.core.errors import DotctlError
from dotctl.utils.formatting import print_info, print_success, print_warning

logger = logging.getLogger(__name__)

ALIAS_MARKER = "# Alias for dotfiles bare repository"

# Checked in order; the first existing file is edited
SHELL_RC_FILES = (".zshrc", ".bashrc")

# rc files are not always UTF-8; undecodable bytes survive a read/write cycle
_RC_ERRORS = "surrogateescape"


def find_shell_rc(home: Path) -> Path | None:
    """Return the first existing shell rc file under home, or None."""
    for name in SHELL_RC_FILES:
        candidate = home / name
        if candidate.is_file():
            return candidate
    return None


def alias_line(alias_name: str, repo_dir: Path, home: Path) -> str:
    """Build the alias definition wrapping git for the bare repository."""
    return f'alias {alias_name}="git --git-dir=\\"{repo_dir}\\" --work-tree=\\"{home}\\""'


def setup_alias(alias_name: str, repo_dir: Path, home: Path, confirm: Confirmer) -> bool:
    """Append the alias to the shell rc file unless one is already defined.

    Args:
        alias_name: Alias to define.
        repo_dir: Bare repository location.
        home: Home directory (work tree and rc file location).
        confirm: Confirmation capability.

    Returns:
        True if the alias was appended.

    Raises:
        DotctlError: If the rc file cannot be read or written.
    """
    line = alias_line(alias_name, repo_dir, home)
    rc_file = find_shell_rc(home)
    if rc_file is None:
        print_warning("Could not detect a shell config file (.zshrc or .bashrc).")
        print_warning(f"Please add the following alias manually:\n  {line}")
        return False

    try:
        content = rc_file.read_text(encoding="utf-8", errors=_RC_ERRORS)
    except OSError as e:
        raise DotctlError(f"Failed to read '{rc_file}': {e}") from e

    if f"alias {alias_name}=" in content:
        print_info(f"Alias '{alias_name}' already exists in '{rc_file}'.")
        return False

    if not confirm(f"Add alias '{alias_name}' to '{rc_file}' for easier dotfile management?"):
        print_info(f"Skipping alias '{alias_name}' creation.")
        return False

    try:
        with rc_file.open(mode="a", encoding="utf-8", errors=_RC_ERRORS) as f:
            f.write(f"\n{ALIAS_MARKER}\n{line}\n")
    except OSError as e:
        raise DotctlError(f"Failed to append alias to '{rc_file}': {e}") from e

    print_success(
        f"Alias added. Run 'source {rc_file}' or restart your terminal for it to take effect."
    )
    return True


def remove_alias(alias_name: str, home: Path, confirm: Confirmer) -> bool:
    """Remove the marker comment and the alias line following it.

    Failures only warn; an alias the user defined by hand (no marker) is
    left alone.

    Returns:
        True if the alias was removed.
    """
    rc_file = find_shell_rc(home)
    if rc_file is None:
        print_warning(
            "Could not detect a shell config file (.zshrc or .bashrc). Skipping alias removal."
        )
        return False

    try:
        lines = rc_file.read_text(encoding="utf-8", errors=_RC_ERRORS).splitlines(keepends=True)
    except OSError as e:
        print_warning(f"Could not read '{rc_file}': {e}. Skipping alias removal.")
        return False

    prefix = f"alias {alias_name}="
    kept: list[str] = []
    found = False
    index = 0
    while index < len(lines):
        current = lines[index]
        following = lines[index + 1] if index + 1 < len(lines) else ""
        if current.strip() == ALIAS_MARKER and following.startswith(prefix):
            found = True
            index += 2
            continue
        kept.append(current)
        index += 1

    if not found:
        print_info(
            f"Alias '{alias_name}' added by dotctl not found in '{rc_file}', no removal needed."
        )
        return False

    if not confirm(f"Remove alias '{alias_name}' and its comment from '{rc_file}'?"):
        print_info(f"Skipping alias '{alias_name}' removal.")
        return False

    try:
        rc_file.write_text("".join(kept), encoding="utf-8", errors=_RC_ERRORS)
    except OSError as e:
        logger.warning("Failed to rewrite %s: %s", rc_file, e)
        print_warning(
            f"Failed to remove alias '{alias_name}'. Manual cleanup may be required in '{rc_file}'."
        )
        return False

    print_info(f"Alias '{alias_name}' and its comment removed from '{rc_file}'.")
    return True
