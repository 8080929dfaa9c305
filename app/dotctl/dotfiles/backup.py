"""Backup generations for files displaced by a dotfile overlay.

Each setup run that displaces existing files moves them into a fresh
generation directory under the backup root, mirroring their path
relative to the home directory, and records the generation in the
backup ledger. Takedown consumes the most recent generation only.

Backup and restore are pure moves: no merge, no diff. Whatever sits at
the destination is replaced.
"""

import logging
import os
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path

from dotctl.core.errors import BackupError, LedgerError, RestoreError
from dotctl.core.ledger import OrderedLog
from dotctl.core.paths import BACKUP_LEDGER_NAME
from dotctl.utils.formatting import print_info, print_warning

logger = logging.getLogger(__name__)

GENERATION_ID_FORMAT = "%Y%m%d%H%M%S"


def _lexists(path: Path) -> bool:
    """Check existence without following a final symlink."""
    return path.exists() or path.is_symlink()


def backup_item(source: Path, backup: Path) -> bool:
    """Move an existing path into a backup location.

    Args:
        source: Path to displace.
        backup: Destination inside a generation directory.

    Returns:
        True if something was moved, False if source did not exist.

    Raises:
        BackupError: If the move fails. Callers must not overwrite source
            after a failed backup.
    """
    if not _lexists(source):
        logger.debug("%s does not exist, no backup needed", source)
        return False

    try:
        backup.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise BackupError(f"Failed to create backup directory for '{source}': {e}") from e

    try:
        shutil.move(str(source), str(backup))
    except OSError as e:
        raise BackupError(f"Failed to move '{source}' to '{backup}': {e}") from e

    logger.info("Backed up %s to %s", source, backup)
    return True


def restore_item(backup: Path, target: Path) -> bool:
    """Move a backed-up path back to its original location.

    Args:
        backup: Path inside a generation directory.
        target: Original location under the home directory.

    Returns:
        True if something was restored, False if the backup was missing.

    Raises:
        RestoreError: If the move fails or would nest into a directory.
    """
    if not _lexists(backup):
        print_warning(f"Backup item '{backup}' not found, skipping restore for '{target}'.")
        return False

    if target.is_dir() and not target.is_symlink():
        raise RestoreError(f"Cannot restore '{backup}': '{target}' is a directory")

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise RestoreError(f"Failed to create directory for restoring '{target}': {e}") from e

    try:
        if target.is_symlink() or target.is_file():
            target.unlink()
        shutil.move(str(backup), str(target))
    except OSError as e:
        raise RestoreError(f"Failed to move '{backup}' to '{target}': {e}") from e

    logger.info("Restored %s", target)
    return True


@dataclass(frozen=True, slots=True)
class BackupGeneration:
    """One timestamped backup snapshot.

    Attributes:
        id: Sortable timestamp naming the generation.
        root: Generation directory.
        items: Relative paths moved into the generation by this run.
        recorded: Whether the generation was appended to the ledger.
    """

    id: str
    root: Path
    items: tuple[str, ...] = field(default=())
    recorded: bool = False

    def path_for(self, relative_path: str) -> Path:
        """Mirror a home-relative path inside the generation."""
        return self.root / relative_path

    def exists(self) -> bool:
        return self.root.is_dir()

    def files(self) -> list[str]:
        """List every file below the generation root, relative and sorted.

        Restore works file-by-file, so directories are descended into;
        symlinks (including links to directories) count as files.
        """
        found: list[str] = []
        for dirpath, dirnames, filenames in os.walk(self.root, followlinks=False):
            base = Path(dirpath)
            for name in filenames:
                found.append((base / name).relative_to(self.root).as_posix())
            for name in dirnames:
                if (base / name).is_symlink():
                    found.append((base / name).relative_to(self.root).as_posix())
        return sorted(found)


class GenerationStore:
    """Owns the backup root, its generation directories and their ledger.

    Attributes:
        root: Backup root directory.
        ledger: Backup-generations ledger, consumed as a stack.
    """

    def __init__(
        self,
        root: Path,
        ledger: OrderedLog | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the store.

        Args:
            root: Backup root directory.
            ledger: Ledger override. Defaults to <root>/manifest.log.
            clock: Source of generation timestamps.
        """
        self.root = root
        self.ledger = ledger if ledger is not None else OrderedLog(root / BACKUP_LEDGER_NAME)
        self._clock = clock

    def new_generation(self) -> BackupGeneration:
        """Name a fresh generation; its directory is created on first backup."""
        base_id = self._clock().strftime(GENERATION_ID_FORMAT)
        generation_id = base_id
        suffix = 1
        while (self.root / generation_id).exists():
            generation_id = f"{base_id}-{suffix}"
            suffix += 1
        return BackupGeneration(id=generation_id, root=self.root / generation_id)

    def backup(self, generation: BackupGeneration, relative_path: str, home: Path) -> bool:
        """Move one home path into the generation, preserving its relative path."""
        return backup_item(home / relative_path, generation.path_for(relative_path))

    def record(self, generation: BackupGeneration) -> BackupGeneration:
        """Append the generation to the ledger.

        Raises:
            LedgerError: If the ledger cannot be written.
        """
        self.root.mkdir(parents=True, exist_ok=True)
        self.ledger.append(str(generation.root))
        logger.info("Recorded backup generation %s", generation.root)
        return replace(generation, recorded=True)

    def last_generation(self) -> BackupGeneration | None:
        """Return the most recent recorded generation if it is usable.

        Returns:
            The generation named by the last ledger line, or None when the
            ledger is missing, empty, or names a directory that is gone.
        """
        if not self.ledger.exists():
            print_warning(
                f"Dotfiles backup ledger not found at '{self.ledger.path}'. "
                "Cannot restore original dotfiles."
            )
            return None

        last = self.ledger.peek_last()
        if last is None:
            print_warning(
                f"Backup ledger '{self.ledger.path}' is empty. "
                "Cannot determine last backup to restore."
            )
            return None

        root = Path(last)
        if not root.is_dir():
            print_warning(
                f"Last recorded backup directory '{root}' does not exist. "
                "Cannot restore original dotfiles."
            )
            return None

        return BackupGeneration(id=root.name, root=root, recorded=True)

    def restore(self, generation: BackupGeneration, home: Path) -> list[str]:
        """Move every file of a generation back under the home directory.

        Returns:
            Relative paths restored.

        Raises:
            RestoreError: If any file cannot be moved back.
        """
        restored: list[str] = []
        for relative_path in generation.files():
            if restore_item(generation.path_for(relative_path), home / relative_path):
                restored.append(relative_path)
        return restored

    def discard(self, generation: BackupGeneration) -> None:
        """Delete a generation directory and pop its ledger entry.

        Raises:
            BackupError: If the directory cannot be removed.
        """
        try:
            shutil.rmtree(generation.root)
        except FileNotFoundError:
            logger.debug("Generation %s already gone", generation.root)
        except OSError as e:
            raise BackupError(f"Failed to remove backup directory '{generation.root}': {e}") from e

        try:
            if self.ledger.peek_last() == str(generation.root):
                self.ledger.pop_last()
            else:
                self.ledger.remove(str(generation.root))
        except LedgerError as e:
            print_warning(f"{e}. Manual cleanup of the backup ledger may be required.")
        print_info(f"Backup directory '{generation.root}' removed.")

    def is_root_empty(self) -> bool:
        """Check whether the backup root exists and holds nothing."""
        return self.root.is_dir() and not any(self.root.iterdir())
