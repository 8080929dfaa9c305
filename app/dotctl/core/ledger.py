"""Append-only ledgers making provisioning reversible.

Two ledgers exist on a provisioned machine: the installed-packages
ledger (names of packages this tool installed) and the backup-generations
ledger (absolute paths of backup generation directories). Both are plain
text, one entry per line.
"""

import logging
import os
from pathlib import Path
from tempfile import NamedTemporaryFile

from dotctl.core.errors import LedgerError

logger = logging.getLogger(__name__)


class OrderedLog:
    """Ordered, line-oriented log persisted as a text file.

    Entries are appended at the end. Reading is front-to-back; the last
    entry can be peeked and popped, so the file can also serve as a stack.
    Blank lines are ignored.

    Attributes:
        path: Location of the backing file.
    """

    def __init__(self, path: Path) -> None:
        """Initialize the log.

        Args:
            path: Backing file. It is not created until first written.
        """
        self._path = path

    @property
    def path(self) -> Path:
        """Path to the backing file."""
        return self._path

    def exists(self) -> bool:
        """Check whether the backing file exists."""
        return self._path.is_file()

    def touch(self) -> None:
        """Create an empty backing file (and parents) if missing.

        Raises:
            LedgerError: If the file cannot be created.
        """
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.touch(exist_ok=True)
        except OSError as e:
            raise LedgerError(f"Failed to create ledger file '{self._path}': {e}") from e

    def entries(self) -> list[str]:
        """Read all entries, oldest first.

        Returns:
            List of entries; empty if the file doesn't exist.

        Raises:
            LedgerError: If the file exists but cannot be read.
        """
        if not self._path.exists():
            return []
        try:
            content = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise LedgerError(f"Failed to read ledger '{self._path}': {e}") from e
        return [line.strip() for line in content.splitlines() if line.strip()]

    def is_empty(self) -> bool:
        """Check whether the log holds no entries."""
        return not self.entries()

    def contains(self, entry: str) -> bool:
        """Check whether an entry is present."""
        return entry in self.entries()

    def append(self, entry: str) -> None:
        """Append an entry to the end of the log.

        Args:
            entry: Single-line entry to record.

        Raises:
            ValueError: If the entry is empty or spans multiple lines.
            LedgerError: If the file cannot be written.
        """
        if not entry.strip() or "\n" in entry:
            msg = f"Ledger entries must be a single non-empty line: {entry!r}"
            raise ValueError(msg)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open(mode="a", encoding="utf-8") as f:
                f.write(entry.strip() + "\n")
                f.flush()
        except OSError as e:
            raise LedgerError(f"Failed to append to ledger '{self._path}': {e}") from e

    def peek_last(self) -> str | None:
        """Return the most recently appended entry, or None when empty."""
        entries = self.entries()
        return entries[-1] if entries else None

    def pop_last(self) -> str | None:
        """Remove and return the most recently appended entry.

        Returns:
            The removed entry, or None when the log is empty.

        Raises:
            LedgerError: If the file cannot be rewritten.
        """
        entries = self.entries()
        if not entries:
            return None
        last = entries.pop()
        self._rewrite(entries)
        logger.debug("Popped '%s' from ledger %s", last, self._path)
        return last

    def remove(self, entry: str) -> bool:
        """Remove the last occurrence of an entry.

        Returns:
            True if the entry was present and removed.

        Raises:
            LedgerError: If the file cannot be rewritten.
        """
        entries = self.entries()
        for index in range(len(entries) - 1, -1, -1):
            if entries[index] == entry:
                del entries[index]
                self._rewrite(entries)
                return True
        return False

    def delete(self) -> None:
        """Delete the backing file if present.

        Raises:
            LedgerError: If the file cannot be removed.
        """
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            raise LedgerError(f"Failed to delete ledger '{self._path}': {e}") from e

    def _rewrite(self, entries: list[str]) -> None:
        """Replace the file content atomically."""
        tmp_path: Path | None = None
        try:
            with NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self._path.parent,
                delete=False,
                suffix=".tmp",
            ) as f:
                tmp_path = Path(f.name)
                f.writelines(entry + "\n" for entry in entries)
            os.replace(str(tmp_path), str(self._path))
        except OSError as e:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise LedgerError(f"Failed to rewrite ledger '{self._path}': {e}") from e
