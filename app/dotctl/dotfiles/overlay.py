"""Dotfile overlay deployment and removal.

Deploy syncs the bare repository, moves every home file the checkout
would overwrite into a new backup generation, then force-checks out the
tracked branch onto the home directory. Removal deletes the tracked files
and restores the most recent generation.

Tracked files are enumerated fresh on every call; the repository may
have changed since the last run.
"""

import logging
import shutil
from dataclasses import dataclass, field, replace
from pathlib import Path

from dotctl.core.confirm import Confirmer
from dotctl.core.errors import LedgerError, RepositoryError, RestoreError, UserDeclinedError
from dotctl.dotfiles.backup import BackupGeneration, GenerationStore
from dotctl.dotfiles.git import BareRepository
from dotctl.utils.formatting import print_info, print_success, print_warning

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RemovalReport:
    """Outcome of removing the overlay from the home directory.

    Attributes:
        removed: Tracked paths deleted from home.
        restored: Paths moved back from the last generation.
        generation: Generation restored from, if any.
        generation_discarded: Whether that generation was deleted.
        repository_deleted: Whether the bare clone was deleted.
    """

    removed: list[str] = field(default_factory=list)
    restored: list[str] = field(default_factory=list)
    generation: BackupGeneration | None = None
    generation_discarded: bool = False
    repository_deleted: bool = False


class DotfileOverlay:
    """Deploys a bare repository's tracked files onto a home directory."""

    def __init__(
        self,
        repo: BareRepository,
        store: GenerationStore,
        home: Path,
        confirm: Confirmer,
        repo_url: str,
    ) -> None:
        """Initialize the overlay engine.

        Args:
            repo: Bare repository whose work tree is ``home``.
            store: Backup generation store.
            home: Home directory the overlay is applied to.
            confirm: Confirmation capability.
            repo_url: Clone URL used when no clone exists yet.
        """
        self.repo = repo
        self.store = store
        self.home = home
        self._confirm = confirm
        self.repo_url = repo_url

    def sync_repository(self) -> None:
        """Clone the repository, or pull it when a clone already exists.

        Raises:
            CommandFailedError: If clone, pull or the config write fails.
        """
        if self.repo.exists():
            print_info("Dotfiles bare repository already exists. Updating...")
            if self.repo.pull():
                print_info("Dotfiles repository updated successfully.")
            else:
                print_info("Dotfiles repository is already up to date.")
        else:
            print_info(f"Cloning dotfiles bare repository from {self.repo_url}...")
            self.repo.clone(self.repo_url)
            print_info(f"Dotfiles bare repository cloned to {self.repo.git_dir}.")

        self.repo.set_config("status.showUntrackedFiles", "no")
        logger.debug("Applied status.showUntrackedFiles=no to %s", self.repo.git_dir)

    def tracked_files(self) -> list[str]:
        """Enumerate the deployable tracked files."""
        return self.repo.tracked_files()

    def deploy(self) -> BackupGeneration:
        """Apply the overlay, backing up every file it would overwrite.

        Returns:
            The generation holding displaced files. It is recorded in the
            ledger only when at least one file was displaced.

        Raises:
            CommandFailedError: If a git operation fails.
            BackupError: If an existing file cannot be moved aside.
            UserDeclinedError: If the operator declines the checkout.
            LedgerError: If the generation cannot be recorded.
        """
        self.sync_repository()

        generation = self.store.new_generation()
        print_info("Preparing to deploy dotfiles. Existing files will be backed up.")
        logger.info("Backup directory for this run: %s", generation.root)

        moved: list[str] = []
        for relative_path in self.tracked_files():
            if self.store.backup(generation, relative_path, self.home):
                print_warning(
                    f"Backed up existing '{self.home / relative_path}' "
                    f"to '{generation.path_for(relative_path)}'."
                )
                moved.append(relative_path)

        print_info(f"Checking out dotfiles into {self.home}...")
        if not self._confirm(
            "This will overwrite existing dotfiles in your home directory "
            "with your repository's versions. Proceed?"
        ):
            detail = f"; displaced files remain in '{generation.root}'" if moved else ""
            raise UserDeclinedError(
                f"Dotfile checkout cancelled. Dotfiles may not be fully deployed{detail}"
            )
        self.repo.checkout()
        print_success(f"Dotfiles deployed to {self.home}.")

        generation = replace(generation, items=tuple(moved))
        if not moved:
            print_info("No existing dotfiles were displaced; no backup generation recorded.")
            return generation

        generation = self.store.record(generation)
        print_info(f"Backup directory '{generation.root}' recorded in ledger.")
        return generation

    def remove_tracked(self) -> list[str]:
        """Delete every tracked path from the home directory.

        A missing repository degrades to removing nothing.

        Returns:
            Relative paths removed.

        Raises:
            RestoreError: If a path exists but cannot be removed.
        """
        try:
            tracked = self.tracked_files()
        except RepositoryError as e:
            print_warning(f"{e}. Tracked dotfiles cannot be enumerated; none were removed.")
            return []

        print_info(f"Removing deployed dotfiles from {self.home}...")
        removed: list[str] = []
        for relative_path in tracked:
            target = self.home / relative_path
            if not target.exists() and not target.is_symlink():
                logger.debug("%s not found in home, skipping removal", target)
                continue
            try:
                if target.is_dir() and not target.is_symlink():
                    shutil.rmtree(target)
                else:
                    target.unlink()
            except OSError as e:
                raise RestoreError(f"Failed to remove '{target}': {e}") from e
            removed.append(relative_path)
        print_info("Deployed dotfiles removed.")
        return removed

    def remove(self) -> RemovalReport:
        """Remove the overlay and restore the most recent generation.

        Returns:
            RemovalReport describing what happened.

        Raises:
            RestoreError: If removal or restoration of a file fails.
            BackupError: If the generation directory cannot be deleted.
        """
        report = RemovalReport()
        last = self.store.last_generation()
        report.removed = self.remove_tracked()

        if last is None:
            print_warning(
                "No valid backup generation found. Tracked dotfiles were removed "
                "but no original files were restored."
            )
        else:
            print_info(f"Restoring original dotfiles from '{last.root}'...")
            report.generation = last
            report.restored = self.store.restore(last, self.home)
            print_success(f"Original dotfiles restored from '{last.root}'.")

            if self._confirm(
                f"Delete the backup directory '{last.root}'? (Recommended for clean takedown)"
            ):
                self.store.discard(last)
                report.generation_discarded = True
            else:
                print_info(f"Skipping deletion of backup directory '{last.root}'.")

        if self._confirm(
            f"Delete the dotfiles bare repository '{self.repo.git_dir}'? "
            "(Recommended for clean takedown)"
        ):
            self.delete_repository()
            report.repository_deleted = True
        else:
            print_info("Skipping deletion of dotfiles bare repository.")

        return report

    def delete_repository(self) -> None:
        """Delete the bare clone.

        Raises:
            RepositoryError: If the directory cannot be removed.
        """
        git_dir = self.repo.git_dir
        if not git_dir.exists():
            print_info(f"Dotfiles bare repository '{git_dir}' already absent.")
            return
        try:
            shutil.rmtree(git_dir)
        except OSError as e:
            raise RepositoryError(f"Failed to remove dotfiles bare repository: {e}") from e
        print_info("Dotfiles bare repository removed.")

    def cleanup_backup_root(self) -> None:
        """Offer to delete an empty backup ledger and an empty backup root."""
        ledger = self.store.ledger
        if ledger.exists() and ledger.is_empty():
            if self._confirm(f"The backup ledger '{ledger.path}' is empty. Delete it?"):
                try:
                    ledger.delete()
                except LedgerError as e:
                    print_warning(f"{e}. Manual cleanup may be required.")

        if self.store.is_root_empty():
            if self._confirm(
                f"The base backup directory '{self.store.root}' is now empty. Delete it? "
                "(Recommended for clean takedown)"
            ):
                try:
                    self.store.root.rmdir()
                    print_info(f"Base backup directory '{self.store.root}' removed.")
                except OSError as e:
                    print_warning(
                        f"Failed to remove base backup directory '{self.store.root}': {e}. "
                        "Manual cleanup may be required."
                    )
            else:
                print_info(f"Skipping deletion of base backup directory '{self.store.root}'.")
