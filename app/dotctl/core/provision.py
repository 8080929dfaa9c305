"""Setup and takedown orchestration.

Composes platform resolution, the SSH bootstrap, the dotfile overlay and
the package manager in a fixed order. Each run is atomic at the process
level: nothing is checkpointed, and a fatal error or a declined mandatory
checkpoint stops the run without rolling back completed steps.

Setup:
    resolve platform -> ensure package ledger -> SSH bootstrap ->
    deploy dotfiles -> shell alias -> refresh index -> install groups

Takedown:
    resolve platform -> uninstall packages -> remove shell alias ->
    remove dotfiles and restore last generation -> ledger cleanup
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from dotctl.core.config import Settings
from dotctl.core.confirm import Confirmer
from dotctl.core.errors import LedgerError, MissingToolError
from dotctl.core.ledger import OrderedLog
from dotctl.core.packages import PackageManager
from dotctl.core.paths import expand_home, get_home_dir
from dotctl.core.platform import PlatformProfile, resolve
from dotctl.core.ssh import SshBootstrap
from dotctl.dotfiles.alias import remove_alias, setup_alias
from dotctl.dotfiles.backup import BackupGeneration, GenerationStore
from dotctl.dotfiles.git import BareRepository
from dotctl.dotfiles.overlay import DotfileOverlay, RemovalReport
from dotctl.models.action import ActionResult
from dotctl.utils.formatting import print_info, print_success, print_warning
from dotctl.utils.shell import command_exists

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SetupReport:
    """What a setup run changed."""

    profile: PlatformProfile
    generation: BackupGeneration
    installed: list[str] = field(default_factory=list)


@dataclass(slots=True)
class TakedownReport:
    """What a takedown run changed."""

    profile: PlatformProfile
    uninstalled: list[ActionResult] = field(default_factory=list)
    removal: RemovalReport = field(default_factory=RemovalReport)


class Provisioner:
    """Drives the two top-level operations, setup and takedown."""

    def __init__(
        self,
        settings: Settings,
        confirm: Confirmer,
        *,
        home: Path | None = None,
        resolver: Callable[[], PlatformProfile] = resolve,
        repository: BareRepository | None = None,
        ssh: SshBootstrap | None = None,
    ) -> None:
        """Initialize the provisioner.

        Args:
            settings: Loaded settings.
            confirm: Confirmation capability shared by every component.
            home: Home directory override.
            resolver: Platform resolver, called once per run.
            repository: Bare repository override.
            ssh: SSH bootstrap override.
        """
        self.settings = settings
        self.home = home or get_home_dir()
        self._confirm = confirm
        self._resolver = resolver

        dotfiles = settings.dotfiles
        self.repository = repository or BareRepository(
            git_dir=dotfiles.repo_path(self.home),
            work_tree=self.home,
            branch=dotfiles.branch,
        )
        self.store = GenerationStore(dotfiles.backup_path(self.home))
        self.package_ledger = OrderedLog(settings.packages.ledger_path(self.home))
        self.overlay = DotfileOverlay(
            repo=self.repository,
            store=self.store,
            home=self.home,
            confirm=confirm,
            repo_url=dotfiles.repo_url,
        )
        self.ssh = ssh or SshBootstrap(
            key_path=expand_home(settings.ssh.key_path, self.home),
            legacy_key_path=expand_home(settings.ssh.legacy_key_path, self.home),
            confirm=confirm,
        )

    def _prepare(self) -> PlatformProfile:
        """Check required tools and resolve the platform once."""
        if not command_exists("git"):
            raise MissingToolError("git")
        logger.debug("'git' command found")

        print_info("Detecting operating system...")
        profile = self._resolver()
        print_info(f"Platform: {profile.description or profile.distro_id}")
        return profile

    def setup(self) -> SetupReport:
        """Provision the machine.

        Returns:
            SetupReport describing the run.

        Raises:
            DotctlError: On any fatal error or declined checkpoint.
        """
        print_info("Executing setup process...")
        profile = self._prepare()

        if not self.package_ledger.exists():
            self.package_ledger.touch()
            print_info(f"Created empty package ledger '{self.package_ledger.path}'.")

        if self.settings.ssh.enabled:
            self.ssh.run()
        else:
            logger.debug("SSH bootstrap disabled in settings")

        generation = self.overlay.deploy()
        setup_alias(
            self.settings.dotfiles.alias_name,
            self.repository.git_dir,
            self.home,
            self._confirm,
        )

        manager = PackageManager(profile, self.package_ledger, self._confirm)
        print_info("Beginning package installation...")
        manager.refresh_index()
        installed: list[str] = []
        for group in self.settings.packages.groups:
            installed.extend(manager.install(group.label, group.specs()))

        print_success("Setup complete.")
        return SetupReport(profile=profile, generation=generation, installed=installed)

    def takedown(self) -> TakedownReport:
        """Reverse a previous setup.

        Returns:
            TakedownReport describing the run.

        Raises:
            DotctlError: On any fatal error.
        """
        print_info("Executing takedown process...")
        profile = self._prepare()

        manager = PackageManager(profile, self.package_ledger, self._confirm)
        uninstalled = manager.uninstall()

        remove_alias(self.settings.dotfiles.alias_name, self.home, self._confirm)

        print_info("Beginning dotfiles takedown process...")
        removal = self.overlay.remove()
        if removal.repository_deleted:
            self.overlay.cleanup_backup_root()
        self._cleanup_package_ledger()

        print_success("Takedown complete.")
        return TakedownReport(profile=profile, uninstalled=uninstalled, removal=removal)

    def _cleanup_package_ledger(self) -> None:
        """Offer to delete a package ledger that no longer lists anything."""
        ledger = self.package_ledger
        if not ledger.exists() or not ledger.is_empty():
            return
        if self._confirm(f"The package ledger '{ledger.path}' is empty. Delete it?"):
            try:
                ledger.delete()
            except LedgerError as e:
                print_warning(f"{e}. Manual cleanup may be required.")
