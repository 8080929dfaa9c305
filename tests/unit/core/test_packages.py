"""Unit tests for PackageManager.

Tests for ledger-tracked, idempotent install and reverse-order uninstall.
"""

from pathlib import Path
from unittest.mock import patch

import pytest
from dotctl.core.errors import CommandFailedError, LedgerError
from dotctl.core.ledger import OrderedLog
from dotctl.core.packages import PackageManager
from dotctl.core.platform import PlatformKind, PlatformProfile
from dotctl.models.package import PackageSpec


def _specs(*names: str) -> list[PackageSpec]:
    return [PackageSpec(name=name, category="core") for name in names]


def _profile(operator) -> PlatformProfile:
    return PlatformProfile(kind=PlatformKind.LINUX, distro_id="fake", operator=operator)


@pytest.fixture
def ledger(tmp_path: Path) -> OrderedLog:
    """Create an empty package ledger."""
    log = OrderedLog(tmp_path / ".package_manifest.log")
    log.touch()
    return log


class TestInstall:
    """Tests for PackageManager.install."""

    def test_installs_missing_and_records(
        self, fake_operator, profile, ledger, confirm_all
    ) -> None:
        """Missing packages are installed and appended in order."""
        manager = PackageManager(profile, ledger, confirm_all)

        installed = manager.install("Core", _specs("git", "curl"))

        assert installed == ["git", "curl"]
        assert fake_operator.calls_of("install") == ["git", "curl"]
        assert ledger.entries() == ["git", "curl"]

    def test_skips_already_installed(self, make_operator, ledger, confirm_all) -> None:
        """A package that is already present is neither installed nor recorded."""
        operator = make_operator(installed={"git"})
        manager = PackageManager(_profile(operator), ledger, confirm_all)

        installed = manager.install("Core", _specs("git", "curl"))

        assert installed == ["curl"]
        assert operator.calls_of("install") == ["curl"]
        assert ledger.entries() == ["curl"]

    def test_install_is_idempotent(self, fake_operator, profile, ledger, confirm_all) -> None:
        """A second run installs nothing and leaves the ledger unchanged."""
        manager = PackageManager(profile, ledger, confirm_all)
        manager.install("Core", _specs("git", "curl"))
        before = ledger.entries()

        assert manager.install("Core", _specs("git", "curl")) == []
        assert ledger.entries() == before
        assert fake_operator.calls_of("install") == ["git", "curl"]

    def test_decline_skips_package(self, fake_operator, profile, ledger, make_confirmer) -> None:
        """Declining one package skips it and continues with the rest."""
        confirm = make_confirmer(answers={"'git'": False})
        manager = PackageManager(profile, ledger, confirm)

        installed = manager.install("Core", _specs("git", "curl"))

        assert installed == ["curl"]
        assert fake_operator.calls_of("install") == ["curl"]
        assert ledger.entries() == ["curl"]

    def test_install_failure_is_fatal(self, make_operator, ledger, confirm_all) -> None:
        """A failed install raises and keeps earlier packages recorded."""
        operator = make_operator(fail_install={"curl"})
        manager = PackageManager(_profile(operator), ledger, confirm_all)

        with pytest.raises(CommandFailedError, match="Failed to install 'curl'"):
            manager.install("Core", _specs("git", "curl", "wget"))

        assert ledger.entries() == ["git"]
        assert "wget" not in operator.calls_of("install")

    def test_empty_group_does_nothing(self, fake_operator, profile, ledger, confirm_all) -> None:
        """An empty package list is skipped."""
        manager = PackageManager(profile, ledger, confirm_all)

        assert manager.install("Go", []) == []
        assert fake_operator.calls == []

    def test_ledger_failure_only_warns(self, fake_operator, profile, ledger, confirm_all) -> None:
        """A package that installed but cannot be recorded is still reported."""
        manager = PackageManager(profile, ledger, confirm_all)

        with patch.object(OrderedLog, "append", side_effect=LedgerError("disk full")):
            installed = manager.install("Core", _specs("git"))

        assert installed == ["git"]
        assert ledger.entries() == []


class TestRefresh:
    """Tests for PackageManager.refresh_index."""

    def test_refresh_failure_is_not_fatal(self, make_operator, ledger, confirm_all) -> None:
        """A failed index refresh only warns."""
        operator = make_operator(fail_refresh=True)
        manager = PackageManager(_profile(operator), ledger, confirm_all)

        manager.refresh_index()

        assert operator.calls_of("refresh") == [None]


class TestUninstall:
    """Tests for PackageManager.uninstall."""

    def test_reverse_order(self, make_operator, ledger, make_confirmer) -> None:
        """Packages are removed newest first and forgotten."""
        operator = make_operator(installed={"A", "B", "C"})
        for name in ("A", "B", "C"):
            ledger.append(name)
        confirm = make_confirmer(answers={"Delete the package ledger": False})
        manager = PackageManager(_profile(operator), ledger, confirm)

        results = manager.uninstall()

        assert operator.calls_of("uninstall") == ["C", "B", "A"]
        assert [r.package for r in results] == ["C", "B", "A"]
        assert ledger.exists() is True
        assert ledger.entries() == []

    def test_not_installed_entries_are_skipped(self, make_operator, ledger, make_confirmer) -> None:
        """An entry removed outside dotctl is skipped and dropped from the ledger."""
        operator = make_operator(installed={"git"})
        ledger.append("git")
        ledger.append("gone")
        confirm = make_confirmer(answers={"Delete the package ledger": False})
        manager = PackageManager(_profile(operator), ledger, confirm)

        manager.uninstall()

        assert operator.calls_of("uninstall") == ["git"]
        assert ledger.entries() == []

    def test_failure_continues_and_keeps_entry(self, make_operator, ledger, make_confirmer) -> None:
        """A failed uninstall is reported, the pass continues, the entry stays."""
        operator = make_operator(installed={"A", "B"}, fail_uninstall={"B"})
        ledger.append("A")
        ledger.append("B")
        confirm = make_confirmer(answers={"Delete the package ledger": False})
        manager = PackageManager(_profile(operator), ledger, confirm)

        results = manager.uninstall()

        assert operator.calls_of("uninstall") == ["B", "A"]
        assert [r.success for r in results] == [False, True]
        assert ledger.entries() == ["B"]

    def test_missing_ledger_is_noop(
        self, fake_operator, profile, tmp_path: Path, confirm_all
    ) -> None:
        """Without a ledger nothing is uninstalled."""
        manager = PackageManager(profile, OrderedLog(tmp_path / "absent.log"), confirm_all)

        assert manager.uninstall() == []
        assert fake_operator.calls == []
        assert confirm_all.prompts == []

    def test_declined_leaves_everything(self, make_operator, ledger, make_confirmer) -> None:
        """Declining the uninstall checkpoint touches nothing."""
        operator = make_operator(installed={"git"})
        ledger.append("git")
        manager = PackageManager(_profile(operator), ledger, make_confirmer(default=False))

        assert manager.uninstall() == []
        assert operator.calls_of("uninstall") == []
        assert ledger.entries() == ["git"]

    def test_confirmed_deletes_ledger(self, make_operator, ledger, confirm_all) -> None:
        """Confirming the final checkpoint deletes the ledger file."""
        operator = make_operator(installed={"git"})
        ledger.append("git")
        manager = PackageManager(_profile(operator), ledger, confirm_all)

        manager.uninstall()

        assert ledger.exists() is False
