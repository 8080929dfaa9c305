"""Pytest configuration and shared fixtures.

This module contains fixtures and fakes used across all test modules.
No test runs a real package manager, git or SSH binary.
"""

from pathlib import Path

import pytest
from dotctl.core.errors import RepositoryError
from dotctl.core.platform import PlatformKind, PlatformProfile
from dotctl.dotfiles.git import BareRepository, is_reserved
from dotctl.models.action import ActionResult, ActionType
from dotctl.operators.base import Operator


class FakeOperator(Operator):
    """In-memory package manager recording every call."""

    def __init__(
        self,
        installed: set[str] | None = None,
        fail_install: set[str] | None = None,
        fail_uninstall: set[str] | None = None,
        fail_refresh: bool = False,
    ) -> None:
        self.installed = set(installed or ())
        self.fail_install = set(fail_install or ())
        self.fail_uninstall = set(fail_uninstall or ())
        self.fail_refresh = fail_refresh
        self.calls: list[tuple[str, str | None]] = []

    @property
    def name(self) -> str:
        return "fake"

    @property
    def binary(self) -> str:
        return "fake-pkg"

    def install_args(self, package: str) -> list[str]:
        return ["fake-pkg", "install", package]

    def uninstall_args(self, package: str) -> list[str]:
        return ["fake-pkg", "remove", package]

    def query_args(self, package: str) -> list[str]:
        return ["fake-pkg", "query", package]

    def is_installed(self, package: str) -> bool:
        self.calls.append(("query", package))
        return package in self.installed

    def install(self, package: str) -> ActionResult:
        self.calls.append(("install", package))
        if package in self.fail_install:
            return ActionResult(ActionType.INSTALL, package, success=False, error="E: boom")
        self.installed.add(package)
        return ActionResult(ActionType.INSTALL, package, success=True)

    def uninstall(self, package: str) -> ActionResult:
        self.calls.append(("uninstall", package))
        if package in self.fail_uninstall:
            return ActionResult(ActionType.UNINSTALL, package, success=False, error="E: busy")
        self.installed.discard(package)
        return ActionResult(ActionType.UNINSTALL, package, success=True)

    def refresh(self) -> ActionResult:
        self.calls.append(("refresh", None))
        if self.fail_refresh:
            return ActionResult(ActionType.REFRESH, None, success=False, error="offline")
        return ActionResult(ActionType.REFRESH, None, success=True)

    def calls_of(self, kind: str) -> list[str | None]:
        return [name for call, name in self.calls if call == kind]


class FakeRepository(BareRepository):
    """Bare repository whose remote content is a dict of path -> text."""

    def __init__(self, git_dir: Path, work_tree: Path, files: dict[str, str]) -> None:
        super().__init__(git_dir=git_dir, work_tree=work_tree, branch="main")
        self.files = dict(files)
        self.config: dict[str, str] = {}
        self.clones = 0
        self.pulls = 0
        self.checkouts = 0

    def clone(self, url: str) -> None:
        self.clones += 1
        self.git_dir.mkdir(parents=True, exist_ok=True)
        (self.git_dir / "HEAD").write_text("ref: refs/heads/main\n")

    def pull(self) -> bool:
        self.pulls += 1
        return False

    def set_config(self, key: str, value: str) -> None:
        self.config[key] = value

    def tracked_files(self) -> list[str]:
        if not self.exists():
            raise RepositoryError(f"Dotfiles bare repository '{self.git_dir}' not found")
        return [path for path in self.files if not is_reserved(path)]

    def checkout(self) -> None:
        self.checkouts += 1
        for relative_path, content in self.files.items():
            target = self.work_tree / relative_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)


class RecordingConfirmer:
    """Confirmer answering from a table of prompt substrings."""

    def __init__(self, default: bool = True, answers: dict[str, bool] | None = None) -> None:
        self.default = default
        self.answers = answers or {}
        self.prompts: list[str] = []

    def __call__(self, prompt: str) -> bool:
        self.prompts.append(prompt)
        for fragment, answer in self.answers.items():
            if fragment in prompt:
                return answer
        return self.default


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """Empty home directory."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def fake_operator() -> FakeOperator:
    """Package manager with nothing installed."""
    return FakeOperator()


@pytest.fixture
def profile(fake_operator: FakeOperator) -> PlatformProfile:
    """Linux profile bound to the fake operator."""
    return PlatformProfile(
        kind=PlatformKind.LINUX,
        distro_id="fake",
        operator=fake_operator,
        description="Fake Linux (fake)",
    )


@pytest.fixture
def confirm_all() -> RecordingConfirmer:
    """Confirmer approving everything."""
    return RecordingConfirmer(default=True)


@pytest.fixture
def mock_os_release() -> str:
    """Sample /etc/os-release for Pop!_OS."""
    return """NAME="Pop!_OS"
VERSION="22.04 LTS"
ID=pop
ID_LIKE="ubuntu debian"
PRETTY_NAME="Pop!_OS 22.04 LTS"
# comment line
HOME_URL="https://pop.system76.com"
"""


@pytest.fixture
def mock_termux_list_installed() -> str:
    """Sample ``pkg list-installed`` output."""
    return """Listing... Done
git/stable,now 2.45.2 aarch64 [installed]
neovim/stable,now 0.10.0 aarch64 [installed]
tmux-extra/stable,now 1.0 aarch64 [installed]"""


@pytest.fixture
def make_operator() -> type[FakeOperator]:
    """Factory for fake operators with custom installed/failing sets."""
    return FakeOperator


@pytest.fixture
def make_repo() -> type[FakeRepository]:
    """Factory for fake bare repositories."""
    return FakeRepository


@pytest.fixture
def make_confirmer() -> type[RecordingConfirmer]:
    """Factory for confirmers with scripted answers."""
    return RecordingConfirmer
