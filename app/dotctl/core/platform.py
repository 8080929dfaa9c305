"""Host platform detection.

Resolves the running host to an immutable PlatformProfile carrying the
package-manager variant to use. Resolution happens once per run and the
profile is passed explicitly to every component that needs it.

Detection order:
1. Termux marker directory present -> Termux (userland pkg, no sudo)
2. Kernel name Linux -> distribution from /etc/os-release
3. Kernel name Darwin -> Homebrew, which must already be installed
"""

import logging
import platform
import shlex
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from dotctl.core.errors import UnsupportedPlatformError
from dotctl.core.paths import OS_RELEASE_PATH, TERMUX_MARKER_DIR
from dotctl.operators.apt import AptOperator
from dotctl.operators.base import Operator
from dotctl.operators.brew import BrewOperator
from dotctl.operators.dnf import DnfOperator
from dotctl.operators.pacman import PacmanOperator
from dotctl.operators.termux import TermuxOperator

logger = logging.getLogger(__name__)


class PlatformKind(Enum):
    """Family of host the tool is running on."""

    TERMUX = "termux"
    LINUX = "linux"
    MACOS = "macos"


# Distribution ID (os-release ID=) -> package-manager variant
DISTRO_OPERATORS: dict[str, type[Operator]] = {
    "ubuntu": AptOperator,
    "debian": AptOperator,
    "pop": AptOperator,
    "fedora": DnfOperator,
    "centos": DnfOperator,
    "rhel": DnfOperator,
    "arch": PacmanOperator,
}


@dataclass(frozen=True, slots=True)
class PlatformProfile:
    """Resolved host platform.

    Attributes:
        kind: Host family.
        distro_id: os-release ID for Linux, "termux" or "darwin" otherwise.
        operator: Package-manager variant bound to this host.
        description: Human-readable name for log output.
    """

    kind: PlatformKind
    distro_id: str
    operator: Operator
    description: str = ""

    def __post_init__(self) -> None:
        """Reject a profile without a usable package manager."""
        if self.operator is None or not self.operator.install_args("probe"):
            msg = f"Platform profile for {self.distro_id!r} has no install command"
            raise UnsupportedPlatformError(msg)


def parse_os_release(content: str) -> dict[str, str]:
    """Parse os-release KEY=value lines.

    Values may be quoted in shell style; comments and malformed lines
    are ignored.

    Args:
        content: Text of an os-release file.

    Returns:
        Mapping of keys to unquoted values.
    """
    fields: dict[str, str] = {}
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        try:
            parts = shlex.split(value)
        except ValueError:
            logger.debug("Skipping malformed os-release line: %r", raw_line)
            continue
        fields[key.strip()] = parts[0] if parts else ""
    return fields


def _resolve_linux(os_release: Path) -> PlatformProfile:
    """Resolve a Linux host from its os-release file."""
    if not os_release.is_file():
        msg = (
            f"Could not find {os_release}; cannot determine the Linux distribution "
            "for package management"
        )
        raise UnsupportedPlatformError(msg)

    try:
        fields = parse_os_release(os_release.read_text(encoding="utf-8"))
    except OSError as e:
        raise UnsupportedPlatformError(f"Failed to read {os_release}: {e}") from e

    distro_id = fields.get("ID", "").lower()
    pretty_name = fields.get("NAME") or distro_id
    operator_cls = DISTRO_OPERATORS.get(distro_id)
    if operator_cls is None:
        supported = ", ".join(sorted(DISTRO_OPERATORS))
        msg = f"Unsupported Linux distribution: {distro_id or 'unknown'} (supported: {supported})"
        raise UnsupportedPlatformError(msg)

    operator = operator_cls()
    logger.info("Detected Linux distribution: %s (ID: %s)", pretty_name, distro_id)
    return PlatformProfile(
        kind=PlatformKind.LINUX,
        distro_id=distro_id,
        operator=operator,
        description=f"{pretty_name} ({operator.name})",
    )


def _resolve_macos() -> PlatformProfile:
    """Resolve a macOS host; Homebrew must already be installed."""
    operator = BrewOperator()
    if not operator.is_available():
        msg = "Homebrew not found. Please install Homebrew (https://brew.sh/) to proceed on macOS"
        raise UnsupportedPlatformError(msg)
    return PlatformProfile(
        kind=PlatformKind.MACOS,
        distro_id="darwin",
        operator=operator,
        description="macOS (brew)",
    )


def resolve(
    *,
    termux_marker: Path = TERMUX_MARKER_DIR,
    os_release: Path = OS_RELEASE_PATH,
    system: str | None = None,
) -> PlatformProfile:
    """Identify the host and select its package-manager variant.

    Args:
        termux_marker: Directory whose presence identifies Termux.
        os_release: os-release file consulted on Linux.
        system: Kernel name override; defaults to platform.system().

    Returns:
        Resolved PlatformProfile.

    Raises:
        UnsupportedPlatformError: If the OS or distribution is not supported.
    """
    if termux_marker.is_dir():
        logger.info("Detected Termux environment")
        return PlatformProfile(
            kind=PlatformKind.TERMUX,
            distro_id="termux",
            operator=TermuxOperator(),
            description="Termux (pkg, userland)",
        )

    kernel = system if system is not None else platform.system()
    if kernel == "Linux":
        return _resolve_linux(os_release)
    if kernel == "Darwin":
        return _resolve_macos()

    raise UnsupportedPlatformError(f"Unsupported operating system: {kernel or 'unknown'}")
