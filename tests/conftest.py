"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

import pytest

from dockhand.core.errors import (
    InstallationFailedError,
    MembershipFailedError,
    PrimitiveAttempt,
)
from dockhand.models.platform import PlatformProfile
from dockhand.models.report import StepStatus
from dockhand.models.resource import GroupSpec, MembershipSpec, UserSpec

DEBIAN_BOOKWORM_OS_RELEASE = """PRETTY_NAME="Debian GNU/Linux 12 (bookworm)"
NAME="Debian GNU/Linux"
VERSION_ID="12"
VERSION="12 (bookworm)"
VERSION_CODENAME=bookworm
ID=debian
HOME_URL="https://www.debian.org/"
"""

DEBIAN_TRIXIE_OS_RELEASE = """PRETTY_NAME="Debian GNU/Linux 13 (trixie)"
NAME="Debian GNU/Linux"
VERSION_ID="13"
VERSION_CODENAME=trixie
ID=debian
"""

ALMALINUX_OS_RELEASE = """NAME="AlmaLinux"
VERSION="9.4 (Seafoam Ocelot)"
ID="almalinux"
ID_LIKE="rhel centos fedora"
VERSION_ID="9.4"
PRETTY_NAME="AlmaLinux 9.4 (Seafoam Ocelot)"
"""

ALPINE_OS_RELEASE = """NAME="Alpine Linux"
ID=alpine
VERSION_ID=3.20.0
PRETTY_NAME="Alpine Linux v3.20"
HOME_URL="https://alpinelinux.org/"
"""

ARCH_OS_RELEASE = """NAME="Arch Linux"
PRETTY_NAME="Arch Linux"
ID=arch
BUILD_ID=rolling
"""


@pytest.fixture
def debian_os_release() -> str:
    """Sample /etc/os-release of Debian bookworm."""
    return DEBIAN_BOOKWORM_OS_RELEASE


@pytest.fixture
def trixie_os_release() -> str:
    """Sample /etc/os-release of Debian trixie (family match only)."""
    return DEBIAN_TRIXIE_OS_RELEASE


@pytest.fixture
def almalinux_os_release() -> str:
    """Sample /etc/os-release of AlmaLinux 9."""
    return ALMALINUX_OS_RELEASE


@pytest.fixture
def alpine_os_release() -> str:
    """Sample /etc/os-release of Alpine 3.20."""
    return ALPINE_OS_RELEASE


@pytest.fixture
def arch_os_release() -> str:
    """Sample /etc/os-release of an unsupported distribution."""
    return ARCH_OS_RELEASE


@pytest.fixture
def os_release_file(tmp_path: Path) -> Callable[[str], Path]:
    """Write os-release content to a temporary file."""

    def _write(content: str) -> Path:
        path = tmp_path / "os-release"
        path.write_text(content)
        return path

    return _write


@pytest.fixture
def daemon_config_path(tmp_path: Path) -> Path:
    """Location of a daemon configuration inside the test directory."""
    return tmp_path / "docker" / "daemon.json"


class FakeHost:
    """In-memory host implementing the dialect operations.

    Records every change so tests can assert on what a run did.
    """

    def __init__(
        self,
        *,
        users: Iterable[str] = (),
        groups: Iterable[str] = (),
        memberships: Iterable[tuple[str, str]] = (),
        runtime: bool = False,
        membership_primitives_available: bool = True,
        install_fails: bool = False,
    ) -> None:
        self.users = set(users)
        self.groups = set(groups)
        self.memberships = set(memberships)
        self.runtime = runtime
        self.compose = runtime
        self.membership_primitives_available = membership_primitives_available
        self.install_fails = install_fails
        self.restarts = 0
        self.group_lookups: list[str] = []
        self.group_creations: list[str] = []
        self.profile: PlatformProfile | None = None
        self.factory_kwargs: dict[str, Any] = {}

    def ensure_runtime_installed(self) -> StepStatus:
        if self.runtime:
            return StepStatus.ALREADY_SATISFIED
        if self.install_fails:
            raise InstallationFailedError("apt-get install -y docker.io curl failed: E: no network")
        self.runtime = True
        return StepStatus.APPLIED

    def ensure_compose_installed(self) -> StepStatus:
        if self.compose:
            return StepStatus.ALREADY_SATISFIED
        self.compose = True
        return StepStatus.APPLIED

    def ensure_user(self, spec: UserSpec) -> StepStatus:
        if spec.name in self.users:
            return StepStatus.ALREADY_SATISFIED
        self.users.add(spec.name)
        return StepStatus.APPLIED

    def ensure_group(self, spec: GroupSpec) -> StepStatus:
        self.group_lookups.append(spec.name)
        if spec.name in self.groups:
            return StepStatus.ALREADY_SATISFIED
        self.group_creations.append(spec.name)
        self.groups.add(spec.name)
        return StepStatus.APPLIED

    def ensure_membership(self, spec: MembershipSpec) -> StepStatus:
        pair = (spec.user.name, spec.group.name)
        if pair in self.memberships:
            return StepStatus.ALREADY_SATISFIED
        if not self.membership_primitives_available:
            raise MembershipFailedError(
                spec.user.name,
                spec.group.name,
                [
                    PrimitiveAttempt("usermod", available=False),
                    PrimitiveAttempt("addgroup", available=False),
                ],
            )
        self.memberships.add(pair)
        return StepStatus.APPLIED

    def restart_service(self) -> StepStatus:
        self.restarts += 1
        return StepStatus.APPLIED

    def factory(self, profile: PlatformProfile, **kwargs: Any) -> "FakeHost":
        """Dialect factory handing out this host."""
        self.profile = profile
        self.factory_kwargs = kwargs
        return self


@pytest.fixture
def fake_host() -> Callable[..., FakeHost]:
    """Build an in-memory host; keyword arguments set its initial state."""

    def _make(**kwargs: Any) -> FakeHost:
        return FakeHost(**kwargs)

    return _make


@pytest.fixture
def config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG_CONFIG_HOME at an empty directory; returns the app config dir."""
    base = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(base))
    return base / "dockhand"
