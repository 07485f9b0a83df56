"""Platform profile models.

This module defines the dialect enumerations and the immutable profile
that the resolver derives from host identity markers.
"""

from dataclasses import dataclass
from enum import Enum


class PackageManager(Enum):
    """Package-management dialect of a host."""

    APT = "apt"
    DNF = "dnf"
    APK = "apk"


class InitSystem(Enum):
    """Init-system dialect used for service control."""

    SYSTEMD = "systemd"
    OPENRC = "openrc"


class UserDialect(Enum):
    """User and group command dialect.

    Attributes:
        USERADD_STYLE: shadow-utils commands (useradd, groupadd, usermod).
        ADDUSER_STYLE: busybox commands (adduser, addgroup).
    """

    USERADD_STYLE = "useradd"
    ADDUSER_STYLE = "adduser"


@dataclass(frozen=True, slots=True)
class PlatformProfile:
    """Resolved dialect combination for one host.

    Attributes:
        package_manager: Package-manager dialect.
        init_system: Init-system dialect.
        user_dialect: User/group command dialect.
        distribution: Distribution identifier the profile was matched for.
        codename: Release codename for an exact match, None for a family match.
    """

    package_manager: PackageManager
    init_system: InitSystem
    user_dialect: UserDialect
    distribution: str
    codename: str | None = None

    @property
    def is_exact(self) -> bool:
        """Check if the profile was matched on distribution and release."""
        return self.codename is not None

    @property
    def label(self) -> str:
        """Human-readable description, e.g. 'debian bookworm (apt/systemd)'."""
        name = f"{self.distribution} {self.codename}" if self.codename else self.distribution
        return f"{name} ({self.package_manager.value}/{self.init_system.value})"
