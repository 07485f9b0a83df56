"""Host dialects for converging resources.

This module provides the abstract dialect and one implementation per
supported package manager (APT, DNF, APK).
"""

from dockhand.dialects.apk import ApkDialect
from dockhand.dialects.apt import AptDialect
from dockhand.dialects.base import Dialect
from dockhand.dialects.dnf import DnfDialect
from dockhand.models.desired import DEFAULT_COMPOSE_VERSION
from dockhand.models.platform import PackageManager, PlatformProfile

_DIALECTS: dict[PackageManager, type[Dialect]] = {
    PackageManager.APT: AptDialect,
    PackageManager.DNF: DnfDialect,
    PackageManager.APK: ApkDialect,
}


def get_dialect(
    profile: PlatformProfile,
    *,
    dry_run: bool = False,
    compose_version: str = DEFAULT_COMPOSE_VERSION,
) -> Dialect:
    """Create the dialect for a resolved profile.

    Args:
        profile: Resolved platform profile.
        dry_run: Whether to run in dry-run mode.
        compose_version: Compose v2 release downloaded where needed.

    Returns:
        Dialect instance for the profile's package manager.
    """
    return _DIALECTS[profile.package_manager](
        profile, dry_run=dry_run, compose_version=compose_version
    )


__all__ = ["ApkDialect", "AptDialect", "Dialect", "DnfDialect", "get_dialect"]
