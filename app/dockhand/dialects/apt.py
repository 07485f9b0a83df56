"""APT dialect implementation.

Installs the distribution's docker.io package on Debian hosts.
"""

from dockhand.dialects.base import Dialect
from dockhand.models.platform import PackageManager


class AptDialect(Dialect):
    """Dialect for APT/dpkg hosts.

    The runtime comes from the distribution archive, so no external
    repository has to be registered. Compose v2 is downloaded separately.
    """

    RUNTIME_PACKAGES: tuple[str, ...] = ("docker.io", "curl")

    @property
    def package_manager(self) -> PackageManager:
        """Return APT as the package manager."""
        return PackageManager.APT

    @property
    def package_tool(self) -> str:
        return "apt-get"

    def runtime_install_sequence(self) -> list[list[str]]:
        """Refresh the package index, then install the runtime."""
        return [
            ["apt-get", "update"],
            ["apt-get", "install", "-y", *self.RUNTIME_PACKAGES],
        ]
