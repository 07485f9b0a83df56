"""APK dialect implementation.

Installs docker and docker-compose from the Alpine community repository.
"""

from dockhand.dialects.base import Dialect
from dockhand.models.platform import PackageManager


class ApkDialect(Dialect):
    """Dialect for Alpine hosts.

    Compose is packaged on Alpine, so nothing is downloaded.
    """

    RUNTIME_PACKAGES: tuple[str, ...] = ("docker", "docker-compose")

    @property
    def package_manager(self) -> PackageManager:
        """Return APK as the package manager."""
        return PackageManager.APK

    @property
    def package_tool(self) -> str:
        return "apk"

    def runtime_install_sequence(self) -> list[list[str]]:
        return [
            ["apk", "update"],
            ["apk", "add", *self.RUNTIME_PACKAGES],
        ]

    def compose_install_sequence(self) -> list[list[str]]:
        return [["apk", "add", "docker-compose"]]
