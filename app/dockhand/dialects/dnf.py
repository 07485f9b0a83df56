"""DNF dialect implementation.

Installs Docker CE from Docker's upstream repository on RHEL-family hosts.
"""

from pathlib import Path

from dockhand.dialects.base import Dialect
from dockhand.models.platform import PackageManager

DOCKER_CE_REPO_URL = "https://download.docker.com/linux/centos/docker-ce.repo"
DOCKER_CE_REPO_PATH = Path("/etc/yum.repos.d/docker-ce.repo")


class DnfDialect(Dialect):
    """Dialect for DNF/RPM hosts.

    Docker CE is not in the distribution repositories, so its repository
    is registered (once) before the packages are installed.
    """

    RUNTIME_PACKAGES: tuple[str, ...] = ("docker-ce", "docker-ce-cli", "containerd.io", "curl")

    @property
    def package_manager(self) -> PackageManager:
        """Return DNF as the package manager."""
        return PackageManager.DNF

    @property
    def package_tool(self) -> str:
        return "dnf"

    def repository_registered(self) -> bool:
        """Check if the Docker CE repository file is present."""
        return DOCKER_CE_REPO_PATH.exists()

    def runtime_install_sequence(self) -> list[list[str]]:
        """Register the Docker CE repository if needed, then install."""
        commands: list[list[str]] = []
        if not self.repository_registered():
            # config-manager ships with dnf-plugins-core
            commands.append(["dnf", "install", "-y", "dnf-plugins-core"])
            commands.append(["dnf", "config-manager", f"--add-repo={DOCKER_CE_REPO_URL}"])
        commands.append(["dnf", "install", "-y", *self.RUNTIME_PACKAGES])
        return commands
