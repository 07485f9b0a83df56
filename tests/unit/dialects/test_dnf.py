"""Unit tests for DnfDialect."""

from pathlib import Path
from unittest.mock import patch

import pytest

from dockhand.core.platform import resolve
from dockhand.dialects.dnf import DOCKER_CE_REPO_URL, DnfDialect
from dockhand.models.platform import PackageManager


class TestDnfDialect:
    """Tests for DnfDialect class."""

    @pytest.fixture
    def dialect(self, almalinux_os_release: str) -> DnfDialect:
        """Create DnfDialect for an AlmaLinux host."""
        return DnfDialect(resolve(almalinux_os_release))

    def test_package_manager_is_dnf(self, dialect: DnfDialect) -> None:
        """Dialect returns DNF as package manager."""
        assert dialect.package_manager == PackageManager.DNF
        assert dialect.package_tool == "dnf"

    def test_registers_repository_first(self, dialect: DnfDialect) -> None:
        """Without the Docker CE repository it is added before installing."""
        with patch.object(dialect, "repository_registered", return_value=False):
            sequence = dialect.runtime_install_sequence()

        assert sequence == [
            ["dnf", "install", "-y", "dnf-plugins-core"],
            ["dnf", "config-manager", f"--add-repo={DOCKER_CE_REPO_URL}"],
            ["dnf", "install", "-y", "docker-ce", "docker-ce-cli", "containerd.io", "curl"],
        ]

    def test_repository_already_registered(self, dialect: DnfDialect) -> None:
        """A registered repository is not added again."""
        with patch.object(dialect, "repository_registered", return_value=True):
            sequence = dialect.runtime_install_sequence()

        assert len(sequence) == 1
        assert sequence[0][:3] == ["dnf", "install", "-y"]

    def test_repository_check(self, dialect: DnfDialect, tmp_path: Path) -> None:
        """The repository counts as registered when its file exists."""
        repo = tmp_path / "docker-ce.repo"
        with patch("dockhand.dialects.dnf.DOCKER_CE_REPO_PATH", repo):
            assert dialect.repository_registered() is False
            repo.write_text("[docker-ce-stable]\n")
            assert dialect.repository_registered() is True
