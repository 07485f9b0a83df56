"""Abstract base class for host dialects.

This module defines the Dialect interface implemented once per package
manager. Every operation checks the host first and only acts when the
desired state does not already hold.
"""

import logging
import platform
import shlex
import subprocess
from abc import ABC, abstractmethod

from dockhand.core.errors import (
    ComposeInstallError,
    ConvergeError,
    InstallationFailedError,
    MembershipFailedError,
    PrimitiveAttempt,
    ResourceError,
    ServiceError,
)
from dockhand.core.paths import COMPOSE_BINARY_PATH, COMPOSE_LINK_PATH
from dockhand.dialects.accounts import AccountCommands, get_account_commands
from dockhand.dialects.init import ServiceController, get_service_controller
from dockhand.models.desired import DEFAULT_COMPOSE_VERSION
from dockhand.models.platform import PackageManager, PlatformProfile
from dockhand.models.report import StepStatus
from dockhand.models.resource import GroupSpec, MembershipSpec, UserSpec
from dockhand.utils.shell import (
    CommandResult,
    command_exists,
    command_succeeds,
    run_command,
    run_privileged,
)

logger = logging.getLogger(__name__)

COMPOSE_RELEASE_URL = (
    "https://github.com/docker/compose/releases/download/{version}/docker-compose-linux-{arch}"
)


class Dialect(ABC):
    """Abstract base class for all host dialects.

    A dialect knows how to install the container runtime with one package
    manager. Account and service commands are delegated to the builders
    selected by the profile's user and init dialects.

    Attributes:
        profile: Resolved platform profile of the host.
        dry_run: If True, lookups run but state-changing commands are only logged.

    Example:
        >>> dialect = get_dialect(profile)
        >>> dialect.ensure_runtime_installed()
        <StepStatus.ALREADY_SATISFIED: 'already-satisfied'>
    """

    # Binary whose presence means the runtime is installed
    RUNTIME_BINARY = "docker"

    # Service started and restarted by the converger
    SERVICE_NAME = "docker"

    def __init__(
        self,
        profile: PlatformProfile,
        *,
        dry_run: bool = False,
        compose_version: str = DEFAULT_COMPOSE_VERSION,
    ) -> None:
        """Initialize the dialect.

        Args:
            profile: Resolved platform profile.
            dry_run: If True, only simulate state-changing commands.
            compose_version: Compose v2 release downloaded where needed.

        Raises:
            ValueError: If the profile belongs to another package manager.
        """
        if profile.package_manager != self.package_manager:
            msg = (
                f"Profile package manager {profile.package_manager.value} doesn't match "
                f"dialect {self.package_manager.value}"
            )
            raise ValueError(msg)
        self._profile = profile
        self._dry_run = dry_run
        self._compose_version = compose_version
        self._accounts = get_account_commands(profile.user_dialect)
        self._service = get_service_controller(
            profile.init_system, self.SERVICE_NAME, dry_run=dry_run
        )

    @property
    def profile(self) -> PlatformProfile:
        """Platform profile the dialect was created for."""
        return self._profile

    @property
    def dry_run(self) -> bool:
        """Check if dialect is in dry-run mode."""
        return self._dry_run

    @property
    def accounts(self) -> AccountCommands:
        """Account command builder for the host."""
        return self._accounts

    @property
    def service(self) -> ServiceController:
        """Service controller for the runtime service."""
        return self._service

    @property
    @abstractmethod
    def package_manager(self) -> PackageManager:
        """Package manager this dialect drives."""

    @property
    @abstractmethod
    def package_tool(self) -> str:
        """Executable of the package manager."""

    @abstractmethod
    def runtime_install_sequence(self) -> list[list[str]]:
        """Commands installing the runtime packages, in order.

        Includes repository registration where the package manager needs it.
        """

    def compose_install_sequence(self) -> list[list[str]]:
        """Commands installing compose v2 when it is missing.

        Defaults to downloading the release binary from GitHub.
        """
        url = COMPOSE_RELEASE_URL.format(version=self._compose_version, arch=platform.machine())
        return [
            ["mkdir", "-p", str(COMPOSE_BINARY_PATH.parent)],
            ["curl", "-fSL", url, "-o", str(COMPOSE_BINARY_PATH)],
            ["chmod", "+x", str(COMPOSE_BINARY_PATH)],
            ["ln", "-sf", str(COMPOSE_BINARY_PATH), str(COMPOSE_LINK_PATH)],
        ]

    def is_available(self) -> bool:
        """Check if the package manager is installed."""
        return command_exists(self.package_tool)

    # -- runtime ---------------------------------------------------------------

    def runtime_installed(self) -> bool:
        """Check if the runtime binary is on the PATH."""
        return command_exists(self.RUNTIME_BINARY)

    def ensure_runtime_installed(self) -> StepStatus:
        """Install, enable and start the container runtime if needed.

        Returns:
            ALREADY_SATISFIED if the runtime was installed, enabled and
            running; APPLIED otherwise.

        Raises:
            InstallationFailedError: If any step of the installation fails.
        """
        installed = self.runtime_installed()
        if installed and self._service.is_enabled_and_active():
            logger.info("Runtime already installed and running")
            return StepStatus.ALREADY_SATISFIED

        if not installed:
            if not self.is_available():
                msg = f"{self.package_tool} is not available on this system"
                raise InstallationFailedError(msg)
            logger.info("Installing runtime with %s", self.package_tool)
            for args in self.runtime_install_sequence():
                self._run_or_raise(args, InstallationFailedError)

        try:
            self.enable_and_start_service()
        except ServiceError as e:
            raise InstallationFailedError(str(e)) from e

        if not self._dry_run and not self.runtime_installed():
            msg = f"{self.RUNTIME_BINARY} not found after installation"
            raise InstallationFailedError(msg)

        return StepStatus.APPLIED

    def compose_installed(self) -> bool:
        """Check for the standalone binary or the CLI plugin."""
        return command_exists("docker-compose") or command_succeeds(
            [self.RUNTIME_BINARY, "compose", "version"]
        )

    def ensure_compose_installed(self) -> StepStatus:
        """Install compose v2 if neither form of it is present.

        Raises:
            ComposeInstallError: If installation fails.
        """
        if self.compose_installed():
            return StepStatus.ALREADY_SATISFIED

        for args in self.compose_install_sequence():
            self._run_or_raise(args, ComposeInstallError)
        return StepStatus.APPLIED

    # -- accounts --------------------------------------------------------------

    def user_exists(self, name: str) -> bool:
        """Check the user database for a user."""
        return command_succeeds(["id", "-u", name])

    def group_exists(self, name: str) -> bool:
        """Check the group database for a group."""
        return command_succeeds(["getent", "group", name])

    def is_member(self, user: str, group: str) -> bool:
        """Check if a user belongs to a group.

        A lookup that cannot run or times out counts as not a member.
        """
        try:
            result = run_command(["id", "-nG", user])
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return False
        return result.success and group in result.stdout.split()

    def ensure_user(self, spec: UserSpec) -> StepStatus:
        """Create a user unless it exists.

        Raises:
            ResourceError: If the user cannot be created.
        """
        if self.user_exists(spec.name):
            return StepStatus.ALREADY_SATISFIED

        self._run_or_raise(self._accounts.create_user(spec.name), ResourceError)
        logger.info("Created user %s", spec.name)
        return StepStatus.APPLIED

    def ensure_group(self, spec: GroupSpec) -> StepStatus:
        """Create a group unless it exists.

        Raises:
            ResourceError: If the group cannot be created.
        """
        if self.group_exists(spec.name):
            return StepStatus.ALREADY_SATISFIED

        self._run_or_raise(self._accounts.create_group(spec.name), ResourceError)
        logger.info("Created group %s", spec.name)
        return StepStatus.APPLIED

    def ensure_membership(self, spec: MembershipSpec) -> StepStatus:
        """Add a user to a group unless already a member.

        Candidate primitives are tried in order and the first success wins.
        A primitive whose executable is missing is skipped and recorded as
        unavailable.

        Raises:
            MembershipFailedError: If every candidate primitive failed.
        """
        user, group = spec.user.name, spec.group.name
        if self.is_member(user, group):
            return StepStatus.ALREADY_SATISFIED

        attempts: list[PrimitiveAttempt] = []
        for primitive in self._accounts.membership_primitives(user, group):
            if not command_exists(primitive.executable):
                logger.info("%s is not available, trying next primitive", primitive.name)
                attempts.append(PrimitiveAttempt(primitive.name, available=False))
                continue

            result = run_privileged(list(primitive.args), dry_run=self._dry_run)
            if result.success:
                logger.info("Added %s to %s with %s", user, group, primitive.name)
                return StepStatus.APPLIED
            attempts.append(
                PrimitiveAttempt(primitive.name, available=True, detail=result.diagnostic)
            )

        raise MembershipFailedError(user, group, attempts)

    # -- service ---------------------------------------------------------------

    def enable_and_start_service(self) -> StepStatus:
        """Enable the runtime service at boot and start it now.

        Raises:
            ServiceError: If the init system rejects either action.
        """
        result = self._service.enable_and_start()
        if not result.success:
            msg = f"Could not enable and start {self.SERVICE_NAME}: {result.diagnostic}"
            raise ServiceError(msg)
        return StepStatus.APPLIED

    def restart_service(self) -> StepStatus:
        """Restart the runtime service so configuration changes take effect.

        Raises:
            ServiceError: If the restart command fails.
        """
        result = self._service.restart()
        if not result.success:
            msg = f"Could not restart {self.SERVICE_NAME}: {result.diagnostic}"
            raise ServiceError(msg)
        return StepStatus.APPLIED

    def _run_or_raise(self, args: list[str], error: type[ConvergeError]) -> CommandResult:
        """Run a state-changing command, raising `error` if it fails."""
        result = run_privileged(args, dry_run=self._dry_run)
        if not result.success:
            msg = f"{shlex.join(args)} failed: {result.diagnostic}"
            raise error(msg)
        return result
