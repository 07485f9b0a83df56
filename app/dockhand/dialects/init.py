"""Service control per init system.

The converger only needs two actions from the init system: enable the
runtime service and start it now, and restart it. Status checks are read-only
and run even in dry-run mode.
"""

import logging
import subprocess
from abc import ABC, abstractmethod

from dockhand.models.platform import InitSystem
from dockhand.utils.shell import CommandResult, command_succeeds, run_command, run_privileged

logger = logging.getLogger(__name__)


class ServiceController(ABC):
    """Controls one service through the host's init system.

    Attributes:
        service: Name of the managed service.
        dry_run: If True, only log state-changing commands.
    """

    def __init__(self, service: str, *, dry_run: bool = False) -> None:
        self._service = service
        self._dry_run = dry_run

    @property
    def service(self) -> str:
        """Name of the managed service."""
        return self._service

    @property
    @abstractmethod
    def init_system(self) -> InitSystem:
        """Init system this controller drives."""

    @abstractmethod
    def is_enabled(self) -> bool:
        """Check if the service starts at boot."""

    @abstractmethod
    def is_active(self) -> bool:
        """Check if the service is running."""

    @abstractmethod
    def enable_and_start(self) -> CommandResult:
        """Enable the service at boot and start it now."""

    @abstractmethod
    def restart(self) -> CommandResult:
        """Restart the service."""

    def is_enabled_and_active(self) -> bool:
        """Check if the service is both enabled and running."""
        return self.is_enabled() and self.is_active()


class SystemdController(ServiceController):
    """Service control through systemctl."""

    @property
    def init_system(self) -> InitSystem:
        return InitSystem.SYSTEMD

    def is_enabled(self) -> bool:
        return command_succeeds(["systemctl", "is-enabled", "--quiet", self._service])

    def is_active(self) -> bool:
        return command_succeeds(["systemctl", "is-active", "--quiet", self._service])

    def enable_and_start(self) -> CommandResult:
        return run_privileged(
            ["systemctl", "enable", "--now", self._service],
            dry_run=self._dry_run,
        )

    def restart(self) -> CommandResult:
        return run_privileged(["systemctl", "restart", self._service], dry_run=self._dry_run)


class OpenRCController(ServiceController):
    """Service control through OpenRC (rc-update, rc-service, service)."""

    # Runlevel the runtime service is added to
    RUNLEVEL = "boot"

    @property
    def init_system(self) -> InitSystem:
        return InitSystem.OPENRC

    def is_enabled(self) -> bool:
        """Check if the service is listed in the boot runlevel.

        `rc-update show <runlevel>` prints lines like ' docker | boot'.
        """
        try:
            result = run_command(["rc-update", "show", self.RUNLEVEL])
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return False
        if not result.success:
            return False
        return any(
            line.split("|")[0].strip() == self._service for line in result.stdout.splitlines()
        )

    def is_active(self) -> bool:
        return command_succeeds(["rc-service", self._service, "status"])

    def enable_and_start(self) -> CommandResult:
        added = run_privileged(
            ["rc-update", "add", self._service, self.RUNLEVEL],
            dry_run=self._dry_run,
        )
        if not added.success:
            return added
        return run_privileged(["service", self._service, "start"], dry_run=self._dry_run)

    def restart(self) -> CommandResult:
        return run_privileged(["service", self._service, "restart"], dry_run=self._dry_run)


_CONTROLLERS: dict[InitSystem, type[ServiceController]] = {
    InitSystem.SYSTEMD: SystemdController,
    InitSystem.OPENRC: OpenRCController,
}


def get_service_controller(
    init_system: InitSystem,
    service: str,
    *,
    dry_run: bool = False,
) -> ServiceController:
    """Create the controller for an init system.

    Args:
        init_system: Init-system dialect of the host.
        service: Service to control.
        dry_run: If True, only log state-changing commands.

    Returns:
        A ServiceController for the init system.
    """
    return _CONTROLLERS[init_system](service, dry_run=dry_run)
