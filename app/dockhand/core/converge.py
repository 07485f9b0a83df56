"""Convergence orchestration.

Runs the fixed stage sequence against one host:

    resolve profile -> install runtime -> reconcile users ->
    reconcile groups and memberships -> merge MTU -> merge logging ->
    restart service

Each stage completes before the next begins. Fatal errors abort the run
at the current stage; non-fatal errors are recorded against a single
resource and the run continues. Callers must not run two convergences
against the same host at once.
"""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from dockhand.core.daemon_config import apply_upserts
from dockhand.core.errors import (
    ComposeInstallError,
    ConvergeError,
    MembershipFailedError,
    ResourceError,
    ServiceError,
)
from dockhand.core.platform import read_host_markers, resolve
from dockhand.dialects import get_dialect
from dockhand.dialects.base import Dialect
from dockhand.models.desired import DesiredState
from dockhand.models.report import RunReport, Stage, StepStatus
from dockhand.models.resource import GroupSpec

logger = logging.getLogger(__name__)

DialectFactory = Callable[..., Dialect]


class Converger:
    """Drives one host to a desired state.

    Attributes:
        desired: Desired state of the host.
        dry_run: If True, state-changing commands and writes are only simulated.
    """

    def __init__(
        self,
        desired: DesiredState,
        *,
        os_release_path: Path | None = None,
        daemon_config_path: Path | None = None,
        dialect_factory: DialectFactory = get_dialect,
        dry_run: bool = False,
    ) -> None:
        """Initialize the converger.

        Args:
            desired: Desired state of the host.
            os_release_path: Host identity source. Default: /etc/os-release.
            daemon_config_path: Daemon configuration. Default: /etc/docker/daemon.json.
            dialect_factory: Builds the dialect for the resolved profile.
            dry_run: If True, only simulate changes.
        """
        self._desired = desired
        self._os_release_path = os_release_path
        self._daemon_config_path = daemon_config_path
        self._dialect_factory = dialect_factory
        self._dry_run = dry_run
        self._dialect: Dialect | None = None
        self._known_users: set[str] = set()
        self._config_changed = False

    @property
    def desired(self) -> DesiredState:
        return self._desired

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    @property
    def dialect(self) -> Dialect:
        """Dialect of the host; available once the profile is resolved."""
        if self._dialect is None:
            msg = "Platform profile has not been resolved"
            raise RuntimeError(msg)
        return self._dialect

    def run(self) -> RunReport:
        """Run every stage in order and report what happened.

        Returns:
            RunReport in state DONE, or ABORTED if a fatal error occurred.
        """
        report = RunReport(dry_run=self._dry_run)
        self._known_users = set()
        self._config_changed = False

        stages: list[tuple[Stage, Callable[[RunReport], None]]] = [
            (Stage.RESOLVE_PROFILE, self._resolve_profile),
            (Stage.INSTALL_RUNTIME, self._install_runtime),
            (Stage.RECONCILE_USERS, self._reconcile_users),
            (Stage.RECONCILE_GROUPS_AND_MEMBERSHIP, self._reconcile_groups),
            (Stage.MERGE_CONFIG_MTU, self._merge_mtu),
            (Stage.MERGE_CONFIG_LOGGING, self._merge_logging),
            (Stage.RESTART_SERVICE, self._restart_service),
        ]

        for stage, handler in stages:
            logger.info("Stage %s", stage.value)
            try:
                handler(report)
            except ConvergeError as e:
                report.add(stage, stage.value, StepStatus.FAILED, str(e))
                if not e.fatal:
                    logger.warning("%s failed: %s", stage.value, e)
                    continue
                logger.error("Aborting at %s: %s", stage.value, e)
                report.abort(stage, e)
                return report

        report.finish()
        return report

    def _resolve_profile(self, report: RunReport) -> None:
        markers = read_host_markers(self._os_release_path)
        profile = resolve(markers)
        report.profile = profile
        self._dialect = self._dialect_factory(
            profile,
            dry_run=self._dry_run,
            compose_version=self._desired.compose_version,
        )
        report.add(Stage.RESOLVE_PROFILE, "profile", StepStatus.ALREADY_SATISFIED, profile.label)

    def _install_runtime(self, report: RunReport) -> None:
        # InstallationFailedError propagates and aborts the run
        status = self.dialect.ensure_runtime_installed()
        report.add(Stage.INSTALL_RUNTIME, "runtime", status)

        try:
            status = self.dialect.ensure_compose_installed()
        except ComposeInstallError as e:
            report.add(Stage.INSTALL_RUNTIME, "compose", StepStatus.FAILED, str(e))
        else:
            report.add(Stage.INSTALL_RUNTIME, "compose", status)

    def _reconcile_users(self, report: RunReport) -> None:
        specs = self._desired.user_specs()
        if not specs:
            logger.info("No users specified")
            return

        for spec in specs:
            step = f"user:{spec.name}"
            try:
                status = self.dialect.ensure_user(spec)
            except ResourceError as e:
                report.add(Stage.RECONCILE_USERS, step, StepStatus.FAILED, str(e))
                continue
            self._known_users.add(spec.name)
            report.add(Stage.RECONCILE_USERS, step, status)

    def _reconcile_groups(self, report: RunReport) -> None:
        specs = self._desired.group_specs()
        if not specs:
            logger.info("No groups specified")
            return

        for group in specs:
            try:
                status = self.dialect.ensure_group(group)
            except ResourceError as e:
                report.add(
                    Stage.RECONCILE_GROUPS_AND_MEMBERSHIP,
                    f"group:{group.name}",
                    StepStatus.FAILED,
                    str(e),
                )
                self._skip_memberships(report, group, f"group {group.name} does not exist")
                continue
            report.add(Stage.RECONCILE_GROUPS_AND_MEMBERSHIP, f"group:{group.name}", status)
            self._reconcile_memberships(report, group)

    def _reconcile_memberships(self, report: RunReport, group: GroupSpec) -> None:
        for membership in self._desired.membership_specs(group):
            step = f"membership:{membership.label}"
            if membership.user.name not in self._known_users:
                detail = f"user {membership.user.name} does not exist"
                report.add(Stage.RECONCILE_GROUPS_AND_MEMBERSHIP, step, StepStatus.FAILED, detail)
                continue
            try:
                status = self.dialect.ensure_membership(membership)
            except MembershipFailedError as e:
                logger.warning("%s", e)
                report.add(Stage.RECONCILE_GROUPS_AND_MEMBERSHIP, step, StepStatus.FAILED, str(e))
                continue
            report.add(Stage.RECONCILE_GROUPS_AND_MEMBERSHIP, step, status)

    def _skip_memberships(self, report: RunReport, group: GroupSpec, reason: str) -> None:
        for membership in self._desired.membership_specs(group):
            report.add(
                Stage.RECONCILE_GROUPS_AND_MEMBERSHIP,
                f"membership:{membership.label}",
                StepStatus.FAILED,
                reason,
            )

    def _merge_mtu(self, report: RunReport) -> None:
        self._merge(
            report, Stage.MERGE_CONFIG_MTU, "daemon-config:mtu", self._desired.mtu_upserts()
        )

    def _merge_logging(self, report: RunReport) -> None:
        self._merge(
            report,
            Stage.MERGE_CONFIG_LOGGING,
            "daemon-config:logging",
            self._desired.logging_upserts(),
        )

    def _merge(
        self,
        report: RunReport,
        stage: Stage,
        step: str,
        upserts: list[tuple[str, Any]],
    ) -> None:
        # CorruptConfigError propagates and aborts the run
        outcome = apply_upserts(upserts, self._daemon_config_path, dry_run=self._dry_run)
        keys = ", ".join(key for key, _ in upserts)
        if outcome.changed:
            self._config_changed = True
            report.add(stage, step, StepStatus.APPLIED, f"set {keys}")
        else:
            report.add(stage, step, StepStatus.ALREADY_SATISFIED, f"{keys} unchanged")

    def _restart_service(self, report: RunReport) -> None:
        if not self._config_changed:
            report.add(
                Stage.RESTART_SERVICE,
                "service",
                StepStatus.ALREADY_SATISFIED,
                "configuration unchanged",
            )
            return

        try:
            status = self.dialect.restart_service()
        except ServiceError as e:
            report.add(Stage.RESTART_SERVICE, "service", StepStatus.FAILED, str(e))
            return
        report.add(Stage.RESTART_SERVICE, "service", status, "restarted")


def converge(desired: DesiredState, **kwargs: Any) -> RunReport:
    """Converge the host to a desired state.

    Args:
        desired: Desired state of the host.
        **kwargs: Passed to Converger.

    Returns:
        RunReport of the run.
    """
    return Converger(desired, **kwargs).run()
