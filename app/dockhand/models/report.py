"""Run report models.

This module defines the per-step results collected while converging a
host, and the report that orders them.
"""

from dataclasses import dataclass, field
from enum import Enum

from dockhand.models.platform import PlatformProfile


class Stage(Enum):
    """Convergence stages, in execution order."""

    RESOLVE_PROFILE = "resolve-profile"
    INSTALL_RUNTIME = "install-runtime"
    RECONCILE_USERS = "reconcile-users"
    RECONCILE_GROUPS_AND_MEMBERSHIP = "reconcile-groups"
    MERGE_CONFIG_MTU = "merge-config-mtu"
    MERGE_CONFIG_LOGGING = "merge-config-logging"
    RESTART_SERVICE = "restart-service"


class StepStatus(Enum):
    """Outcome of a single step.

    Attributes:
        APPLIED: The host was changed to reach the desired state.
        ALREADY_SATISFIED: The desired state already held; nothing was done.
        FAILED: The step could not reach the desired state.
    """

    APPLIED = "applied"
    ALREADY_SATISFIED = "already-satisfied"
    FAILED = "failed"


class RunState(Enum):
    """Lifecycle state of a run."""

    RUNNING = "running"
    DONE = "done"
    ABORTED = "aborted"


@dataclass(frozen=True, slots=True)
class StepResult:
    """Result of one convergence step.

    Attributes:
        stage: Stage that produced the result.
        step: Name of the step, e.g. 'user:Ed' or 'membership:Ed -> Crew'.
        status: Outcome of the step.
        detail: Human-readable detail or raw diagnostic text.
    """

    stage: Stage
    step: str
    status: StepStatus
    detail: str = ""

    @property
    def failed(self) -> bool:
        """Check if the step failed."""
        return self.status == StepStatus.FAILED


@dataclass(slots=True)
class RunReport:
    """Ordered record of everything a convergence run did.

    Attributes:
        steps: Step results in execution order.
        state: RUNNING until the run finishes, then DONE or ABORTED.
        abort_stage: Stage that aborted the run, if any.
        abort_reason: Raw diagnostic of the fatal error, if any.
        profile: Resolved platform profile, once known.
        dry_run: Whether mutating commands were only simulated.
        error: The fatal error that aborted the run, if any.
    """

    steps: list[StepResult] = field(default_factory=list)
    state: RunState = RunState.RUNNING
    abort_stage: Stage | None = None
    abort_reason: str | None = None
    profile: PlatformProfile | None = None
    dry_run: bool = False
    error: Exception | None = None

    def add(
        self,
        stage: Stage,
        step: str,
        status: StepStatus,
        detail: str = "",
    ) -> StepResult:
        """Append a step result and return it."""
        result = StepResult(stage=stage, step=step, status=status, detail=detail)
        self.steps.append(result)
        return result

    def abort(self, stage: Stage, error: Exception) -> None:
        """Mark the run as aborted at the given stage."""
        self.state = RunState.ABORTED
        self.abort_stage = stage
        self.abort_reason = str(error)
        self.error = error

    def finish(self) -> None:
        """Mark the run as completed."""
        self.state = RunState.DONE

    @property
    def aborted(self) -> bool:
        """Check if a fatal error stopped the run."""
        return self.state == RunState.ABORTED

    @property
    def applied(self) -> list[StepResult]:
        """Steps that changed the host."""
        return [s for s in self.steps if s.status == StepStatus.APPLIED]

    @property
    def satisfied(self) -> list[StepResult]:
        """Steps whose desired state already held."""
        return [s for s in self.steps if s.status == StepStatus.ALREADY_SATISFIED]

    @property
    def failures(self) -> list[StepResult]:
        """Steps that failed, fatal or not."""
        return [s for s in self.steps if s.failed]

    def for_stage(self, stage: Stage) -> list[StepResult]:
        """Steps produced by one stage."""
        return [s for s in self.steps if s.stage == stage]

    def get(self, step: str) -> StepResult | None:
        """Find the first result for a step name."""
        for result in self.steps:
            if result.step == step:
                return result
        return None
