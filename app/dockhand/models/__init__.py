"""Data models for dockhand.

This module exports the core data structures used throughout the application.
"""

from dockhand.models.desired import DesiredState
from dockhand.models.platform import (
    InitSystem,
    PackageManager,
    PlatformProfile,
    UserDialect,
)
from dockhand.models.report import RunReport, RunState, Stage, StepResult, StepStatus
from dockhand.models.resource import (
    GroupSpec,
    MembershipSpec,
    UserSpec,
    normalize_group_name,
)

__all__ = [
    "DesiredState",
    "GroupSpec",
    "InitSystem",
    "MembershipSpec",
    "PackageManager",
    "PlatformProfile",
    "RunReport",
    "RunState",
    "Stage",
    "StepResult",
    "StepStatus",
    "UserDialect",
    "UserSpec",
    "normalize_group_name",
]
