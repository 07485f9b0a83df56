"""Desired-state model.

This module defines the Pydantic model describing the state a host is
converged to. The CLI builds one instance per run and hands it to the
converger; nothing in the core reads global configuration.
"""

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dockhand.models.resource import GroupSpec, MembershipSpec, UserSpec

DEFAULT_MTU = 1500
DEFAULT_LOG_DRIVER = "json-file"
DEFAULT_LOG_OPTS: dict[str, str] = {"max-size": "10m", "max-file": "3"}
DEFAULT_COMPOSE_VERSION = "v2.23.0"


class DesiredState(BaseModel):
    """Desired state of a container host.

    Attributes:
        users: User names that must exist.
        groups: Group names that must exist; every user joins every group.
        mtu: Network MTU applied to the container daemon.
        verbose: Surface informational steps to the log.
        log_driver: Container log driver written to the daemon configuration.
        log_opts: Options for the log driver.
        compose_version: Compose v2 release installed where it is downloaded.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    users: Annotated[
        tuple[str, ...],
        Field(description="Users to create (space-separated string or list)"),
    ] = ()
    groups: Annotated[
        tuple[str, ...],
        Field(description="Groups to create (space-separated string or list)"),
    ] = ()
    mtu: Annotated[
        int,
        Field(ge=68, le=65535, description="Container network MTU"),
    ] = DEFAULT_MTU
    verbose: Annotated[bool, Field(description="Enable informational output")] = False
    log_driver: Annotated[
        str,
        Field(min_length=1, description="Daemon log driver"),
    ] = DEFAULT_LOG_DRIVER
    log_opts: Annotated[
        dict[str, str],
        Field(default_factory=lambda: dict(DEFAULT_LOG_OPTS), description="Log driver options"),
    ]
    compose_version: Annotated[
        str,
        Field(pattern=r"^v\d+\.\d+\.\d+$", description="Compose v2 release tag"),
    ] = DEFAULT_COMPOSE_VERSION

    @field_validator("users", mode="before")
    @classmethod
    def split_users(cls, v: Any) -> Any:
        """Accept a space-separated string and drop duplicates."""
        if isinstance(v, str):
            v = v.split()
        if isinstance(v, (list, tuple)):
            return tuple(dict.fromkeys(str(name).strip() for name in v if str(name).strip()))
        return v

    @field_validator("groups", mode="before")
    @classmethod
    def split_groups(cls, v: Any) -> Any:
        """Accept a space-separated string; list entries may contain spaces."""
        if isinstance(v, str):
            v = v.split()
        if isinstance(v, (list, tuple)):
            return tuple(str(name) for name in v if str(name).strip())
        return v

    @field_validator("users")
    @classmethod
    def validate_user_names(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """User names cannot contain whitespace."""
        for name in v:
            if any(c.isspace() for c in name):
                msg = f"User name cannot contain whitespace: {name!r}"
                raise ValueError(msg)
        return v

    def user_specs(self) -> list[UserSpec]:
        """Users to reconcile, in input order."""
        return [UserSpec(name) for name in self.users]

    def group_specs(self) -> list[GroupSpec]:
        """Groups to reconcile, in input order, deduplicated after normalization."""
        specs: dict[str, GroupSpec] = {}
        for name in self.groups:
            spec = GroupSpec(name)
            specs.setdefault(spec.name, spec)
        return list(specs.values())

    def membership_specs(self, group: GroupSpec) -> list[MembershipSpec]:
        """Memberships of every desired user in one group."""
        return [MembershipSpec(user=user, group=group) for user in self.user_specs()]

    def mtu_upserts(self) -> list[tuple[str, Any]]:
        """Daemon configuration upserts for the network MTU."""
        return [("mtu", self.mtu)]

    def logging_upserts(self) -> list[tuple[str, Any]]:
        """Daemon configuration upserts for container logging."""
        return [("log-driver", self.log_driver), ("log-opts", dict(self.log_opts))]
