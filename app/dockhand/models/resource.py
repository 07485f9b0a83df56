"""Resource specifications reconciled on every run.

Specs are constructed fresh from the desired state and never persisted.
"""

import re
from dataclasses import dataclass

# Character joining the words of a group name that contains whitespace
GROUP_NAME_JOINER = "_"

_WHITESPACE = re.compile(r"\s+")


def normalize_group_name(name: str) -> str:
    """Turn a display group name into a system group identifier.

    Leading and trailing whitespace is dropped and every inner run of
    whitespace becomes a single underscore, so "Crew  Officers" and
    "Crew Officers" both yield "Crew_Officers".

    Args:
        name: Group name as given in the desired state.

    Returns:
        The normalized identifier.
    """
    return _WHITESPACE.sub(GROUP_NAME_JOINER, name.strip())


@dataclass(frozen=True, slots=True)
class UserSpec:
    """A user that must exist on the host."""

    name: str

    def __post_init__(self) -> None:
        if not self.name or _WHITESPACE.search(self.name):
            msg = f"Invalid user name: {self.name!r}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class GroupSpec:
    """A group that must exist on the host.

    The name is normalized at construction, so every lookup and creation
    made through the spec uses the same identifier.

    Attributes:
        name: Normalized system group name.
    """

    name: str

    def __post_init__(self) -> None:
        normalized = normalize_group_name(self.name)
        if not normalized:
            msg = "Group name cannot be empty"
            raise ValueError(msg)
        # Frozen dataclass: bypass __setattr__ to store the normalized value
        object.__setattr__(self, "name", normalized)


@dataclass(frozen=True, slots=True)
class MembershipSpec:
    """A user that must belong to a group."""

    user: UserSpec
    group: GroupSpec

    @property
    def label(self) -> str:
        """Short identifier used in reports, e.g. 'Ed -> Crew'."""
        return f"{self.user.name} -> {self.group.name}"
