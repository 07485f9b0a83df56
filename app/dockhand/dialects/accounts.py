"""User and group command dialects.

Shadow-utils hosts create accounts with useradd/groupadd and manage
membership with usermod or gpasswd. Busybox hosts use adduser/addgroup;
usermod is only present there when the shadow package is installed.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from dockhand.models.platform import UserDialect


@dataclass(frozen=True, slots=True)
class Primitive:
    """One candidate command for a capability.

    Attributes:
        name: Display name used in diagnostics.
        args: Command and arguments.
    """

    name: str
    args: tuple[str, ...]

    @property
    def executable(self) -> str:
        """Program that must be installed for the primitive to run."""
        return self.args[0]


class AccountCommands(ABC):
    """Builds the commands that create accounts and memberships."""

    @property
    @abstractmethod
    def user_dialect(self) -> UserDialect:
        """Dialect these commands belong to."""

    @abstractmethod
    def create_user(self, name: str) -> list[str]:
        """Command creating a user."""

    @abstractmethod
    def create_group(self, name: str) -> list[str]:
        """Command creating a group."""

    @abstractmethod
    def membership_primitives(self, user: str, group: str) -> list[Primitive]:
        """Candidate commands adding a user to a group, in preference order."""


class ShadowUtilsCommands(AccountCommands):
    """useradd-style commands."""

    @property
    def user_dialect(self) -> UserDialect:
        return UserDialect.USERADD_STYLE

    def create_user(self, name: str) -> list[str]:
        # -m creates the home directory
        return ["useradd", "-m", name]

    def create_group(self, name: str) -> list[str]:
        return ["groupadd", name]

    def membership_primitives(self, user: str, group: str) -> list[Primitive]:
        return [
            Primitive("usermod", ("usermod", "-aG", group, user)),
            Primitive("gpasswd", ("gpasswd", "-a", user, group)),
        ]


class BusyBoxCommands(AccountCommands):
    """adduser-style commands."""

    @property
    def user_dialect(self) -> UserDialect:
        return UserDialect.ADDUSER_STYLE

    def create_user(self, name: str) -> list[str]:
        # -D skips password assignment
        return ["adduser", "-D", name]

    def create_group(self, name: str) -> list[str]:
        return ["addgroup", name]

    def membership_primitives(self, user: str, group: str) -> list[Primitive]:
        return [
            Primitive("usermod", ("usermod", "-aG", group, user)),
            Primitive("addgroup", ("addgroup", user, group)),
        ]


_ACCOUNT_COMMANDS: dict[UserDialect, type[AccountCommands]] = {
    UserDialect.USERADD_STYLE: ShadowUtilsCommands,
    UserDialect.ADDUSER_STYLE: BusyBoxCommands,
}


def get_account_commands(user_dialect: UserDialect) -> AccountCommands:
    """Create the command builder for a user dialect."""
    return _ACCOUNT_COMMANDS[user_dialect]()
