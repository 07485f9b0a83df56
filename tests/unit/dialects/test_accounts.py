"""Unit tests for account command dialects."""

from dockhand.dialects.accounts import (
    BusyBoxCommands,
    Primitive,
    ShadowUtilsCommands,
    get_account_commands,
)
from dockhand.models.platform import UserDialect


class TestShadowUtilsCommands:
    """Tests for useradd-style commands."""

    def test_create_commands(self) -> None:
        """Users get a home directory; groups are plain."""
        commands = ShadowUtilsCommands()

        assert commands.create_user("Ed") == ["useradd", "-m", "Ed"]
        assert commands.create_group("Crew_Officers") == ["groupadd", "Crew_Officers"]

    def test_membership_primitives(self) -> None:
        """usermod is preferred over gpasswd."""
        primitives = ShadowUtilsCommands().membership_primitives("Ed", "Crew")

        assert [p.name for p in primitives] == ["usermod", "gpasswd"]
        assert primitives[0].args == ("usermod", "-aG", "Crew", "Ed")
        assert primitives[1].args == ("gpasswd", "-a", "Ed", "Crew")


class TestBusyBoxCommands:
    """Tests for adduser-style commands."""

    def test_create_commands(self) -> None:
        """Users are created without a password prompt."""
        commands = BusyBoxCommands()

        assert commands.create_user("Ed") == ["adduser", "-D", "Ed"]
        assert commands.create_group("Crew") == ["addgroup", "Crew"]

    def test_membership_primitives(self) -> None:
        """usermod first, then busybox addgroup USER GROUP."""
        primitives = BusyBoxCommands().membership_primitives("Ed", "Crew")

        assert [p.executable for p in primitives] == ["usermod", "addgroup"]
        assert primitives[1].args == ("addgroup", "Ed", "Crew")


class TestGetAccountCommands:
    """Tests for get_account_commands factory."""

    def test_mapping(self) -> None:
        """Each user dialect maps to its builder."""
        assert isinstance(get_account_commands(UserDialect.USERADD_STYLE), ShadowUtilsCommands)
        assert isinstance(get_account_commands(UserDialect.ADDUSER_STYLE), BusyBoxCommands)

    def test_primitive_executable(self) -> None:
        """The executable is the first argument."""
        assert Primitive("gpasswd", ("gpasswd", "-a", "u", "g")).executable == "gpasswd"
