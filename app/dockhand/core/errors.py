"""Exceptions raised while converging a host.

Fatal errors stop the run at the current stage. Non-fatal errors are
recorded against a single resource and the run continues.
"""

from dataclasses import dataclass
from pathlib import Path


class ConvergeError(Exception):
    """Base exception for convergence errors."""

    fatal: bool = True


class UnsupportedPlatformError(ConvergeError):
    """Raised when host identity markers match no supported distribution.

    Attributes:
        markers: Raw identity text, or None if the source was missing.
    """

    def __init__(self, markers: str | None, message: str | None = None) -> None:
        self.markers = markers
        if message is None:
            message = (
                "Host identity source not found"
                if markers is None
                else "Unrecognized distribution"
            )
        super().__init__(message)


class InstallationFailedError(ConvergeError):
    """Raised when the container runtime cannot be installed or started."""


class CorruptConfigError(ConvergeError):
    """Raised when an existing daemon configuration cannot be parsed.

    Attributes:
        path: Location of the offending document, if known.
    """

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        super().__init__(message)


class ResourceError(ConvergeError):
    """Raised when a user or group cannot be created."""

    fatal = False


class ComposeInstallError(ConvergeError):
    """Raised when the compose plugin cannot be installed."""

    fatal = False


class ServiceError(ConvergeError):
    """Raised when the runtime service cannot be restarted."""

    fatal = False


@dataclass(frozen=True, slots=True)
class PrimitiveAttempt:
    """Outcome of trying one candidate command.

    Attributes:
        primitive: Name of the command that was tried, e.g. 'usermod'.
        available: False if the executable is not installed on the host.
        detail: Error output when the command ran and failed.
    """

    primitive: str
    available: bool
    detail: str = ""

    def describe(self) -> str:
        """One-line diagnostic, distinguishing absence from failure."""
        if not self.available:
            return f"{self.primitive}: unavailable"
        return f"{self.primitive}: failed ({self.detail})"


class MembershipFailedError(ConvergeError):
    """Raised when every membership primitive failed for a user/group pair.

    Attributes:
        user: User name.
        group: Normalized group name.
        attempts: Every candidate primitive tried, in order.
    """

    fatal = False

    def __init__(self, user: str, group: str, attempts: list[PrimitiveAttempt]) -> None:
        self.user = user
        self.group = group
        self.attempts = list(attempts)
        causes = "; ".join(a.describe() for a in self.attempts) or "no primitive available"
        super().__init__(f"Could not add {user} to {group}: {causes}")

    @property
    def all_unavailable(self) -> bool:
        """Check if no candidate primitive was installed at all."""
        return all(not a.available for a in self.attempts)
