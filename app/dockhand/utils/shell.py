"""Shell execution utilities.

Provides safe subprocess execution with proper error handling.
"""

import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Administrative tools live in sbin directories that are often missing
# from an unprivileged PATH.
SYSTEM_PATH = "/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin"


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Result of a shell command execution.

    Attributes:
        stdout: Standard output from the command.
        stderr: Standard error from the command.
        returncode: Exit code of the command.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if command executed successfully."""
        return self.returncode == 0

    @property
    def diagnostic(self) -> str:
        """Best available error text for reporting."""
        return self.stderr.strip() or self.stdout.strip() or f"exit code {self.returncode}"


def run_command(
    args: list[str],
    *,
    check: bool = False,
    timeout: float | None = 60.0,
    cwd: str | None = None,
) -> CommandResult:
    """Execute a shell command and return the result.

    Args:
        args: Command and arguments to execute.
        check: If True, raise CalledProcessError on non-zero exit.
        timeout: Maximum time in seconds to wait for command. None waits
            for as long as the command runs.
        cwd: Working directory for the command. If None, uses current directory.

    Returns:
        CommandResult with stdout, stderr, and returncode.

    Raises:
        subprocess.CalledProcessError: If check=True and command fails.
        subprocess.TimeoutExpired: If command exceeds timeout.
        FileNotFoundError: If command executable is not found.
    """
    result = subprocess.run(
        args,
        capture_output=True,
        text=True,
        check=check,
        timeout=timeout,
        cwd=cwd,
    )
    return CommandResult(
        stdout=result.stdout,
        stderr=result.stderr,
        returncode=result.returncode,
    )


def command_exists(name: str) -> bool:
    """Check if a command exists in PATH or the standard system directories.

    Args:
        name: Command name to check.

    Returns:
        True if command exists, False otherwise.
    """
    return shutil.which(name) is not None or shutil.which(name, path=SYSTEM_PATH) is not None


def is_root() -> bool:
    """Check if the current process runs with root privileges."""
    return os.geteuid() == 0


def as_root(args: list[str]) -> list[str]:
    """Prefix a command with sudo unless already running as root.

    Args:
        args: Command and arguments to execute.

    Returns:
        The command, escalated when needed.
    """
    if is_root():
        return list(args)
    return ["sudo", *args]


def command_succeeds(args: list[str], *, timeout: float | None = 60.0) -> bool:
    """Run a read-only check command and report whether it exited 0.

    A missing executable or a timeout counts as failure.

    Args:
        args: Command and arguments to execute.
        timeout: Maximum time in seconds to wait for command.

    Returns:
        True if the command ran and exited 0.
    """
    try:
        return run_command(args, timeout=timeout).success
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return False


def run_privileged(
    args: list[str],
    *,
    dry_run: bool = False,
    timeout: float | None = None,
) -> CommandResult:
    """Execute a command that changes the host, escalating with sudo if needed.

    In dry-run mode the command is only logged and reported as successful.
    A missing executable is reported as exit code 127 instead of raising.

    Args:
        args: Command and arguments to execute.
        dry_run: If True, log the command without executing it.
        timeout: Maximum time in seconds to wait. None waits for as long as
            the command runs (package downloads can be slow).

    Returns:
        CommandResult of the command.
    """
    command = as_root(args)
    if dry_run:
        logger.info("Dry-run: %s", shlex.join(command))
        return CommandResult(stdout="", stderr="", returncode=0)

    logger.info("Running: %s", shlex.join(command))
    try:
        return run_command(command, timeout=timeout)
    except FileNotFoundError as e:
        return CommandResult(stdout="", stderr=str(e), returncode=127)
