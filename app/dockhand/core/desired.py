"""Desired-state file I/O.

This module loads the optional desired-state TOML file and combines it
with command-line overrides into one validated DesiredState.
"""

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from dockhand.core.paths import get_desired_state_path
from dockhand.models.desired import DesiredState


class DesiredStateError(Exception):
    """Base exception for desired-state errors."""


class DesiredStateNotFoundError(DesiredStateError):
    """Raised when the desired-state file is not found."""


class DesiredStateParseError(DesiredStateError):
    """Raised when the desired-state file cannot be parsed."""


class DesiredStateValidationError(DesiredStateError):
    """Raised when desired-state content is invalid."""


def load_desired_state(path: Path | None = None) -> DesiredState:
    """Load and validate a desired state from a TOML file.

    Example file::

        users = ["ed", "kelly"]
        groups = ["Crew Officers"]
        mtu = 1442

    Args:
        path: Path to the file. If None, uses the default desired-state path.

    Returns:
        Validated DesiredState object.

    Raises:
        DesiredStateNotFoundError: If the file doesn't exist.
        DesiredStateParseError: If the TOML syntax is invalid.
        DesiredStateValidationError: If the content doesn't match the schema.
    """
    state_path = path or get_desired_state_path()

    if not state_path.exists():
        raise DesiredStateNotFoundError(f"Desired state not found: {state_path}")

    try:
        with open(state_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise DesiredStateParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise DesiredStateError(f"Failed to read desired state: {e}") from e

    try:
        return DesiredState.model_validate(data)
    except ValidationError as e:
        raise DesiredStateValidationError(f"Invalid desired state content: {e}") from e


def build_desired_state(
    overrides: dict[str, Any],
    path: Path | None = None,
) -> DesiredState:
    """Combine the desired-state file with command-line overrides.

    An explicitly given file must exist; the default file is optional.
    Overrides whose value is None are ignored.

    Args:
        overrides: Values given on the command line.
        path: Explicit desired-state file, or None for the default location.

    Returns:
        Validated DesiredState.

    Raises:
        DesiredStateError: If the file or the combined values are invalid.
    """
    try:
        base = load_desired_state(path)
    except DesiredStateNotFoundError:
        if path is not None:
            raise
        base = DesiredState()

    data = base.model_dump()
    data.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return DesiredState.model_validate(data)
    except ValidationError as e:
        raise DesiredStateValidationError(f"Invalid desired state: {e}") from e
