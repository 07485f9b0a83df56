"""Path management for dockhand.

Host paths are fixed, well-known locations. User-level files follow the
XDG Base Directory Specification:
- Config: ~/.config/dockhand/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "dockhand"

# Structured daemon configuration managed by the merger
DAEMON_CONFIG_PATH = Path("/etc/docker/daemon.json")

# Distribution release metadata consumed by the profile resolver
OS_RELEASE_PATH = Path("/etc/os-release")

# Where the compose v2 binary is placed on dialects that download it
COMPOSE_BINARY_PATH = Path("/usr/local/bin/docker-compose")
COMPOSE_LINK_PATH = Path("/usr/bin/docker-compose")


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/dockhand/ (or XDG_CONFIG_HOME/dockhand/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_desired_state_path() -> Path:
    """Get the default desired-state file path.

    Returns:
        Path to ~/.config/dockhand/desired.toml.
    """
    return get_config_dir() / "desired.toml"


def get_theme_path() -> Path:
    """Get the user theme override path.

    Returns:
        Path to ~/.config/dockhand/theme.toml.
    """
    return get_config_dir() / "theme.toml"
