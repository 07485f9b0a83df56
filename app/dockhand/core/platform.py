"""Platform profile resolution.

Maps distribution release metadata to the dialects used on the host.
Rules are ordered and the first match wins: exact distribution+release
rules are checked before family rules, so a host carrying both tokens
always gets the exact profile. Matching is case-insensitive substring
presence, nothing fuzzier.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from dockhand.core.errors import UnsupportedPlatformError
from dockhand.core.paths import OS_RELEASE_PATH
from dockhand.models.platform import (
    InitSystem,
    PackageManager,
    PlatformProfile,
    UserDialect,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProfileRule:
    """Identity markers that select a profile.

    Attributes:
        family_token: Token naming the distribution family.
        codename_token: Release token required in addition, or None for a
            family-only rule.
        profile: Profile returned on a match.
    """

    family_token: str
    codename_token: str | None
    profile: PlatformProfile

    def matches(self, markers: str) -> bool:
        """Check if all tokens of the rule are present in the markers."""
        text = markers.lower()
        if self.family_token not in text:
            return False
        return self.codename_token is None or self.codename_token in text


_DEBIAN_FAMILY = (PackageManager.APT, InitSystem.SYSTEMD, UserDialect.USERADD_STYLE)

# Exact rules first, then family rules.
PROFILE_RULES: tuple[ProfileRule, ...] = (
    ProfileRule(
        "debian",
        "bookworm",
        PlatformProfile(*_DEBIAN_FAMILY, distribution="debian", codename="bookworm"),
    ),
    ProfileRule(
        "almalinux",
        None,
        PlatformProfile(
            PackageManager.DNF,
            InitSystem.SYSTEMD,
            UserDialect.USERADD_STYLE,
            distribution="almalinux",
        ),
    ),
    ProfileRule(
        "alpine",
        None,
        PlatformProfile(
            PackageManager.APK,
            InitSystem.OPENRC,
            UserDialect.ADDUSER_STYLE,
            distribution="alpine",
        ),
    ),
    ProfileRule(
        "debian",
        None,
        PlatformProfile(*_DEBIAN_FAMILY, distribution="debian"),
    ),
)


def read_host_markers(path: Path | None = None) -> str | None:
    """Read the host identity source.

    Args:
        path: Release metadata file. If None, uses /etc/os-release.

    Returns:
        The file content, or None if the file does not exist.

    Raises:
        UnsupportedPlatformError: If the file exists but cannot be read.
    """
    release_path = path or OS_RELEASE_PATH
    try:
        return release_path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        logger.warning("Host identity source %s not found", release_path)
        return None
    except OSError as e:
        raise UnsupportedPlatformError(None, f"Cannot read {release_path}: {e}") from e


def resolve(markers: str | None, rules: tuple[ProfileRule, ...] = PROFILE_RULES) -> PlatformProfile:
    """Resolve host identity markers to a platform profile.

    Args:
        markers: Raw release metadata, or None if the source was missing.
        rules: Ordered rules to evaluate.

    Returns:
        Profile of the first matching rule.

    Raises:
        UnsupportedPlatformError: If the markers are missing or match no rule.
    """
    if markers is None:
        raise UnsupportedPlatformError(None)

    for rule in rules:
        if rule.matches(markers):
            logger.info("Detected %s", rule.profile.label)
            return rule.profile

    raise UnsupportedPlatformError(markers)
